"""
Budget Tracker: log expenses and browse them in the terminal
============================================================

Records live in ~/.local/share/budget-tracker/expenses.csv.

Usage:
    budget-tracker                  # interactive table + charts
    budget-tracker --add            # prompt for a new record
    budget-tracker --edit           # open the store in $EDITOR
    budget-tracker --search food    # viewer, fuzzy-filtered
    budget-tracker --export charts  # write the bar charts as a PNG
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape

from budget_tracker import __version__, prompts, store, viewer
from budget_tracker.aggregate import search, sort_by_date
from budget_tracker.config import LOG_FILENAME, STORE_FILENAME
from budget_tracker.errors import BudgetTrackerError
from budget_tracker.logs import configure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="budget-tracker",
        description="Track expenses in a CSV file and browse them in the terminal.",
    )
    action = parser.add_mutually_exclusive_group()
    action.add_argument("-a", "--add", action="store_true", help="add an entry")
    action.add_argument("-e", "--edit", action="store_true",
                        help="edit entries in $EDITOR")
    action.add_argument("--export", metavar="DIR",
                        help="write the category bar charts to DIR and exit")
    parser.add_argument("-s", "--search", metavar="QUERY",
                        help="fuzzy-filter entries by description or category")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="debug logging, echoed to stderr")
    parser.add_argument("--version", action="version",
                        version=f"%(prog)s {__version__}")
    return parser


def _run(args: argparse.Namespace, console: Console) -> int:
    directory = store.ensure_data_dir()
    configure_logging(directory / LOG_FILENAME, verbose=args.verbose)
    logger.info("====Starting program====")
    path = directory / STORE_FILENAME

    if args.add:
        store.initialize_store(path)
        prompts.add_expense(path, console=console)
        logger.info("Added the expense successfully")
        return EXIT_OK

    if args.edit:
        store.initialize_store(path)
        store.open_in_external_editor(path)
        logger.info("Edited file successfully")
        return EXIT_OK

    expenses = store.load_or_initialize(path)
    if args.search:
        logger.info("Found user query: %s", args.search)
        expenses = search(expenses, args.search)
    expenses = sort_by_date(expenses)

    if args.export:
        # matplotlib is only loaded for --export
        from budget_tracker.charts import export_charts

        chart = export_charts(expenses, args.export)
        if chart is None:
            console.print("  [yellow]⚠  No records, nothing to chart.[/yellow]")
        else:
            console.print(f"  [bold green]✓[/bold green]  Chart → {escape(str(chart))}")
        return EXIT_OK

    viewer.run(expenses, console=console)
    return EXIT_OK


def main(argv: Sequence[str] | None = None, console: Console | None = None) -> int:
    """Command-line entry point; returns the process exit status."""
    args = build_parser().parse_args(argv)
    console = console or Console()
    try:
        status = _run(args, console)
        logger.info("====Exiting the program====")
        return status
    except BudgetTrackerError as exc:
        logger.error("%s", exc)
        Console(stderr=True).print(
            f"[bold red]✗[/bold red]  {escape(str(exc))}", soft_wrap=True
        )
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    raise SystemExit(main())
