"""
Add flow
========

Line-oriented prompts for a new record.  A bad answer prints a hint and
asks the same question again; it never aborts the flow.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import TextIO, TypeVar

from rich.console import Console
from rich.prompt import Prompt

from budget_tracker import store
from budget_tracker.config import KNOWN_CATEGORIES
from budget_tracker.errors import InputClosed, InvalidUserInput
from budget_tracker.records import (
    CategoryLike,
    Expense,
    Other,
    capitalize,
    parse_amount,
    parse_category,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DATE_INPUT_FORMATS = ("%Y-%m-%d", "%Y/%m/%d")


# ──────────────────────────────────────────────────────────────────────
# PARSERS  (raise InvalidUserInput)
# ──────────────────────────────────────────────────────────────────────

def parse_date_input(text: str, today: date | None = None) -> date:
    """YYYY-MM-DD or YYYY/MM/DD; blank means today."""
    text = text.strip()
    if not text:
        return today or date.today()
    for fmt in DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise InvalidUserInput(
        "Invalid date format. Please enter the date in YYYY-MM-DD or YYYY/MM/DD format."
    )


def parse_category_input(text: str) -> CategoryLike:
    text = text.strip()
    if not text:
        raise InvalidUserInput("Please enter a category.")
    category = parse_category(text)
    if isinstance(category, Other):
        category = Other(capitalize(text))
    return category


def parse_amount_input(text: str) -> Decimal:
    try:
        return parse_amount(text)
    except ValueError:
        raise InvalidUserInput("Invalid amount. Please enter a valid number.") from None


def parse_description_input(text: str) -> str:
    text = text.strip()
    if "\n" in text or "\r" in text:
        raise InvalidUserInput("The description must fit on one line.")
    return text


# ──────────────────────────────────────────────────────────────────────
# PROMPTS
# ──────────────────────────────────────────────────────────────────────

class _LinePrompt(Prompt):
    """Prompt that reports end of input on a stream the way input() does."""

    @classmethod
    def get_input(cls, console, prompt, password, stream=None) -> str:
        answer = super().get_input(console, prompt, password, stream=stream)
        # a blank line still reads as "\n"; only a closed stream gives ""
        if stream is not None and answer == "":
            raise EOFError
        return answer


def _ask(
    console: Console,
    question: str,
    parse: Callable[[str], T],
    stream: TextIO | None = None,
) -> T:
    """Ask until parse() accepts the answer.  Raises InputClosed at end of input."""
    while True:
        try:
            answer = _LinePrompt.ask(
                question, console=console, default="", show_default=False, stream=stream
            )
        except EOFError:
            raise InputClosed(
                "No input: standard input closed before the entry was complete"
            ) from None
        try:
            return parse(answer)
        except InvalidUserInput as exc:
            logger.debug("Rejected input %r: %s", answer, exc)
            console.print(f"  [red]✗  {exc}[/red]")


def prompt_expense(
    console: Console | None = None,
    stream: TextIO | None = None,
    today: date | None = None,
) -> Expense:
    console = console or Console()
    when = _ask(
        console,
        "  [cyan]Date[/cyan] (YYYY-MM-DD or YYYY/MM/DD, leave empty for today)",
        lambda text: parse_date_input(text, today),
        stream,
    )
    description = _ask(
        console, "  [cyan]Description[/cyan]", parse_description_input, stream
    )
    category = _ask(
        console,
        f"  [cyan]Category[/cyan] ({', '.join(KNOWN_CATEGORIES)} or Other)",
        parse_category_input,
        stream,
    )
    amount = _ask(
        console,
        "  [cyan]Amount[/cyan] (negative for spending)",
        parse_amount_input,
        stream,
    )
    return Expense(when, description, category, amount)


def add_expense(
    path: str | Path | None = None,
    console: Console | None = None,
    stream: TextIO | None = None,
    today: date | None = None,
) -> Expense:
    """Prompt for one record and append it to the store."""
    console = console or Console()
    logger.debug("Adding expense ...")
    expense = prompt_expense(console, stream=stream, today=today)
    store.append(expense, path)
    console.print("  [bold green]✓[/bold green]  Added your data to the store!")
    return expense
