"""
Interactive viewer
==================

Full-screen table of expenses with two bar charts (expenditure and income
per category).  The loop polls the keyboard every POLL_INTERVAL seconds
and redraws from scratch:

    q            quit
    Down / s / j next row (wraps to the top)
    Up   / w / k previous row (wraps to the bottom)

render() is a pure function of the records and the cursor; all terminal
state lives in raw_terminal() and rich's Live, both of which restore the
terminal on every way out of run().
"""

from __future__ import annotations

import logging
import os
import select
import sys
import termios
import tty
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from rich import box
from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from budget_tracker.aggregate import aggregate_by_category, split_signed, totals
from budget_tracker.config import (
    CATEGORY_STYLE,
    EXPENDITURE_STYLE,
    INCOME_STYLE,
    OTHER_STYLE,
    POLL_INTERVAL,
)
from budget_tracker.errors import BudgetTrackerError
from budget_tracker.records import CategoryLike, Expense, category_name

logger = logging.getLogger(__name__)

TOTALS_HEIGHT = 7
# panel borders + header row + header rule + the totals pane
TABLE_CHROME = 4 + TOTALS_HEIGHT
HIGHLIGHT_SYMBOL = ">>"


# ──────────────────────────────────────────────────────────────────────
# KEYS
# ──────────────────────────────────────────────────────────────────────

class Key(Enum):
    QUIT = "quit"
    UP = "up"
    DOWN = "down"
    OTHER = "other"


_KEYMAP: dict[bytes, Key] = {
    b"q": Key.QUIT,
    b"\x1b[A": Key.UP,
    b"\x1bOA": Key.UP,
    b"w": Key.UP,
    b"k": Key.UP,
    b"\x1b[B": Key.DOWN,
    b"\x1bOB": Key.DOWN,
    b"s": Key.DOWN,
    b"j": Key.DOWN,
}


def decode_key(data: bytes) -> Key:
    """Map raw bytes read from the terminal to a Key."""
    if data in _KEYMAP:
        return _KEYMAP[data]
    # several bytes in one read: only the first key counts
    for raw, key in _KEYMAP.items():
        if data.startswith(raw):
            return key
    return Key.OTHER


# ──────────────────────────────────────────────────────────────────────
# CURSOR
# ──────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Cursor:
    selected: int | None
    size: int

    @classmethod
    def start(cls, size: int) -> "Cursor":
        return cls(0 if size > 0 else None, size)

    def down(self) -> "Cursor":
        if self.selected is None:
            return self
        nxt = 0 if self.selected >= self.size - 1 else self.selected + 1
        return replace(self, selected=nxt)

    def up(self) -> "Cursor":
        if self.selected is None:
            return self
        nxt = self.size - 1 if self.selected == 0 else self.selected - 1
        return replace(self, selected=nxt)


def handle_key(cursor: Cursor, key: Key) -> Cursor | None:
    """Apply one key press.  None means the viewer should quit."""
    if key is Key.QUIT:
        return None
    if key is Key.DOWN:
        return cursor.down()
    if key is Key.UP:
        return cursor.up()
    return cursor


def visible_window(size: int, selected: int | None, limit: int | None) -> tuple[int, int]:
    """Return (start, stop) of the rows to draw so that selected stays on screen."""
    if limit is None or size <= limit:
        return 0, size
    limit = max(limit, 1)
    if selected is None or selected < limit:
        return 0, limit
    start = selected - limit + 1
    return start, start + limit


# ──────────────────────────────────────────────────────────────────────
# RENDERING
# ──────────────────────────────────────────────────────────────────────

def _fmt_amount(amount: Decimal) -> str:
    return f"{amount:,.2f}"


def _cat_style(category: CategoryLike) -> str:
    return CATEGORY_STYLE.get(category_name(category), OTHER_STYLE)


def _expense_table(
    expenses: Sequence[Expense], cursor: Cursor, limit: int | None
) -> Panel:
    table = Table(
        box=box.SIMPLE_HEAD,
        show_edge=False,
        expand=True,
        header_style="bold",
        padding=(0, 1),
    )
    table.add_column("", width=len(HIGHLIGHT_SYMBOL), no_wrap=True)
    table.add_column("Date", min_width=10, no_wrap=True)
    table.add_column("Description", ratio=1, no_wrap=True)
    table.add_column("Type", min_width=10, no_wrap=True)
    table.add_column("Amount", justify="right", min_width=10, no_wrap=True)

    start, stop = visible_window(len(expenses), cursor.selected, limit)
    for index in range(start, stop):
        expense = expenses[index]
        selected = index == cursor.selected
        amount_style = "red" if expense.is_expense else "green"
        table.add_row(
            HIGHLIGHT_SYMBOL if selected else "",
            expense.date.isoformat(),
            Text(expense.description),
            Text(category_name(expense.category), style=_cat_style(expense.category)),
            Text(_fmt_amount(expense.amount), style=amount_style),
            style="reverse" if selected else None,
        )

    if not expenses:
        table.add_row("", "", Text("No expenses yet. Add one with --add.", style="dim"), "", "")

    position = (
        f"{cursor.selected + 1}/{cursor.size}" if cursor.selected is not None else "0/0"
    )
    return Panel(
        table,
        title="[bold]Expenses[/bold]",
        subtitle=f"[dim]{position}  •  ↑/↓ move  •  q quit[/dim]",
        border_style="bright_cyan",
    )


def _totals_panel(expenses: Sequence[Expense]) -> Panel:
    net, spent, earned = totals(expenses)
    grid = Table.grid(expand=True, padding=(0, 2))
    grid.add_column()
    grid.add_column(justify="right")
    grid.add_row("[bold]Net Total[/bold]", f"[bold]{_fmt_amount(net)}[/bold]")
    grid.add_row("[bold]Total Spent[/bold]", f"[bold red]{_fmt_amount(spent)}[/bold red]")
    grid.add_row("[bold]Total Earned[/bold]", f"[bold green]{_fmt_amount(earned)}[/bold green]")
    return Panel(grid, title="[bold]Totals[/bold]", border_style="bright_cyan", padding=(1, 2))


def _bar_chart(
    title: str, data: list[tuple[CategoryLike, Decimal]], style: str
) -> Panel:
    """One horizontal bar per category, scaled to the largest value."""
    if not data:
        body = Text("Nothing to show", style="dim", justify="center")
        return Panel(body, title=f"[bold]{title}[/bold]", border_style=style)

    largest = float(max(amount for _, amount in data)) or 1.0
    grid = Table.grid(expand=True, padding=(0, 1))
    grid.add_column(no_wrap=True, min_width=8)
    grid.add_column(ratio=1)
    grid.add_column(justify="right", no_wrap=True)
    for category, amount in data:
        grid.add_row(
            Text(category_name(category)),
            ProgressBar(
                total=largest,
                completed=float(amount),
                complete_style=style,
                finished_style=style,
            ),
            f"[bold]{_fmt_amount(amount)}[/bold]",
        )
    return Panel(grid, title=f"[bold]{title}[/bold]", border_style=style, padding=(1, 1))


def render(
    expenses: Sequence[Expense], cursor: Cursor, height: int | None = None
) -> Layout:
    """
    Build the screen: expense table over totals on the left, expenditure
    chart over income chart on the right.  Does not modify its inputs.
    """
    limit = max(height - TABLE_CHROME, 1) if height is not None else None
    earned, spent = split_signed(aggregate_by_category(expenses))

    layout = Layout(name="root")
    layout.split_row(
        Layout(name="left", ratio=3),
        Layout(name="right", ratio=2),
    )
    layout["left"].split_column(
        Layout(_expense_table(expenses, cursor, limit), name="table"),
        Layout(_totals_panel(expenses), name="totals", size=TOTALS_HEIGHT),
    )
    layout["right"].split_column(
        Layout(_bar_chart("Expenditure", spent, EXPENDITURE_STYLE), name="expenditure"),
        Layout(_bar_chart("Income", earned, INCOME_STYLE), name="income"),
    )
    return layout


# ──────────────────────────────────────────────────────────────────────
# TERMINAL
# ──────────────────────────────────────────────────────────────────────

@contextmanager
def raw_terminal(fd: int) -> Iterator[None]:
    """
    Put the terminal on fd into cbreak mode (no echo, no line buffering)
    and restore the saved settings on exit, including exits by exception.

    This is cbreak, not full raw mode: ISIG stays on, so Ctrl-C still raises
    KeyboardInterrupt in the key loop and the terminal is restored on the
    way out to main().
    """
    if not os.isatty(fd):
        raise BudgetTrackerError("The viewer needs an interactive terminal")
    saved = termios.tcgetattr(fd)
    try:
        tty.setcbreak(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def read_key(fd: int, timeout: float = POLL_INTERVAL) -> Key | None:
    """Wait up to timeout for input on fd; None when nothing arrived."""
    ready, _, _ = select.select([fd], [], [], timeout)
    if not ready:
        return None
    data = os.read(fd, 32)
    key = decode_key(data)
    logger.debug("Read in key: %r -> %s", data, key.name)
    return key


def run(
    expenses: Sequence[Expense],
    console: Console | None = None,
    fd: int | None = None,
) -> None:
    """Show the viewer until q is pressed."""
    console = console or Console()
    fd = sys.stdin.fileno() if fd is None else fd
    cursor: Cursor | None = Cursor.start(len(expenses))

    logger.info("Starting the viewer with %d record(s)", len(expenses))
    with raw_terminal(fd), Live(
        render(expenses, cursor, console.size.height),
        console=console,
        screen=True,
        auto_refresh=False,
    ) as live:
        while cursor is not None:
            live.update(render(expenses, cursor, console.size.height), refresh=True)
            key = read_key(fd)
            if key is not None:
                cursor = handle_key(cursor, key)
    logger.info("Viewer closed")
