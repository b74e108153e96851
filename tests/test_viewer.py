import io
import os
import termios

import pytest
from rich.console import Console
from rich.layout import Layout

from budget_tracker import viewer
from budget_tracker.errors import BudgetTrackerError
from budget_tracker.viewer import Cursor, Key, decode_key, handle_key, render, visible_window
from conftest import make_expense


def sample():
    return [
        make_expense("2024-01-03", "Train ticket", "Travel", "-20"),
        make_expense("2024-01-02", "Paycheck", "Personal", "1500.00"),
        make_expense("2024-01-01", "Groceries", "Food", "-54.32"),
    ]


def draw(layout, width=140, height=30) -> str:
    console = Console(file=io.StringIO(), width=width, height=height, color_system=None)
    console.print(layout)
    return console.file.getvalue()


# ──────────────────────────────────────────────────────────────────────
# cursor
# ──────────────────────────────────────────────────────────────────────

def test_cursor_start():
    assert Cursor.start(3) == Cursor(0, 3)
    assert Cursor.start(0) == Cursor(None, 0)


def test_cursor_wraps_down():
    assert Cursor(1, 3).down() == Cursor(2, 3)
    assert Cursor(2, 3).down() == Cursor(0, 3)


def test_cursor_wraps_up():
    assert Cursor(1, 3).up() == Cursor(0, 3)
    assert Cursor(0, 3).up() == Cursor(2, 3)


def test_single_row_cursor_stays_put():
    assert Cursor(0, 1).down() == Cursor(0, 1)
    assert Cursor(0, 1).up() == Cursor(0, 1)


def test_empty_cursor_ignores_moves():
    empty = Cursor.start(0)
    assert empty.down() == empty
    assert empty.up() == empty


# ──────────────────────────────────────────────────────────────────────
# keys
# ──────────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "data, key",
    [
        (b"q", Key.QUIT),
        (b"\x1b[B", Key.DOWN),
        (b"s", Key.DOWN),
        (b"j", Key.DOWN),
        (b"\x1b[A", Key.UP),
        (b"\x1bOA", Key.UP),
        (b"w", Key.UP),
        (b"k", Key.UP),
        (b"x", Key.OTHER),
        (b"\x1b", Key.OTHER),
        (b"Q", Key.OTHER),
        (b"\x1b[B\x1b[B", Key.DOWN),
    ],
)
def test_decode_key(data, key):
    assert decode_key(data) is key


def test_handle_key_transitions():
    cursor = Cursor(0, 3)
    assert handle_key(cursor, Key.QUIT) is None
    assert handle_key(cursor, Key.DOWN) == Cursor(1, 3)
    assert handle_key(cursor, Key.UP) == Cursor(2, 3)
    assert handle_key(cursor, Key.OTHER) is cursor


def test_visible_window_follows_cursor():
    assert visible_window(5, 0, None) == (0, 5)
    assert visible_window(5, 4, 10) == (0, 5)
    assert visible_window(50, 3, 10) == (0, 10)
    assert visible_window(50, 12, 10) == (3, 13)
    assert visible_window(50, 49, 10) == (40, 50)


# ──────────────────────────────────────────────────────────────────────
# rendering
# ──────────────────────────────────────────────────────────────────────

def test_render_layout_panes():
    layout = render(sample(), Cursor(0, 3))
    assert isinstance(layout, Layout)
    for name in ("table", "totals", "expenditure", "income"):
        assert layout[name] is not None


def test_render_shows_rows_totals_and_charts():
    text = draw(render(sample(), Cursor(1, 3)))
    assert "Train ticket" in text
    assert "Groceries" in text
    assert ">>" in text
    assert "Net Total" in text
    assert "1,425.68" in text
    assert "-74.32" in text
    assert "Expenditure" in text
    assert "Income" in text
    assert "2/3" in text


def test_render_does_not_mutate_inputs():
    records = sample()
    before = list(records)
    cursor = Cursor(2, 3)
    render(records, cursor, height=20)
    assert records == before
    assert cursor == Cursor(2, 3)


def test_render_empty_store():
    text = draw(render([], Cursor.start(0)))
    assert "No expenses yet" in text
    assert "Nothing to show" in text
    assert "0/0" in text


def test_render_keeps_selected_row_visible():
    records = [make_expense(description=f"row{i:03d}") for i in range(60)]
    text = draw(render(records, Cursor(55, 60), height=30), height=30)
    assert "row055" in text
    assert "row000" not in text


# ──────────────────────────────────────────────────────────────────────
# terminal handling
# ──────────────────────────────────────────────────────────────────────

@pytest.fixture
def pty_fd():
    master, slave = os.openpty()
    yield slave
    os.close(master)
    os.close(slave)


def test_raw_terminal_restores_on_error(pty_fd):
    before = termios.tcgetattr(pty_fd)
    with pytest.raises(RuntimeError):
        with viewer.raw_terminal(pty_fd):
            assert termios.tcgetattr(pty_fd) != before
            raise RuntimeError("boom")
    assert termios.tcgetattr(pty_fd) == before


def test_raw_terminal_keeps_ctrl_c(pty_fd):
    with viewer.raw_terminal(pty_fd):
        lflag = termios.tcgetattr(pty_fd)[3]
        assert lflag & termios.ISIG
        assert not lflag & termios.ICANON


def test_raw_terminal_needs_a_tty():
    read_end, write_end = os.pipe()
    try:
        with pytest.raises(BudgetTrackerError):
            with viewer.raw_terminal(read_end):
                pass
    finally:
        os.close(read_end)
        os.close(write_end)


def test_read_key_polls_with_timeout():
    read_end, write_end = os.pipe()
    try:
        assert viewer.read_key(read_end, timeout=0.01) is None
        os.write(write_end, b"q")
        assert viewer.read_key(read_end, timeout=0.5) is Key.QUIT
    finally:
        os.close(read_end)
        os.close(write_end)


def test_run_until_quit(pty_fd, monkeypatch):
    keys = iter([None, Key.DOWN, Key.OTHER, Key.UP, Key.QUIT])
    seen = []

    def fake_read_key(fd, timeout=viewer.POLL_INTERVAL):
        return next(keys)

    real_render = viewer.render

    def spy_render(expenses, cursor, height=None):
        seen.append(cursor)
        return real_render(expenses, cursor, height)

    monkeypatch.setattr(viewer, "read_key", fake_read_key)
    monkeypatch.setattr(viewer, "render", spy_render)
    before = termios.tcgetattr(pty_fd)
    console = Console(file=io.StringIO(), width=120, height=30)

    viewer.run(sample(), console=console, fd=pty_fd)

    assert termios.tcgetattr(pty_fd) == before
    assert Cursor(1, 3) in seen
    assert seen[-1] == Cursor(0, 3)


def test_run_restores_terminal_when_loop_fails(pty_fd, monkeypatch):
    def broken_read_key(fd, timeout=viewer.POLL_INTERVAL):
        raise OSError("terminal went away")

    monkeypatch.setattr(viewer, "read_key", broken_read_key)
    before = termios.tcgetattr(pty_fd)
    console = Console(file=io.StringIO(), width=120, height=30)

    with pytest.raises(OSError):
        viewer.run(sample(), console=console, fd=pty_fd)
    assert termios.tcgetattr(pty_fd) == before
