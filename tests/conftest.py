# tests/conftest.py
from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from budget_tracker.config import HEADER
from budget_tracker.records import Expense, parse_category


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point $HOME at a temp dir so the real store is never touched."""
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


@pytest.fixture
def store_file(tmp_path: Path):
    """Factory: write a store with the header plus the given data lines."""

    def _write(*lines: str) -> Path:
        path = tmp_path / "expenses.csv"
        path.write_text("\n".join([HEADER, *lines]) + "\n", encoding="utf-8")
        return path

    return _write


def make_expense(
    when: str = "2024-01-15",
    description: str = "Groceries",
    category: str = "Food",
    amount: str = "-54.32",
) -> Expense:
    return Expense(
        date.fromisoformat(when), description, parse_category(category), Decimal(amount)
    )
