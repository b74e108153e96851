import io
from datetime import date
from decimal import Decimal

import pytest
from rich.console import Console

from budget_tracker import store
from budget_tracker.errors import InputClosed, InvalidUserInput
from budget_tracker.prompts import (
    add_expense,
    parse_amount_input,
    parse_category_input,
    parse_date_input,
    prompt_expense,
)
from budget_tracker.records import Category, Expense, Other

TODAY = date(2024, 6, 1)


def quiet_console() -> Console:
    return Console(file=io.StringIO(), width=100)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("2024-01-15", date(2024, 1, 15)),
        ("2024/01/15", date(2024, 1, 15)),
        ("  2024-1-5 ", date(2024, 1, 5)),
        ("", TODAY),
    ],
)
def test_parse_date_input(text, expected):
    assert parse_date_input(text, today=TODAY) == expected


@pytest.mark.parametrize("text", ["15-01-2024", "yesterday", "2024-13-01"])
def test_parse_date_input_rejects(text):
    with pytest.raises(InvalidUserInput):
        parse_date_input(text, today=TODAY)


def test_parse_category_input():
    assert parse_category_input("medical") is Category.MEDICAL
    assert parse_category_input("rent") == Other("Rent")
    with pytest.raises(InvalidUserInput):
        parse_category_input("   ")


def test_parse_amount_input():
    assert parse_amount_input("-12.50") == Decimal("-12.50")
    with pytest.raises(InvalidUserInput):
        parse_amount_input("twelve")


def test_prompt_reasks_after_bad_answers():
    answers = io.StringIO(
        "not a date\n"
        "2024/02/03\n"
        "Dinner, with friends\n"
        "\n"
        "food\n"
        "lots\n"
        "-42.5\n"
    )
    console = quiet_console()

    expense = prompt_expense(console, stream=answers, today=TODAY)

    assert expense == Expense(
        date(2024, 2, 3), "Dinner, with friends", Category.FOOD, Decimal("-42.5")
    )
    output = console.file.getvalue()
    assert "Invalid date format" in output
    assert "Please enter a category" in output
    assert "Invalid amount" in output


def test_blank_date_means_today():
    answers = io.StringIO("\nSalary\nPersonal\n2000\n")
    expense = prompt_expense(quiet_console(), stream=answers, today=TODAY)
    assert expense.date == TODAY
    assert expense.amount == Decimal("2000")


def test_add_expense_appends_to_store(tmp_path):
    path = store.initialize_store(tmp_path / "expenses.csv")
    answers = io.StringIO("2024-01-15\nGroceries\nFood\n-54.32\n")

    added = add_expense(path, console=quiet_console(), stream=answers, today=TODAY)

    assert store.read_all(path) == [added]
    assert path.read_text(encoding="utf-8").endswith("2024-01-15,Groceries,Food,-54.32\n")


def test_closed_stream_stops_the_prompt(tmp_path):
    path = store.initialize_store(tmp_path / "expenses.csv")
    answers = io.StringIO("2024-01-15\nGroceries\n")

    with pytest.raises(InputClosed, match="No input"):
        add_expense(path, console=quiet_console(), stream=answers, today=TODAY)

    assert store.read_all(path) == []
