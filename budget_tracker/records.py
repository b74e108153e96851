"""
Record Model
============

One expense (or income) entry and its line format in the store:

    date,description,category,amount
    2024-01-15,Groceries,Food,-54.32

Fields are written with minimal CSV quoting, so a description without
commas or quotes produces exactly the plain comma-joined line above and a
description containing a comma is quoted instead of splitting the record.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Union

from budget_tracker.errors import MalformedRecord


DATE_FORMAT = "%Y-%m-%d"
FIELD_COUNT = 4


# ──────────────────────────────────────────────────────────────────────
# CATEGORIES
# ──────────────────────────────────────────────────────────────────────

class Category(Enum):
    FOOD = "Food"
    TRAVEL = "Travel"
    FUN = "Fun"
    MEDICAL = "Medical"
    PERSONAL = "Personal"


@dataclass(frozen=True)
class Other:
    """Any category outside the fixed set, kept verbatim."""
    text: str


CategoryLike = Union[Category, Other]

_BY_FOLDED_NAME: dict[str, Category] = {c.value.casefold(): c for c in Category}


def parse_category(text: str) -> CategoryLike:
    """Case-insensitive lookup in the fixed set; anything else is Other(text)."""
    return _BY_FOLDED_NAME.get(text.strip().casefold(), Other(text))


def category_name(category: CategoryLike) -> str:
    """Display text for a category."""
    if isinstance(category, Category):
        return category.value
    if isinstance(category, Other):
        return category.text
    raise TypeError(f"not a category: {category!r}")


def capitalize(text: str) -> str:
    """Upper-case the first character only: 'rent money' -> 'Rent money'."""
    return text[:1].upper() + text[1:]


# ──────────────────────────────────────────────────────────────────────
# EXPENSE
# ──────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Expense:
    date: date
    description: str
    category: CategoryLike
    amount: Decimal

    @property
    def is_expense(self) -> bool:
        return self.amount < 0


def serialize(expense: Expense) -> str:
    """Return the store line for an expense, without the trailing newline."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="")
    writer.writerow([
        expense.date.isoformat(),
        expense.description,
        category_name(expense.category),
        str(expense.amount),
    ])
    return buf.getvalue()


def parse_amount(text: str) -> Decimal:
    """Parse a signed decimal; raises ValueError for junk, NaN or infinity."""
    try:
        amount = Decimal(text.strip())
    except InvalidOperation:
        raise ValueError(f"not a number: {text!r}") from None
    if not amount.is_finite():
        raise ValueError(f"not a finite number: {text!r}")
    return amount


def parse_date(text: str) -> date:
    return datetime.strptime(text.strip(), DATE_FORMAT).date()


def deserialize(line: str) -> Expense:
    """
    Parse one store line.

    Raises MalformedRecord when the line does not hold exactly four fields,
    the date is not YYYY-MM-DD, or the amount is not a finite decimal.
    """
    line = line.rstrip("\r\n")
    try:
        fields = next(csv.reader([line], strict=True), [])
    except csv.Error as exc:
        raise MalformedRecord(f"bad quoting ({exc})", line) from None

    if len(fields) != FIELD_COUNT:
        raise MalformedRecord(
            f"expected {FIELD_COUNT} fields, found {len(fields)}", line
        )

    raw_date, description, raw_category, raw_amount = fields
    try:
        when = parse_date(raw_date)
    except ValueError:
        raise MalformedRecord(f"invalid date {raw_date!r}", line) from None
    try:
        amount = parse_amount(raw_amount)
    except ValueError:
        raise MalformedRecord(f"invalid amount {raw_amount!r}", line) from None

    return Expense(when, description, parse_category(raw_category), amount)
