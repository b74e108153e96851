"""
Aggregation
===========

Per-category sums and overall totals.  Everything here is a pure function
of the record list and is simply recomputed on each redraw.
"""

from __future__ import annotations

import difflib
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import NamedTuple

from budget_tracker.records import CategoryLike, Expense, category_name

ZERO = Decimal(0)

# difflib ratio above which a single word counts as a typo of the query
FUZZY_CUTOFF = 0.75


class Totals(NamedTuple):
    net: Decimal
    spent: Decimal   # sum of negative amounts (<= 0)
    earned: Decimal  # sum of non-negative amounts (>= 0)


def aggregate_by_category(expenses: Iterable[Expense]) -> dict[CategoryLike, Decimal]:
    """Signed sum per category.  Categories with no records are absent."""
    sums: dict[CategoryLike, Decimal] = {}
    for expense in expenses:
        sums[expense.category] = sums.get(expense.category, ZERO) + expense.amount
    return sums


def split_signed(
    sums: Mapping[CategoryLike, Decimal],
) -> tuple[list[tuple[CategoryLike, Decimal]], list[tuple[CategoryLike, Decimal]]]:
    """
    Partition category sums into (earned, spent).

    Spent magnitudes are flipped positive for display.  Each list is sorted
    by category name.
    """
    earned = [(cat, amt) for cat, amt in sums.items() if amt >= 0]
    spent = [(cat, -amt) for cat, amt in sums.items() if amt < 0]
    earned.sort(key=lambda item: category_name(item[0]))
    spent.sort(key=lambda item: category_name(item[0]))
    return earned, spent


def totals(expenses: Iterable[Expense]) -> Totals:
    amounts = [e.amount for e in expenses]
    return Totals(
        net=sum(amounts, ZERO),
        spent=sum((a for a in amounts if a < 0), ZERO),
        earned=sum((a for a in amounts if a >= 0), ZERO),
    )


# ──────────────────────────────────────────────────────────────────────
# SEARCH / ORDER
# ──────────────────────────────────────────────────────────────────────

def _is_subsequence(query: str, text: str) -> bool:
    chars = iter(text)
    return all(ch in chars for ch in query)


def fuzzy_match(text: str, query: str) -> bool:
    """
    True when every character of query appears in text in order, or when a
    word of text is a close spelling of query.  Case-insensitive.
    """
    text, query = text.casefold(), query.casefold().strip()
    if not query:
        return True
    if _is_subsequence(query, text):
        return True
    return bool(difflib.get_close_matches(query, text.split(), n=1, cutoff=FUZZY_CUTOFF))


def search(expenses: Iterable[Expense], query: str) -> list[Expense]:
    """Keep the records whose description or category fuzzily matches query."""
    return [
        e for e in expenses
        if fuzzy_match(e.description, query)
        or fuzzy_match(category_name(e.category), query)
    ]


def sort_by_date(expenses: Iterable[Expense]) -> list[Expense]:
    """Newest first; records on the same day keep their file order."""
    return sorted(expenses, key=lambda e: e.date, reverse=True)
