"""
Configuration
=============

Fixed names, paths and colours shared across the app.  Everything here is a
plain module-level constant; the only runtime lookup is the editor.
"""

from __future__ import annotations

import os


# ──────────────────────────────────────────────────────────────────────
# STORAGE
# ──────────────────────────────────────────────────────────────────────

APP_NAME = "budget-tracker"

# <home>/.local/share/budget-tracker/
DATA_SUBDIR: tuple[str, ...] = (".local", "share", APP_NAME)

STORE_FILENAME = "expenses.csv"
LOG_FILENAME = "expenses.log"

HEADER = "date,description,category,amount"


# ──────────────────────────────────────────────────────────────────────
# EDITOR
# ──────────────────────────────────────────────────────────────────────

DEFAULT_EDITOR = "nano"


def editor_command() -> str:
    """Return the editor to launch: $EDITOR, or nano when unset/blank."""
    return os.environ.get("EDITOR", "").strip() or DEFAULT_EDITOR


# ──────────────────────────────────────────────────────────────────────
# VIEWER
# ──────────────────────────────────────────────────────────────────────

POLL_INTERVAL = 0.05  # seconds between key polls

# Fixed, closed set of categories (display spelling)
KNOWN_CATEGORIES: tuple[str, ...] = ("Food", "Travel", "Fun", "Medical", "Personal")

# Rich colour style for each category in the table
CATEGORY_STYLE: dict[str, str] = {
    "Food":     "green",
    "Travel":   "blue",
    "Fun":      "magenta",
    "Medical":  "red",
    "Personal": "yellow",
}
OTHER_STYLE = "white"

EXPENDITURE_STYLE = "cyan"
INCOME_STYLE = "red"

# Matplotlib colours for exported charts
EXPENDITURE_COLOUR = "#45B7D1"
INCOME_COLOUR = "#FF6B6B"
