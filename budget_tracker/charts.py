"""
Chart export
============

Writes the viewer's two aggregate bar charts (expenditure and income per
category) to a PNG, for sharing outside the terminal.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import matplotlib
matplotlib.use("Agg")  # non-interactive backend, no display needed
import matplotlib.pyplot as plt
import matplotlib.ticker as ticker
import pandas as pd

from budget_tracker import __version__
from budget_tracker.aggregate import aggregate_by_category, split_signed
from budget_tracker.config import APP_NAME, EXPENDITURE_COLOUR, INCOME_COLOUR
from budget_tracker.errors import StorageUnavailable
from budget_tracker.records import CategoryLike, Expense, category_name

logger = logging.getLogger(__name__)

CHART_FILENAME = "category_chart.png"


def to_series(data: list[tuple[CategoryLike, Decimal]]) -> pd.Series:
    """Category-name-indexed float Series, in the order given."""
    return pd.Series(
        [float(amount) for _, amount in data],
        index=[category_name(category) for category, _ in data],
        dtype="float64",
    )


def _apply_chart_style() -> None:
    try:
        plt.style.use("seaborn-v0_8-darkgrid")
    except OSError:
        plt.style.use("ggplot")
    plt.rcParams.update({
        "font.size": 10,
        "axes.titlesize": 13,
        "axes.titleweight": "bold",
        "axes.spines.top": False,
        "axes.spines.right": False,
        "figure.facecolor": "#FAFAFA",
        "axes.facecolor": "#FAFAFA",
        "savefig.facecolor": "#FAFAFA",
    })


def _chart_bar(ax: plt.Axes, series: pd.Series, title: str, colour: str) -> None:
    """Horizontal bars, first category at the top."""
    if series.empty:
        ax.text(0.5, 0.5, "Nothing to show", transform=ax.transAxes,
                ha="center", va="center", fontsize=11, color="#999999")
        ax.set_title(title, pad=10)
        ax.set_xticks([])
        ax.set_yticks([])
        return

    cats = series.index.tolist()[::-1]
    vals = series.values[::-1]
    bars = ax.barh(cats, vals, color=colour, height=0.6, edgecolor="white")
    ax.bar_label(bars, labels=[f" {v:,.2f}" for v in vals], padding=4, fontsize=8)
    ax.set_title(title, pad=10)
    if series.max() > 0:
        ax.set_xlim(right=float(series.max()) * 1.25)
    ax.xaxis.set_major_formatter(ticker.FuncFormatter(lambda x, _: f"{x:,.0f}"))


def export_charts(expenses: Sequence[Expense], output_dir: str | Path) -> Path | None:
    """
    Save Expenditure and Income bar charts side by side as
    output_dir/category_chart.png.  Returns None when there is nothing to plot.
    """
    if not expenses:
        logger.info("No records, skipping chart export")
        return None

    output_dir = Path(output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageUnavailable(f"Cannot create {output_dir}: {exc.strerror or exc}") from exc

    earned, spent = split_signed(aggregate_by_category(expenses))
    _apply_chart_style()

    fig, (ax_spent, ax_earned) = plt.subplots(1, 2, figsize=(12, 5))
    try:
        _chart_bar(ax_spent, to_series(spent), "Expenditure", EXPENDITURE_COLOUR)
        _chart_bar(ax_earned, to_series(earned), "Income", INCOME_COLOUR)
        fig.text(
            0.99, 0.005,
            f"{APP_NAME} {__version__}  •  Generated {datetime.now():%d %b %Y, %H:%M}",
            ha="right", va="bottom", fontsize=7, color="#AAAAAA", style="italic",
        )
        fig.tight_layout(rect=[0, 0.03, 1, 1])
        path = output_dir / CHART_FILENAME
        fig.savefig(path, dpi=150, bbox_inches="tight")
    except OSError as exc:
        raise StorageUnavailable(f"Cannot write chart: {exc.strerror or exc}") from exc
    finally:
        plt.close(fig)

    logger.info("Wrote chart to %s", path)
    return path
