"""Reporting utilities for HabitNexus."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Iterable, Protocol

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.colors import to_rgba  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from ..models.habit import HabitRecord  # noqa: E402
from .analytics import HEATMAP_WEEKS, heatmap_grid  # noqa: E402

_EMPTY_COLOR = "#94a3b8"


def _row_labels(grid) -> list[str]:
    """Weekday names for every other row, read from the row's own dates."""

    return [row[-1].day.strftime("%a") if index % 2 else "" for index, row in enumerate(grid)]


class ReportRenderer(Protocol):
    """Protocol describing renderer behavior."""

    def render(self, figure: Figure, *, output_path: Path) -> None:  # pragma: no cover - interface
        ...


def build_heatmap_chart(
    *,
    records: Iterable[HabitRecord],
    today: date | None = None,
    color: str = "#3b82f6",
    weeks: int = HEATMAP_WEEKS,
    title: str = "Activity",
) -> Figure:
    """Create a GitHub-style activity heatmap of the last ``weeks`` weeks.

    Cells with progress use ``color`` with opacity scaled by value; empty days
    are drawn faint grey.
    """

    grid = heatmap_grid(records, today=today, weeks=weeks)
    rgba = [
        [
            to_rgba(color, cell.intensity) if cell.value > 0 else to_rgba(_EMPTY_COLOR, cell.intensity)
            for cell in row
        ]
        for row in grid
    ]

    fig, ax = plt.subplots(figsize=(max(weeks * 0.35, 4), 3))
    ax.imshow(rgba, aspect="equal", interpolation="nearest")

    ax.set_yticks(range(7))
    ax.set_yticklabels(_row_labels(grid), fontsize=8)
    month_ticks = [
        (col, grid[0][col].day.strftime("%b"))
        for col in range(weeks)
        if col == 0 or grid[0][col].day.month != grid[0][col - 1].day.month
    ]
    ax.set_xticks([col for col, _ in month_ticks])
    ax.set_xticklabels([label for _, label in month_ticks], fontsize=8)
    for spine in ax.spines.values():
        spine.set_visible(False)
    ax.tick_params(length=0)

    active_days = sum(1 for row in grid for cell in row if cell.value > 0)
    ax.set_title(f"{title} ({active_days} active days)", fontsize=11, fontweight="bold")

    plt.tight_layout()
    return fig


def export_heatmap_png(
    *,
    records: Iterable[HabitRecord],
    output_path: Path,
    today: date | None = None,
    color: str = "#3b82f6",
    renderer: ReportRenderer | None = None,
) -> Path:
    """Render the activity heatmap to PNG and return the path."""

    fig = build_heatmap_chart(records=records, today=today, color=color)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    if renderer is not None:
        renderer.render(fig, output_path=output_path)
    else:
        fig.savefig(output_path, bbox_inches="tight", dpi=120)
    plt.close(fig)
    return output_path


__all__ = ["ReportRenderer", "build_heatmap_chart", "export_heatmap_png"]
