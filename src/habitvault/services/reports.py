"""Chart rendering for habit analytics."""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402
from matplotlib.ticker import MaxNLocator  # noqa: E402

from .analytics import AnalyticsSnapshot, AnalyticsWindow  # noqa: E402

COMPLETED_COLOR = "#4ade80"
MISSED_COLOR = "#f87171"

_WINDOW_TITLES = {
    AnalyticsWindow.WEEK: "This Week",
    AnalyticsWindow.MONTH: "This Month",
    AnalyticsWindow.ALL_TIME: "Last 3 Months",
}


def build_daily_chart(snapshot: AnalyticsSnapshot) -> Figure:
    """Grouped bar chart of completed vs missed check-ins per day.

    Week windows label every day; longer windows thin the tick labels so they
    stay readable.
    """

    labels = [row.day.strftime("%b %d") for row in snapshot.daily]
    completions = [row.completions for row in snapshot.daily]
    missed = [row.missed for row in snapshot.daily]
    positions = list(range(len(labels)))
    width = 0.4

    fig, ax = plt.subplots(figsize=(10, 5))

    if any(completions) or any(missed):
        ax.bar([p - width / 2 for p in positions], completions, width, label="Completed", color=COMPLETED_COLOR)
        ax.bar([p + width / 2 for p in positions], missed, width, label="Missed", color=MISSED_COLOR)

        step = 1 if snapshot.window is AnalyticsWindow.WEEK else max(len(labels) // 10, 1)
        ax.set_xticks(positions[::step])
        ax.set_xticklabels(labels[::step], rotation=45, ha="right", fontsize=9)
        ax.yaxis.set_major_locator(MaxNLocator(integer=True))
        ax.set_ylabel("Check-ins")
        ax.legend(loc="upper left", fontsize=9, framealpha=0.9)

        summary = (
            f"Completion rate: {snapshot.completion_rate}%\n"
            f"{snapshot.total_completions} of {snapshot.total_completions + snapshot.total_missed} check-ins"
        )
        props = dict(boxstyle="round,pad=0.5", facecolor="#F3F4F6", alpha=0.9, edgecolor="#E5E7EB")
        ax.text(0.99, 0.98, summary, transform=ax.transAxes, fontsize=9,
                ha="right", va="top", bbox=props, color="#374151")
    else:
        ax.text(0.5, 0.5, "No check-ins recorded", ha="center", va="center", fontsize=14, color="#666")
        ax.axis("off")

    ax.set_title(
        f"Daily Check-ins: {_WINDOW_TITLES[snapshot.window]}", fontsize=14, fontweight="bold", pad=12
    )
    fig.tight_layout()
    return fig


def export_daily_png(*, snapshot: AnalyticsSnapshot, output_path: Path) -> Path:
    """Render the daily chart to ``output_path`` as PNG."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = build_daily_chart(snapshot)
    try:
        fig.savefig(output_path, format="png", dpi=120)
    finally:
        plt.close(fig)
    return output_path


__all__ = ["build_daily_chart", "export_daily_png"]
