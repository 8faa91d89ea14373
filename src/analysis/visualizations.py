"""
Assembly plan visualization.

Renders station loads as a stacked bar chart:
- One bar per declared station, stacked by task (labelled with task ids)
- A dashed line at the fixed cycle time (type 1) or the lower bound on
  the cycle time (type 2)
- Bars over the cycle time highlighted

Usage:
    from src.construction import construct
    from src.analysis.visualizations import plot_station_loads

    plan = construct(problem, seed=123, strategy="breadth-first")
    fig = plot_station_loads(plan)
    fig.savefig("station_loads.png", dpi=150, bbox_inches="tight")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import matplotlib.pyplot as plt
import numpy as np

from src.line.model import AssemblyPlan
from src.scoring.calculators import evaluate
from src.scoring.features import lower_bound_cycle_time

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from matplotlib.figure import Figure


# ── Styling constants ────────────────────────────────────────────

TASK_COLOR = "#6baed6"
OVERLOAD_COLOR = "#e6550d"
EDGE_COLOR = "white"
CYCLE_TIME_COLOR = "#636363"


def plot_station_loads(
    plan: AssemblyPlan,
    title: str | None = None,
    figsize: tuple[float, float] | None = None,
    show_task_labels: bool = True,
    used_only: bool = False,
) -> Figure:
    """Render the plan's station loads.

    Args:
        plan: The AssemblyPlan to plot (assigned tasks only are drawn).
        title: Plot title. Defaults to the plan's score.
        figsize: Figure size in inches. Auto-calculated if None.
        show_task_labels: Write task ids inside the stacked segments.
        used_only: Skip stations without tasks.

    Returns:
        matplotlib Figure object.
    """
    assignments = plan.station_assignments()
    if used_only:
        numbers = [s.number for s in assignments]
    else:
        numbers = [s.number for s in plan.stations]
    by_number = {s.number: tasks for s, tasks in assignments.items()}

    limit = plan.cycle_time
    if limit is None and plan.tasks and plan.stations:
        limit = lower_bound_cycle_time(plan)

    # ── Figure sizing ────────────────────────────────────────────
    if figsize is None:
        figsize = (min(18, max(6, 0.5 * len(numbers) + 2)), 5)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    positions = np.arange(len(numbers))
    for pos, number in zip(positions, numbers):
        _draw_station(ax, pos, by_number.get(number, []), limit, show_task_labels)

    if limit is not None:
        label = "cycle time" if plan.is_type1 else "cycle time lower bound"
        ax.axhline(limit, color=CYCLE_TIME_COLOR, linestyle="--", linewidth=1.2, label=label)
        ax.legend(loc="upper right", fontsize=9)

    ax.set_xticks(positions)
    ax.set_xticklabels([str(n) for n in numbers], fontsize=8)
    ax.set_xlabel("Station")
    ax.set_ylabel("Load")
    ax.set_title(title or f"Station loads ({evaluate(plan)})", fontsize=11, fontweight="bold")
    ax.grid(True, axis="y", alpha=0.2)
    fig.tight_layout()
    return fig


def _draw_station(ax: Axes, pos: float, tasks: list, limit: int | None, labels: bool) -> None:
    load = sum(t.time for t in tasks)
    color = OVERLOAD_COLOR if limit is not None and load > limit else TASK_COLOR
    bottom = 0
    for task in tasks:
        ax.bar(pos, task.time, bottom=bottom, color=color, edgecolor=EDGE_COLOR, linewidth=0.8)
        if labels:
            ax.text(
                pos,
                bottom + task.time / 2,
                str(task.id),
                ha="center",
                va="center",
                fontsize=7,
            )
        bottom += task.time
