"""Remove trailing unused stations from an assigned plan."""

from __future__ import annotations

import logging

from src.line.model import AssemblyPlan

logger = logging.getLogger(__name__)


def strip_unused_stations(plan: AssemblyPlan, leave: int = 0) -> AssemblyPlan:
    """Copy of the plan without the unused stations after the last used one.

    Type 1 plans start with one station per task; once a solution exists,
    the search only needs a few spare stations beyond it.

    Args:
        plan: A fully assigned plan.
        leave: Number of unused trailing stations to keep.

    Returns:
        A new plan. If some task is unassigned, the plan is returned
        unchanged (and a warning is logged).
    """
    if leave < 0:
        raise ValueError(f"leave must be non-negative, got {leave}")
    unassigned = [t.id for t in plan.tasks if t.station is None]
    if unassigned:
        logger.warning(
            "Not stripping stations: %d tasks unassigned (e.g. task %d)",
            len(unassigned), unassigned[0],
        )
        return plan

    last_used = max((t.station.number for t in plan.tasks), default=-1)
    keep = plan.stations[: last_used + 1 + leave]
    logger.debug("Stripping %d of %d stations", plan.n_stations - len(keep), plan.n_stations)
    return plan.copy(stations=keep)
