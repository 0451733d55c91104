"""
Timeline engine.

Propagates child date ranges bottom-up and writes back only the ranges that
changed, inside the caller's transaction:

1. sub-phase  <- the tasks declared directly under it
2. phase      <- every task whose effective phase it is (sub-phase containers
                 excluded, their children count directly)
3. project    <- every phase plus every task without an effective phase

Only active rows take part and cancelled tasks are ignored. Ranges are
compared by calendar day, so a second run over unchanged data writes nothing.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, NamedTuple, Optional

from Planning.normalize import is_task_cancelled
from Planning.planner_meta import parse_planner_meta, KIND_TASK, PARENT_SUBPHASE

logger = logging.getLogger(__name__)


class DateRange(NamedTuple):
    starts_on: Optional[object] = None
    ends_on: Optional[object] = None


class PhaseTimelineRow(NamedTuple):
    id: str
    starts_on: Optional[object]
    ends_on: Optional[object]


class TaskTimelineRow(NamedTuple):
    id: str
    phase_id: str
    status: str
    objective: str
    starts_on: Optional[object]
    ends_on: Optional[object]


@dataclass
class TimelineResult:
    writes: int = 0
    project_range: DateRange = DateRange()
    phase_ranges: Dict[str, DateRange] = field(default_factory=dict)
    task_ranges: Dict[str, DateRange] = field(default_factory=dict)


def same_day(left, right) -> bool:
    if left is None or right is None:
        return left is None and right is None
    return left.strftime("%Y-%m-%d") == right.strftime("%Y-%m-%d")


def same_range(left: DateRange, right: DateRange) -> bool:
    return same_day(left.starts_on, right.starts_on) and same_day(left.ends_on, right.ends_on)


def merge_range(current: DateRange, candidate: DateRange) -> DateRange:
    """Widen `current` to cover `candidate`. A missing bound never narrows the other side."""
    start, end = current
    if candidate.starts_on is not None and (start is None or candidate.starts_on < start):
        start = candidate.starts_on
    if candidate.ends_on is not None and (end is None or candidate.ends_on > end):
        end = candidate.ends_on
    return DateRange(start, end)


def resolve_effective_phases(tasks, metas) -> Dict[str, Optional[str]]:
    """
    Map every task id to the phase it rolls up into.

    Tasks declared under another task inherit that task's phase; everything
    else uses its physical phase_id ("" when it has none). Tasks sitting on a
    parent cycle map to None and are left out of every fold.
    """
    task_by_id = {task.id: task for task in tasks}
    resolved: Dict[str, Optional[str]] = {}

    def resolve(task_id, visiting):
        if task_id in resolved:
            return resolved[task_id]
        if task_id in visiting:
            return None
        visiting.add(task_id)

        meta = metas.get(task_id)
        parent_id = meta.parent_task_id if meta else ""
        if parent_id and parent_id in task_by_id:
            phase_id = resolve(parent_id, visiting)
        else:
            phase_id = task_by_id[task_id].phase_id or ""

        visiting.discard(task_id)
        resolved[task_id] = phase_id
        return phase_id

    for task in tasks:
        resolve(task.id, set())
    return resolved


def recalculate_timeline(store, project_id: str) -> TimelineResult:
    """
    Recompute and persist the date ranges of one project.

    Args:
        store: ProjectStore bound to an open transaction
        project_id: project to recalculate

    Returns:
        TimelineResult: number of rows written and the resulting ranges
    """
    phases = store.list_phase_timeline_rows(project_id)
    tasks = store.list_task_timeline_rows(project_id)
    result = TimelineResult()

    metas = {}
    for task in tasks:
        result.task_ranges[task.id] = DateRange(task.starts_on, task.ends_on)
        meta, ok = parse_planner_meta(task.objective)
        if ok:
            metas[task.id] = meta
    live_tasks = [task for task in tasks if not is_task_cancelled(task.status)]

    # sub-phases
    for subphase in live_tasks:
        meta = metas.get(subphase.id)
        if meta is None or not meta.is_subphase:
            continue
        aggregate = DateRange()
        for candidate in live_tasks:
            candidate_meta = metas.get(candidate.id)
            if candidate_meta is None or candidate_meta.kind != KIND_TASK:
                continue
            if candidate_meta.parent_type != PARENT_SUBPHASE or candidate_meta.parent_id != subphase.id:
                continue
            aggregate = merge_range(aggregate, result.task_ranges[candidate.id])

        if not same_range(result.task_ranges[subphase.id], aggregate):
            store.update_task_dates(subphase.id, aggregate.starts_on, aggregate.ends_on)
            result.writes += 1
        result.task_ranges[subphase.id] = aggregate

    # phases
    effective_phase = resolve_effective_phases(tasks, metas)
    tasks_by_phase = {}
    for task in live_tasks:
        phase_id = effective_phase.get(task.id)
        if not phase_id:
            continue
        meta = metas.get(task.id)
        if meta is not None and meta.is_subphase:
            continue
        tasks_by_phase.setdefault(phase_id, []).append(task.id)

    for phase in phases:
        aggregate = DateRange()
        for task_id in tasks_by_phase.get(phase.id, []):
            aggregate = merge_range(aggregate, result.task_ranges[task_id])

        if not same_range(DateRange(phase.starts_on, phase.ends_on), aggregate):
            store.update_phase_dates(phase.id, aggregate.starts_on, aggregate.ends_on)
            result.writes += 1
        result.phase_ranges[phase.id] = aggregate

    # project
    aggregate = DateRange()
    for phase in phases:
        aggregate = merge_range(aggregate, result.phase_ranges[phase.id])
    for task in live_tasks:
        if effective_phase.get(task.id) == "":
            aggregate = merge_range(aggregate, result.task_ranges[task.id])

    current = DateRange(*store.load_project_dates(project_id))
    if not same_range(current, aggregate):
        store.update_project_dates(project_id, aggregate.starts_on, aggregate.ends_on)
        result.writes += 1
    result.project_range = aggregate

    logger.info("Timeline recalculated for project %s: %d writes", project_id, result.writes)
    return result
