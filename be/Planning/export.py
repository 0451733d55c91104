"""
Export view builder.

Flattens the planning tree of a project depth-first into ordered rows with
level, kind, progress and status, plus a project summary. The same view
feeds the JSON export and the PDF report.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from Planning.hierarchy import (
    resolve_hierarchy, PlanningTree, UNLINKED_PHASE_ID, UNLINKED_PHASE_TITLE, UNLINKED_PHASE_DESCRIPTION,
)
from Planning.normalize import export_task_status
from Planning.progress import compute_progress, status_from_percent, ProgressReport

KIND_PHASE = "phase"
KIND_SUBPHASE = "subphase"
KIND_TASK = "task"


@dataclass
class PlanningRow:
    id: str
    parent_id: str
    level: int
    kind: str
    phase_id: str
    title: str
    description: str
    starts_on: Optional[object]
    ends_on: Optional[object]
    status: str
    progress_percent: int
    position: int
    files: list = field(default_factory=list)


@dataclass
class ExportSummary:
    project_percent: int = 0
    total_phases: int = 0
    total_tasks: int = 0
    total_tracked_tasks: int = 0
    total_completed_tasks: int = 0


@dataclass
class ProjectExport:
    project: object
    summary: ExportSummary
    planning: List[PlanningRow]
    generated_at: datetime


def _phase_row(phase, percent: int) -> PlanningRow:
    return PlanningRow(
        id=phase.id,
        parent_id="",
        level=0,
        kind=KIND_PHASE,
        phase_id=phase.id,
        title=phase.name,
        description=phase.description or "",
        starts_on=phase.starts_on,
        ends_on=phase.ends_on,
        status=status_from_percent(percent),
        progress_percent=percent,
        position=phase.position or 0,
        files=list(phase.files or []),
    )


def _append_task_rows(rows, tree: PlanningTree, progress: ProgressReport, task_id, parent_id, phase_id, level,
                      emitted):
    if task_id in emitted or task_id not in tree.task_by_id:
        return
    emitted.add(task_id)

    task = tree.task_by_id[task_id]
    percent = progress.task_percent(task_id)
    is_subphase = tree.is_subphase(task_id)
    if is_subphase or tree.has_children(task_id):
        status = status_from_percent(percent)
    else:
        status = export_task_status(task.status)

    rows.append(PlanningRow(
        id=task.id,
        parent_id=parent_id,
        level=level,
        kind=KIND_SUBPHASE if is_subphase else KIND_TASK,
        phase_id=phase_id,
        title=task.name,
        description=task.description or "",
        starts_on=task.starts_on,
        ends_on=task.ends_on,
        status=status,
        progress_percent=percent,
        position=task.position or 0,
        files=list(task.files or []),
    ))

    for child_id in tree.ordered_task_ids(tree.children_of(task_id)):
        _append_task_rows(rows, tree, progress, child_id, task.id, phase_id, level + 1, emitted)


def flatten_planning(tree: PlanningTree, progress: ProgressReport) -> List[PlanningRow]:
    rows = []
    emitted = set()

    for phase in tree.ordered_phases():
        rows.append(_phase_row(phase, progress.phase_percent(phase.id)))
        for task_id in tree.ordered_task_ids(tree.top_level_tasks_by_phase.get(phase.id, [])):
            _append_task_rows(rows, tree, progress, task_id, phase.id, phase.id, 1, emitted)

    if tree.unlinked_top_level_tasks:
        percent = progress.unlinked.percent
        rows.append(PlanningRow(
            id=UNLINKED_PHASE_ID,
            parent_id="",
            level=0,
            kind=KIND_PHASE,
            phase_id="",
            title=UNLINKED_PHASE_TITLE,
            description=UNLINKED_PHASE_DESCRIPTION,
            starts_on=None,
            ends_on=None,
            status=status_from_percent(percent),
            progress_percent=percent,
            position=0,
        ))
        for task_id in tree.ordered_task_ids(tree.unlinked_top_level_tasks):
            _append_task_rows(rows, tree, progress, task_id, UNLINKED_PHASE_ID, "", 1, emitted)

    return rows


def build_project_export(project, now: Optional[datetime] = None) -> ProjectExport:
    """
    Build the planning export of a loaded project.

    Args:
        project: project with its phases and tasks loaded
        now: generation timestamp, defaults to the current UTC time

    Returns:
        ProjectExport: the project, its summary and the flattened planning rows
    """
    tree = resolve_hierarchy(project.phases, project.tasks)
    progress = compute_progress(tree)

    summary = ExportSummary(
        project_percent=progress.project.percent,
        total_phases=len(tree.phases),
        total_tasks=len(tree.tasks),
        total_tracked_tasks=progress.project.total,
        total_completed_tasks=progress.project.completed,
    )
    return ProjectExport(
        project=project,
        summary=summary,
        planning=flatten_planning(tree, progress),
        generated_at=now or datetime.now(timezone.utc),
    )
