"""
Progress engine.

Folds task completion bottom-up over a PlanningTree. Leaf tasks count
themselves, every container (parent task, sub-phase, phase, project) is the
sum of its children. Percent and container status are derived on read and
never stored.
"""

from dataclasses import dataclass, field
from typing import Dict

from Planning.hierarchy import PlanningTree
from Planning.normalize import (
    is_task_cancelled, is_task_completed, TASK_PLANNED, TASK_STARTED, TASK_COMPLETED,
)


@dataclass(frozen=True)
class ProgressCount:
    completed: int = 0
    total: int = 0

    def __add__(self, other):
        return ProgressCount(self.completed + other.completed, self.total + other.total)

    @property
    def percent(self) -> int:
        return percent_from_counts(self.completed, self.total)


@dataclass
class ProgressReport:
    task_counts: Dict[str, ProgressCount] = field(default_factory=dict)
    phase_counts: Dict[str, ProgressCount] = field(default_factory=dict)
    unlinked: ProgressCount = ProgressCount()
    project: ProgressCount = ProgressCount()

    def task_percent(self, task_id: str) -> int:
        return self.task_counts.get(task_id, ProgressCount()).percent

    def phase_percent(self, phase_id: str) -> int:
        return self.phase_counts.get(phase_id, ProgressCount()).percent


def percent_from_counts(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    percent = int(completed / total * 100 + 0.5)
    return max(0, min(100, percent))


def status_from_percent(percent: int) -> str:
    if percent >= 100:
        return TASK_COMPLETED
    if percent > 0:
        return TASK_STARTED
    return TASK_PLANNED


def leaf_count(status) -> ProgressCount:
    if is_task_cancelled(status):
        return ProgressCount()
    return ProgressCount(completed=1 if is_task_completed(status) else 0, total=1)


def compute_progress(tree: PlanningTree) -> ProgressReport:
    report = ProgressReport()
    visiting = set()

    def count_task(task_id: str) -> ProgressCount:
        if task_id in report.task_counts:
            return report.task_counts[task_id]
        # revisiting a task that is still being folded means a meta cycle
        if task_id in visiting:
            return ProgressCount()
        visiting.add(task_id)

        children = tree.children_of(task_id)
        count = ProgressCount()
        for child_id in children:
            count = count + count_task(child_id)
        if not children:
            count = leaf_count(tree.task_by_id[task_id].status)

        visiting.discard(task_id)
        report.task_counts[task_id] = count
        return count

    for task in tree.tasks:
        count_task(task.id)

    project = ProgressCount()
    for phase in tree.phases:
        phase_count = ProgressCount()
        for task_id in tree.top_level_tasks_by_phase.get(phase.id, []):
            phase_count = phase_count + report.task_counts[task_id]
        report.phase_counts[phase.id] = phase_count
        project = project + phase_count

    unlinked = ProgressCount()
    for task_id in tree.unlinked_top_level_tasks:
        unlinked = unlinked + report.task_counts[task_id]
    report.unlinked = unlinked
    report.project = project + unlinked
    return report
