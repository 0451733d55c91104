"""
Hierarchy resolver.

Rebuilds the logical planning tree of one project from its flat phase and
task rows. A task hangs under another task when its planner meta names an
existing task as parent; otherwise it hangs under its physical phase, and
tasks with neither land under a synthetic "Unlinked" root.

The resolver only builds maps. It never rejects a project because of bad
meta: dangling parents fall back to the physical phase and cycles are left
for the folds to guard against.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List

from Planning.planner_meta import parse_planner_meta

UNLINKED_PHASE_ID = "unlinked-phase"
UNLINKED_PHASE_TITLE = "Unlinked"
UNLINKED_PHASE_DESCRIPTION = "Tasks without a linked phase"


def planning_sort_key(node):
    """Sibling order: starts_on (nulls last), position, case-insensitive name, id."""
    starts_on = node.starts_on
    return (
        starts_on is None,
        starts_on or date.min,
        node.position or 0,
        (node.name or "").strip().lower(),
        node.id,
    )


@dataclass
class PlanningTree:
    phases: list
    tasks: list
    task_by_id: Dict[str, object] = field(default_factory=dict)
    phase_by_id: Dict[str, object] = field(default_factory=dict)
    top_level_tasks_by_phase: Dict[str, List[str]] = field(default_factory=dict)
    children_by_task: Dict[str, List[str]] = field(default_factory=dict)
    unlinked_top_level_tasks: List[str] = field(default_factory=list)
    meta_by_task: Dict[str, object] = field(default_factory=dict)

    def children_of(self, task_id: str) -> List[str]:
        return self.children_by_task.get(task_id, [])

    def has_children(self, task_id: str) -> bool:
        return bool(self.children_by_task.get(task_id))

    def is_subphase(self, task_id: str) -> bool:
        meta = self.meta_by_task.get(task_id)
        return meta is not None and meta.is_subphase

    def ordered_phases(self) -> list:
        return sorted(self.phases, key=planning_sort_key)

    def ordered_task_ids(self, task_ids) -> List[str]:
        known = [self.task_by_id[task_id] for task_id in task_ids if task_id in self.task_by_id]
        return [task.id for task in sorted(known, key=planning_sort_key)]


def resolve_hierarchy(phases, tasks) -> PlanningTree:
    """
    Build the planning tree.

    Args:
        phases: phase rows (id, name, starts_on, position)
        tasks: task rows (id, phase_id, name, objective, starts_on, position, status)

    Returns:
        PlanningTree: index maps plus the parent/children assignment of every task
    """
    tree = PlanningTree(phases=list(phases), tasks=list(tasks))

    for task in tree.tasks:
        tree.task_by_id[task.id] = task
    for phase in tree.phases:
        tree.phase_by_id[phase.id] = phase
        tree.top_level_tasks_by_phase[phase.id] = []

    for task in tree.tasks:
        meta, has_meta = parse_planner_meta(task.objective)
        if has_meta:
            tree.meta_by_task[task.id] = meta
            parent_id = meta.parent_task_id
            if parent_id and parent_id in tree.task_by_id:
                tree.children_by_task.setdefault(parent_id, []).append(task.id)
                continue

        if task.phase_id and task.phase_id in tree.phase_by_id:
            tree.top_level_tasks_by_phase[task.phase_id].append(task.id)
            continue

        tree.unlinked_top_level_tasks.append(task.id)

    return tree
