"""
Project status coordinator.

Applies a project status change and its cascades inside the caller's
transaction:

- "concluido" is stored as "andamento" while any task is already concluded
- "cancelado" deactivates the project and every phase, and cancels every task
- any other status reactivates the project
"""

import logging

from Planning.errors import InvalidInputError, ProjectNotFoundError

logger = logging.getLogger(__name__)

PLANNING = "planejamento"
IN_PROGRESS = "andamento"
COMPLETED = "concluido"
CANCELLED = "cancelado"

PROJECT_STATUSES = (PLANNING, IN_PROGRESS, COMPLETED, CANCELLED)

_PROJECT_STATUS_SYNONYMS = {
    "planejado": PLANNING,
    "planejada": PLANNING,
    "em_andamento": IN_PROGRESS,
    "em andamento": IN_PROGRESS,
    "concluida": COMPLETED,
    "cancelada": CANCELLED,
}


def normalize_project_status(value) -> str:
    status = (value or "").strip().lower()
    status = _PROJECT_STATUS_SYNONYMS.get(status, status)
    if status not in PROJECT_STATUSES:
        raise InvalidInputError("invalid project status")
    return status


def apply_project_status(store, project_id: str, status) -> str:
    """
    Store a new project status and cascade it to phases and tasks.

    Returns:
        str: the status actually stored
    """
    target = normalize_project_status(status)
    if not store.project_exists(project_id):
        raise ProjectNotFoundError()

    resolved = target
    if target == COMPLETED and store.has_completed_tasks(project_id):
        resolved = IN_PROGRESS

    store.update_project_status(project_id, resolved, active=resolved != CANCELLED)
    if resolved == CANCELLED:
        store.deactivate_project_phases(project_id)
        store.cancel_project_tasks(project_id)

    logger.info("Project %s status %s (requested %s)", project_id, resolved, target)
    return resolved
