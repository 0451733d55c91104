"""
Project store.

All reads and writes of the project aggregate go through ProjectStore. The
store never commits: the caller owns the transaction (see
Database.session.transaction) and the store only adds, flushes and issues
updates inside it.

`writes` counts the date updates issued by the timeline engine so callers
and tests can verify that a recalculation over unchanged data is a no-op.
"""

import logging
from datetime import datetime
from typing import List, NamedTuple, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError

from Models.Admin.Client import Client
from Models.Admin.User import User
from Models.Planning.Project import (
    Project, ProjectClient, ProjectManager, ProjectPhase, ProjectPhaseFile, ProjectTask, ProjectTaskFile,
    ProjectTaskComment, ProjectTaskCommentFile, ProjectRevenue, ProjectRevenueReceipt, ProjectMonthlyCharge,
)
from Models.Planning.ProjectType import ProjectCategory, ProjectType
from Planning import errors
from Planning.normalize import PENDING, TASK_COMPLETED, TASK_CANCELLED
from Planning.timeline import PhaseTimelineRow, TaskTimelineRow

logger = logging.getLogger(__name__)

UNIQUE_VIOLATIONS = {
    "projects_name_lower_key": errors.ProjectNameInUseError,
    "project_types_code_lower_key": errors.ProjectTypeCodeInUseError,
    "project_types_category_name_lower_key": errors.ProjectTypeNameInUseError,
}

FOREIGN_KEY_VIOLATIONS = {
    "projects_project_type_id_fkey": errors.MissingProjectTypeError,
    "project_types_category_id_fkey": errors.MissingProjectCategoryError,
    "project_clients_client_id_fkey": errors.MissingProjectClientsError,
    "project_managers_user_id_fkey": errors.MissingProjectManagersError,
    "project_tasks_responsible_user_id_fkey": errors.MissingResponsibleUserError,
    "project_task_comments_user_id_fkey": errors.InvalidInputError,
    "project_task_comments_client_id_fkey": errors.InvalidInputError,
}

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
CHECK_VIOLATION = "23514"


def _violation_details(error: IntegrityError):
    """Return (sqlstate, constraint name) from a PostgreSQL or SQLite integrity error."""
    cause = getattr(error, "orig", None) or error
    code = getattr(cause, "pgcode", None)
    diag = getattr(cause, "diag", None)
    constraint = getattr(diag, "constraint_name", None) or ""
    message = str(cause)

    if code is None:
        lowered = message.lower()
        if "unique constraint" in lowered:
            code = UNIQUE_VIOLATION
        elif "foreign key constraint" in lowered:
            code = FOREIGN_KEY_VIOLATION
        elif "check constraint" in lowered:
            code = CHECK_VIOLATION

    if not constraint:
        for name in list(UNIQUE_VIOLATIONS) + list(FOREIGN_KEY_VIOLATIONS):
            if name in message:
                constraint = name
                break
    return code, constraint


def map_persistence_error(error: IntegrityError) -> Exception:
    code, constraint = _violation_details(error)
    if code == UNIQUE_VIOLATION:
        return UNIQUE_VIOLATIONS.get(constraint, errors.ConflictError)()
    if code == FOREIGN_KEY_VIOLATION:
        return FOREIGN_KEY_VIOLATIONS.get(constraint, errors.NotFoundError)()
    if code == CHECK_VIOLATION:
        return errors.InvalidInputError()
    return error


class ProjectListRow(NamedTuple):
    project: Project
    clients_count: int
    revenues_count: int
    monthly_charges_count: int
    phases_count: int
    tasks_count: int


def _count_of(model, active_only=True):
    query = select(func.count()).select_from(model).where(model.project_id == Project.id)
    if active_only:
        query = query.where(model.active.is_(True))
    return query.correlate(Project).scalar_subquery()


def _apply(row, changes: dict):
    for key, value in changes.items():
        setattr(row, key, value)


class ProjectStore:
    def __init__(self, db):
        self.db = db
        self.writes = 0

    def flush(self):
        try:
            self.db.flush()
        except IntegrityError as e:
            mapped = map_persistence_error(e)
            if mapped is e:
                raise
            raise mapped from e

    # ---- projects -------------------------------------------------------

    def project_exists(self, project_id: str) -> bool:
        return self.db.query(Project.id).filter(Project.id == project_id).first() is not None

    def load_project(self, project_id: str) -> Project:
        project = self.db.get(Project, project_id)
        if project is None:
            raise errors.ProjectNotFoundError()
        return project

    def require_project(self, project_id: str):
        if not self.project_exists(project_id):
            raise errors.ProjectNotFoundError()

    def list_projects(self, search: str = "", only_active: bool = False) -> List[ProjectListRow]:
        query = (
            self.db.query(
                Project,
                select(func.count()).select_from(ProjectClient)
                .where(ProjectClient.project_id == Project.id).correlate(Project).scalar_subquery(),
                _count_of(ProjectRevenue),
                _count_of(ProjectMonthlyCharge),
                _count_of(ProjectPhase),
                _count_of(ProjectTask),
            )
            .outerjoin(ProjectType, ProjectType.id == Project.project_type_id)
            .outerjoin(ProjectCategory, ProjectCategory.id == ProjectType.category_id)
        )
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(or_(
                func.lower(Project.name).like(pattern),
                func.lower(Project.objective).like(pattern),
                func.lower(ProjectType.name).like(pattern),
                func.lower(ProjectCategory.name).like(pattern),
            ))
        if only_active:
            query = query.filter(Project.active.is_(True))
        query = query.order_by(Project.created.desc(), Project.id.desc())
        return [ProjectListRow(*row) for row in query.all()]

    def name_taken(self, name: str, exclude_id: Optional[str] = None) -> bool:
        query = self.db.query(Project.id).filter(func.lower(Project.name) == name.lower())
        if exclude_id:
            query = query.filter(Project.id != exclude_id)
        return query.first() is not None

    def add_project(self, fields: dict) -> Project:
        project = Project(**fields)
        self.db.add(project)
        self.flush()
        return project

    def update_project(self, project: Project, changes: dict):
        _apply(project, changes)
        project.updated = datetime.utcnow()
        self.flush()

    def replace_project_clients(self, project: Project, client_ids: List[str]):
        if client_ids:
            found = self.db.query(func.count(Client.id)).filter(Client.id.in_(client_ids)).scalar()
            if found != len(client_ids):
                raise errors.MissingProjectClientsError()
        kept = [link for link in project.client_links if link.client_id in client_ids]
        linked = {link.client_id for link in kept}
        project.client_links = kept + [
            ProjectClient(client_id=client_id) for client_id in client_ids if client_id not in linked
        ]
        self.flush()

    def replace_project_managers(self, project: Project, user_ids: List[str]):
        if user_ids:
            found = self.db.query(func.count(User.id)).filter(User.id.in_(user_ids)).scalar()
            if found != len(user_ids):
                raise errors.MissingProjectManagersError()
        kept = [link for link in project.manager_links if link.user_id in user_ids]
        linked = {link.user_id for link in kept}
        project.manager_links = kept + [
            ProjectManager(user_id=user_id) for user_id in user_ids if user_id not in linked
        ]
        self.flush()

    def delete_project(self, project_id: str):
        deleted = self.db.query(Project).filter(Project.id == project_id).delete(synchronize_session=False)
        if not deleted:
            raise errors.ProjectNotFoundError()

    def require_project_type(self, project_type_id: str):
        if self.db.get(ProjectType, project_type_id) is None:
            raise errors.MissingProjectTypeError()

    def require_user(self, user_id: str):
        if self.db.get(User, user_id) is None:
            raise errors.MissingResponsibleUserError()

    # ---- timeline and status --------------------------------------------

    def list_phase_timeline_rows(self, project_id: str) -> List[PhaseTimelineRow]:
        rows = (
            self.db.query(ProjectPhase.id, ProjectPhase.starts_on, ProjectPhase.ends_on)
            .filter(ProjectPhase.project_id == project_id, ProjectPhase.active.is_(True))
            .order_by(ProjectPhase.position, ProjectPhase.created, ProjectPhase.id)
            .all()
        )
        return [PhaseTimelineRow(*row) for row in rows]

    def list_task_timeline_rows(self, project_id: str) -> List[TaskTimelineRow]:
        rows = (
            self.db.query(ProjectTask.id, ProjectTask.phase_id, ProjectTask.status, ProjectTask.objective,
                          ProjectTask.starts_on, ProjectTask.ends_on)
            .filter(ProjectTask.project_id == project_id, ProjectTask.active.is_(True))
            .order_by(ProjectTask.position, ProjectTask.created, ProjectTask.id)
            .all()
        )
        return [
            TaskTimelineRow(task_id, phase_id or "", status, objective or "", starts_on, ends_on)
            for task_id, phase_id, status, objective, starts_on, ends_on in rows
        ]

    def _update_dates(self, model, row_id, start_column, end_column, starts_on, ends_on):
        self.db.query(model).filter(model.id == row_id).update(
            {start_column: starts_on, end_column: ends_on, model.updated: datetime.utcnow()},
            synchronize_session="fetch",
        )
        self.writes += 1

    def update_task_dates(self, task_id: str, starts_on, ends_on):
        self._update_dates(ProjectTask, task_id, ProjectTask.starts_on, ProjectTask.ends_on, starts_on, ends_on)

    def update_phase_dates(self, phase_id: str, starts_on, ends_on):
        self._update_dates(ProjectPhase, phase_id, ProjectPhase.starts_on, ProjectPhase.ends_on,
                           starts_on, ends_on)

    def update_project_dates(self, project_id: str, starts_on, ends_on):
        self._update_dates(Project, project_id, Project.start_date, Project.end_date, starts_on, ends_on)

    def load_project_dates(self, project_id: str):
        row = self.db.query(Project.start_date, Project.end_date).filter(Project.id == project_id).first()
        if row is None:
            raise errors.ProjectNotFoundError()
        return row.start_date, row.end_date

    def has_completed_tasks(self, project_id: str) -> bool:
        return self.db.query(ProjectTask.id).filter(
            ProjectTask.project_id == project_id, ProjectTask.status == TASK_COMPLETED,
        ).first() is not None

    def update_project_status(self, project_id: str, status: str, active: bool):
        self.db.query(Project).filter(Project.id == project_id).update(
            {Project.status: status, Project.active: active, Project.updated: datetime.utcnow()},
            synchronize_session="fetch",
        )

    def deactivate_project_phases(self, project_id: str):
        self.db.query(ProjectPhase).filter(ProjectPhase.project_id == project_id).update(
            {ProjectPhase.active: False, ProjectPhase.updated: datetime.utcnow()},
            synchronize_session="fetch",
        )

    def cancel_project_tasks(self, project_id: str):
        self.db.query(ProjectTask).filter(ProjectTask.project_id == project_id).update(
            {ProjectTask.status: TASK_CANCELLED, ProjectTask.active: False, ProjectTask.updated: datetime.utcnow()},
            synchronize_session="fetch",
        )

    # ---- phases ---------------------------------------------------------

    def list_phases(self, project_id: str) -> List[ProjectPhase]:
        return (
            self.db.query(ProjectPhase)
            .filter(ProjectPhase.project_id == project_id)
            .order_by(ProjectPhase.position, ProjectPhase.created, ProjectPhase.id)
            .all()
        )

    def get_phase(self, project_id: str, phase_id: str) -> ProjectPhase:
        phase = self.db.query(ProjectPhase).filter(
            ProjectPhase.id == phase_id, ProjectPhase.project_id == project_id,
        ).first()
        if phase is None:
            raise errors.PhaseNotFoundError()
        return phase

    def add_phase(self, project_id: str, fields: dict, files: List[dict]) -> ProjectPhase:
        phase = ProjectPhase(project_id=project_id, **fields)
        phase.files = [ProjectPhaseFile(**attachment) for attachment in files]
        self.db.add(phase)
        self.flush()
        return phase

    def update_phase(self, phase: ProjectPhase, changes: dict):
        _apply(phase, changes)
        phase.updated = datetime.utcnow()
        self.flush()

    # ---- tasks ----------------------------------------------------------

    def list_tasks(self, project_id: str) -> List[ProjectTask]:
        return (
            self.db.query(ProjectTask)
            .filter(ProjectTask.project_id == project_id)
            .order_by(ProjectTask.position, ProjectTask.created, ProjectTask.id)
            .all()
        )

    def get_task(self, project_id: str, task_id: str) -> ProjectTask:
        task = self.db.query(ProjectTask).filter(
            ProjectTask.id == task_id, ProjectTask.project_id == project_id,
        ).first()
        if task is None:
            raise errors.TaskNotFoundError()
        return task

    def add_task(self, project_id: str, fields: dict, files: List[dict]) -> ProjectTask:
        task = ProjectTask(project_id=project_id, **fields)
        task.files = [ProjectTaskFile(**attachment) for attachment in files]
        self.db.add(task)
        self.flush()
        return task

    def update_task(self, task: ProjectTask, changes: dict):
        _apply(task, changes)
        task.updated = datetime.utcnow()
        self.flush()

    # ---- task comments --------------------------------------------------

    def list_task_comments(self, task_id: str) -> List[ProjectTaskComment]:
        return (
            self.db.query(ProjectTaskComment)
            .filter(ProjectTaskComment.project_task_id == task_id)
            .order_by(ProjectTaskComment.created, ProjectTaskComment.id)
            .all()
        )

    def require_comment(self, task_id: str, comment_id: str):
        exists = self.db.query(ProjectTaskComment.id).filter(
            ProjectTaskComment.id == comment_id, ProjectTaskComment.project_task_id == task_id,
        ).first()
        if exists is None:
            raise errors.TaskCommentNotFoundError()

    def require_comment_author(self, user_id: Optional[str], client_id: Optional[str]):
        model, author_id = (Client, client_id) if client_id else (User, user_id)
        if not author_id or self.db.get(model, author_id) is None:
            raise errors.InvalidInputError("comment author not found")

    def add_task_comment(self, fields: dict, files: List[dict]) -> ProjectTaskComment:
        comment = ProjectTaskComment(**fields)
        comment.files = [ProjectTaskCommentFile(**attachment) for attachment in files]
        self.db.add(comment)
        self.flush()
        return comment

    # ---- revenues -------------------------------------------------------

    def list_revenues(self, project_id: str) -> List[ProjectRevenue]:
        return self.load_project(project_id).revenues

    def get_revenue(self, project_id: str, revenue_id: str) -> ProjectRevenue:
        revenue = self.db.query(ProjectRevenue).filter(
            ProjectRevenue.id == revenue_id, ProjectRevenue.project_id == project_id,
        ).first()
        if revenue is None:
            raise errors.RevenueNotFoundError()
        return revenue

    def add_revenue(self, project_id: str, fields: dict, receipts: List[dict]) -> ProjectRevenue:
        revenue = ProjectRevenue(project_id=project_id, **fields)
        revenue.receipts = [ProjectRevenueReceipt(**receipt) for receipt in receipts]
        self.db.add(revenue)
        self.flush()
        return revenue

    def update_revenue_status(self, revenue: ProjectRevenue, status: str):
        revenue.status = status
        revenue.updated = datetime.utcnow()
        self.flush()

    # ---- monthly charges ------------------------------------------------

    def list_monthly_charges(self, project_id: str) -> List[ProjectMonthlyCharge]:
        return self.load_project(project_id).monthly_charges

    def get_monthly_charge(self, project_id: str, charge_id: str) -> ProjectMonthlyCharge:
        charge = self.db.query(ProjectMonthlyCharge).filter(
            ProjectMonthlyCharge.id == charge_id, ProjectMonthlyCharge.project_id == project_id,
        ).first()
        if charge is None:
            raise errors.MonthlyChargeNotFoundError()
        return charge

    def add_monthly_charge(self, project_id: str, fields: dict) -> ProjectMonthlyCharge:
        charge = ProjectMonthlyCharge(project_id=project_id, **fields)
        self.db.add(charge)
        self.flush()
        return charge

    def update_pending_monthly_charge(self, project_id: str, charge_id: str, changes: dict):
        """Apply `changes` only while the charge is still pending."""
        values = {getattr(ProjectMonthlyCharge, key): value for key, value in changes.items()}
        values[ProjectMonthlyCharge.updated] = datetime.utcnow()
        try:
            updated = self.db.query(ProjectMonthlyCharge).filter(
                ProjectMonthlyCharge.id == charge_id,
                ProjectMonthlyCharge.project_id == project_id,
                ProjectMonthlyCharge.status == PENDING,
            ).update(values, synchronize_session="fetch")
        except IntegrityError as e:
            mapped = map_persistence_error(e)
            if mapped is e:
                raise
            raise mapped from e
        if updated:
            return
        # nothing matched: either the charge is locked or it does not exist
        self.get_monthly_charge(project_id, charge_id)
        raise errors.MonthlyChargeLockedError()

    def delete_monthly_charge(self, project_id: str, charge_id: str):
        deleted = self.db.query(ProjectMonthlyCharge).filter(
            ProjectMonthlyCharge.id == charge_id, ProjectMonthlyCharge.project_id == project_id,
        ).delete(synchronize_session="fetch")
        if not deleted:
            raise errors.MonthlyChargeNotFoundError()

    # ---- project types --------------------------------------------------

    def list_categories(self) -> List[ProjectCategory]:
        return self.db.query(ProjectCategory).order_by(ProjectCategory.name, ProjectCategory.id).all()

    def list_types(self, category_id: str = "", only_active: bool = False) -> List[ProjectType]:
        query = self.db.query(ProjectType).join(ProjectCategory, ProjectCategory.id == ProjectType.category_id)
        if category_id:
            query = query.filter(ProjectType.category_id == category_id)
        if only_active:
            query = query.filter(ProjectType.active.is_(True))
        return query.order_by(ProjectCategory.name, ProjectType.name, ProjectType.id).all()

    def get_type(self, type_id: str) -> ProjectType:
        project_type = self.db.get(ProjectType, type_id)
        if project_type is None:
            raise errors.ProjectTypeNotFoundError()
        return project_type

    def require_category(self, category_id: str):
        if self.db.get(ProjectCategory, category_id) is None:
            raise errors.MissingProjectCategoryError()

    def type_code_taken(self, code: str, exclude_id: Optional[str] = None) -> bool:
        query = self.db.query(ProjectType.id).filter(func.lower(ProjectType.code) == code.lower())
        if exclude_id:
            query = query.filter(ProjectType.id != exclude_id)
        return query.first() is not None

    def type_name_taken(self, category_id: str, name: str, exclude_id: Optional[str] = None) -> bool:
        query = self.db.query(ProjectType.id).filter(
            ProjectType.category_id == category_id, func.lower(ProjectType.name) == name.lower(),
        )
        if exclude_id:
            query = query.filter(ProjectType.id != exclude_id)
        return query.first() is not None

    def add_type(self, fields: dict) -> ProjectType:
        project_type = ProjectType(**fields)
        self.db.add(project_type)
        self.flush()
        return project_type

    def update_type(self, project_type: ProjectType, changes: dict):
        _apply(project_type, changes)
        project_type.updated = datetime.utcnow()
        self.flush()
