"""
Project planning use cases.

Each write runs as one transaction: validate and normalize the input, read
the aggregate, compute, write, and (for phases and tasks) recalculate the
timeline before committing. The aggregate is re-read after commit so the
response reflects exactly what was stored.
"""

import logging
from typing import List, Optional

from Database.session import transaction
from Planning import errors
from Planning.export import build_project_export, ProjectExport
from Planning.normalize import (
    clean_text, normalize_lifecycle_type, require_task_status, require_choice, unique_ids, check_date_range,
    REVENUE_STATUSES, MONTHLY_CHARGE_STATUSES, PENDING,
)
from Planning.pdf_report import render_project_pdf
from Planning.planner_meta import normalize_planner_meta, is_valid_planner_meta, encode_planner_meta
from Planning.status import apply_project_status, CANCELLED
from Planning.store import ProjectStore
from Planning.timeline import recalculate_timeline
from Schemas.Planning.TaskSchema import TaskCommentOut
from utils.audit_log import create_audit_log

logger = logging.getLogger(__name__)

AUTHOR_USER = "user"
AUTHOR_CLIENT = "client"


def _required_text(value, label: str) -> str:
    text = clean_text(value)
    if not text:
        raise errors.InvalidInputError(f"{label} is required")
    return text


def _file_rows(files) -> List[dict]:
    return [
        {
            "file_name": clean_text(item.file_name),
            "file_key": clean_text(item.file_key),
            "content_type": clean_text(item.content_type),
            "notes": clean_text(item.notes),
        }
        for item in files or []
    ]


def _encoded_objective(planner_meta) -> str:
    meta = normalize_planner_meta(planner_meta.kind, planner_meta.parent_type, planner_meta.parent_id)
    if not is_valid_planner_meta(meta):
        raise errors.InvalidInputError("invalid planner meta")
    return encode_planner_meta(meta)


class ProjectService:
    def __init__(self, db, actor: Optional[str] = None, ip_address: Optional[str] = None,
                 user_agent: Optional[str] = None):
        self.db = db
        self.store = ProjectStore(db)
        self.actor = actor
        self.ip_address = ip_address
        self.user_agent = user_agent

    def _audit(self, action: str, resource_type: str, resource_id: str, resource_name=None, details=None):
        create_audit_log(
            self.db,
            actor=self.actor,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            resource_name=resource_name,
            details=details,
            ip_address=self.ip_address,
            user_agent=self.user_agent,
        )

    # ---- projects -------------------------------------------------------

    def list_projects(self, search: str = "", only_active: bool = False):
        return self.store.list_projects(clean_text(search), only_active)

    def get_project(self, project_id: str):
        return self.store.load_project(project_id)

    def create_project(self, payload):
        name = _required_text(payload.name, "name")
        fields = {
            "name": name,
            "objective": clean_text(payload.objective),
            "project_type_id": clean_text(payload.project_type_id) or None,
            "lifecycle_type": normalize_lifecycle_type(payload.lifecycle_type),
            "has_monthly_maintenance": payload.has_monthly_maintenance,
            "start_date": payload.start_date,
            "end_date": payload.end_date,
            "active": payload.active,
        }
        check_date_range(fields["start_date"], fields["end_date"], "project dates")

        with transaction(self.db):
            if fields["project_type_id"]:
                self.store.require_project_type(fields["project_type_id"])
            if self.store.name_taken(name):
                raise errors.ProjectNameInUseError()
            project = self.store.add_project(fields)
            self.store.replace_project_clients(project, unique_ids(payload.client_ids))
            self.store.replace_project_managers(project, unique_ids(payload.manager_user_ids))
            project_id = project.id
            self._audit("create_project", "project", project_id, name)

        logger.info("Project %s created", project_id)
        return self.store.load_project(project_id)

    def update_project(self, project_id: str, payload):
        changes = payload.model_dump(exclude_unset=True)
        client_ids = changes.pop("client_ids", None)
        manager_ids = changes.pop("manager_user_ids", None)

        with transaction(self.db):
            project = self.store.load_project(project_id)
            fields = {}
            if "name" in changes:
                fields["name"] = _required_text(changes["name"], "name")
                if self.store.name_taken(fields["name"], exclude_id=project_id):
                    raise errors.ProjectNameInUseError()
            if "objective" in changes:
                fields["objective"] = clean_text(changes["objective"])
            if "project_type_id" in changes:
                fields["project_type_id"] = clean_text(changes["project_type_id"]) or None
                if fields["project_type_id"]:
                    self.store.require_project_type(fields["project_type_id"])
            if "lifecycle_type" in changes:
                fields["lifecycle_type"] = normalize_lifecycle_type(changes["lifecycle_type"])
            for key in ("has_monthly_maintenance", "active"):
                if changes.get(key) is not None:
                    fields[key] = changes[key]
            for key in ("start_date", "end_date"):
                if key in changes:
                    fields[key] = changes[key]

            if "start_date" in fields or "end_date" in fields:
                check_date_range(fields.get("start_date", project.start_date),
                                 fields.get("end_date", project.end_date), "project dates")
            if project.status == CANCELLED and fields.get("active"):
                raise errors.InvalidInputError("cancelled projects cannot be reactivated")

            self.store.update_project(project, fields)
            if client_ids is not None:
                self.store.replace_project_clients(project, unique_ids(client_ids))
            if manager_ids is not None:
                self.store.replace_project_managers(project, unique_ids(manager_ids))
            self._audit("update_project", "project", project_id, project.name, ", ".join(sorted(changes)))

        logger.info("Project %s updated", project_id)
        return self.store.load_project(project_id)

    def update_project_status(self, project_id: str, status: str):
        with transaction(self.db):
            resolved = apply_project_status(self.store, project_id, status)
            self._audit("update_project_status", "project", project_id, details=resolved)
        logger.info("Project %s status set to %s", project_id, resolved)
        return self.store.load_project(project_id)

    def delete_project(self, project_id: str):
        with transaction(self.db):
            self.store.delete_project(project_id)
            self._audit("delete_project", "project", project_id)
        logger.info("Project %s deleted", project_id)

    def recalculate_project(self, project_id: str):
        with transaction(self.db):
            self.store.require_project(project_id)
            result = recalculate_timeline(self.store, project_id)
            self._audit("recalculate_project", "project", project_id, details=f"writes={result.writes}")
        logger.info("Project %s timeline recalculated with %s writes", project_id, result.writes)
        return self.store.load_project(project_id)

    def export_project(self, project_id: str) -> ProjectExport:
        return build_project_export(self.store.load_project(project_id))

    def export_project_pdf(self, project_id: str, theme: str = "light", font: str = "") -> bytes:
        return render_project_pdf(self.export_project(project_id), theme=theme, font=font)

    # ---- phases ---------------------------------------------------------

    def list_phases(self, project_id: str):
        self.store.require_project(project_id)
        return self.store.list_phases(project_id)

    def create_phase(self, project_id: str, payload):
        fields = {
            "name": _required_text(payload.name, "name"),
            "description": clean_text(payload.description),
            "objective": clean_text(payload.objective),
            "starts_on": payload.starts_on,
            "ends_on": payload.ends_on,
            "position": payload.position,
            "active": payload.active,
        }
        check_date_range(fields["starts_on"], fields["ends_on"], "phase dates")

        with transaction(self.db):
            self.store.require_project(project_id)
            phase = self.store.add_phase(project_id, fields, _file_rows(payload.files))
            phase_id = phase.id
            recalculate_timeline(self.store, project_id)

        logger.info("Phase %s created in project %s", phase_id, project_id)
        return self.store.get_phase(project_id, phase_id)

    def update_phase(self, project_id: str, phase_id: str, payload):
        changes = payload.model_dump(exclude_unset=True)

        with transaction(self.db):
            self.store.require_project(project_id)
            phase = self.store.get_phase(project_id, phase_id)
            fields = {}
            if "name" in changes:
                fields["name"] = _required_text(changes["name"], "name")
            for key in ("description", "objective"):
                if key in changes:
                    fields[key] = clean_text(changes[key])
            for key in ("starts_on", "ends_on"):
                if key in changes:
                    fields[key] = changes[key]
            for key in ("position", "active"):
                if changes.get(key) is not None:
                    fields[key] = changes[key]
            if "starts_on" in fields or "ends_on" in fields:
                check_date_range(fields.get("starts_on", phase.starts_on), fields.get("ends_on", phase.ends_on),
                                 "phase dates")

            self.store.update_phase(phase, fields)
            recalculate_timeline(self.store, project_id)

        logger.info("Phase %s updated", phase_id)
        return self.store.get_phase(project_id, phase_id)

    # ---- tasks ----------------------------------------------------------

    def list_tasks(self, project_id: str):
        self.store.require_project(project_id)
        return self.store.list_tasks(project_id)

    def _task_references(self, project_id: str, fields: dict):
        if fields.get("phase_id"):
            self.store.get_phase(project_id, fields["phase_id"])
        if fields.get("responsible_user_id"):
            self.store.require_user(fields["responsible_user_id"])

    def create_task(self, project_id: str, payload):
        fields = {
            "phase_id": clean_text(payload.phase_id) or None,
            "name": _required_text(payload.name, "name"),
            "description": clean_text(payload.description),
            "objective": clean_text(payload.objective),
            "responsible_user_id": clean_text(payload.responsible_user_id) or None,
            "starts_on": payload.starts_on,
            "ends_on": payload.ends_on,
            "position": payload.position,
            "status": require_task_status(payload.status),
            "active": payload.active,
        }
        if payload.planner_meta is not None:
            fields["objective"] = _encoded_objective(payload.planner_meta)
        check_date_range(fields["starts_on"], fields["ends_on"], "task dates")

        with transaction(self.db):
            self.store.require_project(project_id)
            self._task_references(project_id, fields)
            task = self.store.add_task(project_id, fields, _file_rows(payload.files))
            task_id = task.id
            recalculate_timeline(self.store, project_id)

        logger.info("Task %s created in project %s", task_id, project_id)
        return self.store.get_task(project_id, task_id)

    def update_task(self, project_id: str, task_id: str, payload):
        changes = payload.model_dump(exclude_unset=True)

        with transaction(self.db):
            self.store.require_project(project_id)
            task = self.store.get_task(project_id, task_id)
            fields = {}
            for key in ("phase_id", "responsible_user_id"):
                if key in changes:
                    fields[key] = clean_text(changes[key]) or None
            if "name" in changes:
                fields["name"] = _required_text(changes["name"], "name")
            for key in ("description", "objective"):
                if key in changes:
                    fields[key] = clean_text(changes[key])
            if payload.planner_meta is not None:
                fields["objective"] = _encoded_objective(payload.planner_meta)
            if "status" in changes:
                fields["status"] = require_task_status(changes["status"])
            for key in ("starts_on", "ends_on"):
                if key in changes:
                    fields[key] = changes[key]
            for key in ("position", "active"):
                if changes.get(key) is not None:
                    fields[key] = changes[key]
            if "starts_on" in fields or "ends_on" in fields:
                check_date_range(fields.get("starts_on", task.starts_on), fields.get("ends_on", task.ends_on),
                                 "task dates")

            self._task_references(project_id, fields)
            self.store.update_task(task, fields)
            recalculate_timeline(self.store, project_id)

        logger.info("Task %s updated", task_id)
        return self.store.get_task(project_id, task_id)

    # ---- task comments --------------------------------------------------

    def _comment_out(self, comment, task, manager_ids) -> TaskCommentOut:
        out = TaskCommentOut.model_validate(comment)
        return out.model_copy(update={
            "is_task_responsible": bool(comment.user_id) and comment.user_id == task.responsible_user_id,
            "is_project_manager": bool(comment.user_id) and comment.user_id in manager_ids,
        })

    def list_task_comments(self, project_id: str, task_id: str) -> List[TaskCommentOut]:
        project = self.store.load_project(project_id)
        task = self.store.get_task(project_id, task_id)
        manager_ids = project.manager_user_ids
        return [self._comment_out(comment, task, manager_ids) for comment in self.store.list_task_comments(task_id)]

    def create_task_comment(self, project_id: str, task_id: str, payload, author_id: str,
                            author_type: str = AUTHOR_USER) -> TaskCommentOut:
        text = _required_text(payload.comment, "comment")
        parent_id = clean_text(payload.parent_comment_id) or None

        with transaction(self.db):
            self.store.load_project(project_id)
            self.store.get_task(project_id, task_id)
            if parent_id:
                self.store.require_comment(task_id, parent_id)
            fields = {
                "project_task_id": task_id,
                "parent_comment_id": parent_id,
                "comment": text,
                "user_id": author_id if author_type != AUTHOR_CLIENT else None,
                "client_id": author_id if author_type == AUTHOR_CLIENT else None,
            }
            self.store.require_comment_author(fields["user_id"], fields["client_id"])
            comment = self.store.add_task_comment(fields, _file_rows(payload.files))
            comment_id = comment.id

        project = self.store.load_project(project_id)
        task = self.store.get_task(project_id, task_id)
        comment = next(item for item in self.store.list_task_comments(task_id) if item.id == comment_id)
        logger.info("Comment %s added to task %s", comment_id, task_id)
        return self._comment_out(comment, task, project.manager_user_ids)

    # ---- revenues -------------------------------------------------------

    def list_revenues(self, project_id: str):
        return self.store.list_revenues(project_id)

    def create_revenue(self, project_id: str, payload):
        if payload.amount < 0:
            raise errors.InvalidInputError("amount must not be negative")
        fields = {
            "title": _required_text(payload.title, "title"),
            "description": clean_text(payload.description),
            "objective": clean_text(payload.objective),
            "amount": payload.amount,
            "expected_on": payload.expected_on,
            "received_on": payload.received_on,
            "status": require_choice(payload.status, REVENUE_STATUSES, PENDING, "revenue status"),
            "active": payload.active,
        }
        receipts = [
            {
                "file_name": clean_text(receipt.file_name),
                "file_key": clean_text(receipt.file_key),
                "content_type": clean_text(receipt.content_type),
                "issued_on": receipt.issued_on,
                "notes": clean_text(receipt.notes),
            }
            for receipt in payload.receipts
        ]

        with transaction(self.db):
            self.store.require_project(project_id)
            revenue = self.store.add_revenue(project_id, fields, receipts)
            revenue_id = revenue.id

        logger.info("Revenue %s created in project %s", revenue_id, project_id)
        return self.store.get_revenue(project_id, revenue_id)

    def update_revenue_status(self, project_id: str, revenue_id: str, status: str):
        status = require_choice(status, REVENUE_STATUSES, "", "revenue status")
        with transaction(self.db):
            self.store.require_project(project_id)
            revenue = self.store.get_revenue(project_id, revenue_id)
            self.store.update_revenue_status(revenue, status)
        logger.info("Revenue %s set to %s", revenue_id, status)
        return self.store.get_revenue(project_id, revenue_id)

    # ---- monthly charges ------------------------------------------------

    def list_monthly_charges(self, project_id: str):
        return self.store.list_monthly_charges(project_id)

    @staticmethod
    def _check_charge_values(fields: dict):
        if "amount" in fields and (fields["amount"] is None or fields["amount"] < 0):
            raise errors.InvalidInputError("amount must not be negative")
        if "due_day" in fields and (fields["due_day"] is None or not 1 <= fields["due_day"] <= 31):
            raise errors.InvalidInputError("due day must be between 1 and 31")

    def create_monthly_charge(self, project_id: str, payload):
        fields = {
            "title": _required_text(payload.title, "title"),
            "description": clean_text(payload.description),
            "installment": clean_text(payload.installment),
            "amount": payload.amount,
            "due_day": payload.due_day or 1,
            "starts_on": payload.starts_on,
            "ends_on": payload.ends_on,
            "status": require_choice(payload.status, MONTHLY_CHARGE_STATUSES, PENDING, "monthly charge status"),
            "active": payload.active,
        }
        self._check_charge_values(fields)
        check_date_range(fields["starts_on"], fields["ends_on"], "monthly charge dates")

        with transaction(self.db):
            self.store.require_project(project_id)
            charge = self.store.add_monthly_charge(project_id, fields)
            charge_id = charge.id

        logger.info("Monthly charge %s created in project %s", charge_id, project_id)
        return self.store.get_monthly_charge(project_id, charge_id)

    def update_monthly_charge(self, project_id: str, charge_id: str, payload):
        changes = payload.model_dump(exclude_unset=True)
        fields = {}
        if "title" in changes:
            fields["title"] = _required_text(changes["title"], "title")
        for key in ("description", "installment"):
            if key in changes:
                fields[key] = clean_text(changes[key])
        for key in ("amount", "due_day", "starts_on", "ends_on"):
            if key in changes:
                fields[key] = changes[key]
        if fields.get("due_day") == 0:
            fields["due_day"] = 1
        if "status" in changes:
            fields["status"] = require_choice(changes["status"], MONTHLY_CHARGE_STATUSES, "", "monthly charge status")
        if changes.get("active") is not None:
            fields["active"] = changes["active"]
        self._check_charge_values(fields)

        with transaction(self.db):
            self.store.require_project(project_id)
            charge = self.store.get_monthly_charge(project_id, charge_id)
            check_date_range(fields.get("starts_on", charge.starts_on), fields.get("ends_on", charge.ends_on),
                             "monthly charge dates")
            self.store.update_pending_monthly_charge(project_id, charge_id, fields)

        logger.info("Monthly charge %s updated", charge_id)
        return self.store.get_monthly_charge(project_id, charge_id)

    def delete_monthly_charge(self, project_id: str, charge_id: str):
        with transaction(self.db):
            self.store.require_project(project_id)
            self.store.delete_monthly_charge(project_id, charge_id)
        logger.info("Monthly charge %s deleted", charge_id)

    # ---- project types --------------------------------------------------

    def list_categories(self):
        return self.store.list_categories()

    def list_types(self, category_id: str = "", only_active: bool = False):
        return self.store.list_types(clean_text(category_id), only_active)

    def create_type(self, payload):
        category_id = _required_text(payload.category_id, "category")
        code = _required_text(payload.code, "code").lower()
        name = _required_text(payload.name, "name")

        with transaction(self.db):
            self.store.require_category(category_id)
            if self.store.type_code_taken(code):
                raise errors.ProjectTypeCodeInUseError()
            if self.store.type_name_taken(category_id, name):
                raise errors.ProjectTypeNameInUseError()
            project_type = self.store.add_type({
                "category_id": category_id,
                "code": code,
                "name": name,
                "description": clean_text(payload.description),
                "active": payload.active,
            })
            type_id = project_type.id

        logger.info("Project type %s created", type_id)
        return self.store.get_type(type_id)

    def update_type(self, type_id: str, payload):
        changes = payload.model_dump(exclude_unset=True)

        with transaction(self.db):
            project_type = self.store.get_type(type_id)
            fields = {}
            if "category_id" in changes:
                fields["category_id"] = _required_text(changes["category_id"], "category")
                self.store.require_category(fields["category_id"])
            if "code" in changes:
                fields["code"] = _required_text(changes["code"], "code").lower()
                if self.store.type_code_taken(fields["code"], exclude_id=type_id):
                    raise errors.ProjectTypeCodeInUseError()
            if "name" in changes:
                fields["name"] = _required_text(changes["name"], "name")
            if "description" in changes:
                fields["description"] = clean_text(changes["description"])
            if changes.get("active") is not None:
                fields["active"] = changes["active"]

            category_id = fields.get("category_id", project_type.category_id)
            name = fields.get("name", project_type.name)
            if self.store.type_name_taken(category_id, name, exclude_id=type_id):
                raise errors.ProjectTypeNameInUseError()
            self.store.update_type(project_type, fields)

        logger.info("Project type %s updated", type_id)
        return self.store.get_type(type_id)
