# Schemas/Planning/ProjectSchema.py
from datetime import date, datetime
from typing import List, Optional
from pydantic import field_validator

from Schemas.Planning.common import CamelModel, date_field
from Schemas.Planning.PhaseSchema import PhaseOut
from Schemas.Planning.TaskSchema import TaskOut
from Schemas.Planning.RevenueSchema import RevenueOut
from Schemas.Planning.MonthlyChargeSchema import MonthlyChargeOut


class ProjectCreate(CamelModel):
    name: str
    objective: str = ""
    project_type_id: Optional[str] = None
    lifecycle_type: str = ""
    has_monthly_maintenance: bool = False
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    active: bool = True
    client_ids: List[str] = []
    manager_user_ids: List[str] = []

    parse_dates = field_validator("start_date", "end_date", mode="before")(date_field)


class ProjectUpdate(CamelModel):
    """Partial update: only the fields sent are changed. `clientIds`/`managerUserIds` replace the links."""
    name: Optional[str] = None
    objective: Optional[str] = None
    project_type_id: Optional[str] = None
    lifecycle_type: Optional[str] = None
    has_monthly_maintenance: Optional[bool] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    active: Optional[bool] = None
    client_ids: Optional[List[str]] = None
    manager_user_ids: Optional[List[str]] = None

    parse_dates = field_validator("start_date", "end_date", mode="before")(date_field)


class ProjectStatusUpdate(CamelModel):
    status: str


class ProjectClientOut(CamelModel):
    client_id: str
    name: str
    email: str
    login: str
    role: str


class ProjectManagerOut(CamelModel):
    user_id: str
    name: str
    email: str
    login: str


class ProjectOut(CamelModel):
    id: str
    name: str
    objective: str
    project_type_id: Optional[str] = None
    project_type_name: str = ""
    project_category_name: str = ""
    lifecycle_type: str
    has_monthly_maintenance: bool
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: str
    active: bool
    created: datetime
    updated: datetime
    clients: List[ProjectClientOut] = []
    managers: List[ProjectManagerOut] = []
    revenues: List[RevenueOut] = []
    monthly_charges: List[MonthlyChargeOut] = []
    phases: List[PhaseOut] = []
    tasks: List[TaskOut] = []


class ProjectListItem(CamelModel):
    id: str
    name: str
    objective: str
    project_type_id: Optional[str] = None
    project_type_name: str = ""
    project_category_name: str = ""
    lifecycle_type: str
    has_monthly_maintenance: bool
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: str
    active: bool
    clients_count: int = 0
    revenues_count: int = 0
    monthly_charges_count: int = 0
    phases_count: int = 0
    tasks_count: int = 0
    created: datetime
    updated: datetime

    @classmethod
    def from_row(cls, row):
        item = cls.model_validate(row.project)
        return item.model_copy(update={
            "clients_count": row.clients_count,
            "revenues_count": row.revenues_count,
            "monthly_charges_count": row.monthly_charges_count,
            "phases_count": row.phases_count,
            "tasks_count": row.tasks_count,
        })
