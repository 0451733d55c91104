# Schemas/Planning/TaskSchema.py
from datetime import date, datetime
from typing import List, Optional
from pydantic import Field, field_validator

from Schemas.Planning.common import CamelModel, FileIn, FileOut, date_field


class PlannerMetaIn(CamelModel):
    kind: str
    parent_type: str = ""
    parent_id: str = ""


class PlannerMetaOut(CamelModel):
    kind: str
    parent_type: str
    parent_id: str


class TaskCreate(CamelModel):
    phase_id: Optional[str] = Field(default=None, alias="projectPhaseId")
    name: str
    description: str = ""
    objective: str = ""
    # when sent, replaces `objective` with the encoded descriptor
    planner_meta: Optional[PlannerMetaIn] = None
    responsible_user_id: Optional[str] = None
    starts_on: Optional[date] = None
    ends_on: Optional[date] = None
    position: int = 0
    status: str = ""
    active: bool = True
    files: List[FileIn] = []

    parse_dates = field_validator("starts_on", "ends_on", mode="before")(date_field)


class TaskUpdate(CamelModel):
    phase_id: Optional[str] = Field(default=None, alias="projectPhaseId")
    name: Optional[str] = None
    description: Optional[str] = None
    objective: Optional[str] = None
    planner_meta: Optional[PlannerMetaIn] = None
    responsible_user_id: Optional[str] = None
    starts_on: Optional[date] = None
    ends_on: Optional[date] = None
    position: Optional[int] = None
    status: Optional[str] = None
    active: Optional[bool] = None

    parse_dates = field_validator("starts_on", "ends_on", mode="before")(date_field)


class TaskOut(CamelModel):
    id: str
    project_id: str
    phase_id: Optional[str] = Field(default=None, alias="projectPhaseId")
    name: str
    description: str
    objective: str
    planner_meta: Optional[PlannerMetaOut] = None
    responsible_user_id: Optional[str] = None
    responsible_user_name: str = ""
    starts_on: Optional[date] = None
    ends_on: Optional[date] = None
    position: int
    status: str
    active: bool
    files: List[FileOut] = []
    created: datetime
    updated: datetime


class TaskCommentCreate(CamelModel):
    comment: str
    parent_comment_id: Optional[str] = None
    files: List[FileIn] = []


class TaskCommentOut(CamelModel):
    id: str
    project_task_id: str
    parent_comment_id: Optional[str] = None
    user_id: Optional[str] = None
    client_id: Optional[str] = None
    author_name: str = ""
    author_type: str
    is_task_responsible: bool = False
    is_project_manager: bool = False
    comment: str
    files: List[FileOut] = []
    created: datetime
    updated: datetime
