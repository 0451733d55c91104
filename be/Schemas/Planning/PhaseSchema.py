# Schemas/Planning/PhaseSchema.py
from datetime import date, datetime
from typing import List, Optional
from pydantic import field_validator

from Schemas.Planning.common import CamelModel, FileIn, FileOut, date_field


class PhaseCreate(CamelModel):
    name: str
    description: str = ""
    objective: str = ""
    starts_on: Optional[date] = None
    ends_on: Optional[date] = None
    position: int = 0
    active: bool = True
    files: List[FileIn] = []

    parse_dates = field_validator("starts_on", "ends_on", mode="before")(date_field)


class PhaseUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    objective: Optional[str] = None
    starts_on: Optional[date] = None
    ends_on: Optional[date] = None
    position: Optional[int] = None
    active: Optional[bool] = None

    parse_dates = field_validator("starts_on", "ends_on", mode="before")(date_field)


class PhaseOut(CamelModel):
    id: str
    project_id: str
    name: str
    description: str
    objective: str
    starts_on: Optional[date] = None
    ends_on: Optional[date] = None
    position: int
    active: bool
    files: List[FileOut] = []
    created: datetime
    updated: datetime
