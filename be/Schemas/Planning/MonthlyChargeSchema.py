# Schemas/Planning/MonthlyChargeSchema.py
from datetime import date, datetime
from typing import Optional
from pydantic import field_validator

from Schemas.Planning.common import CamelModel, date_field


class MonthlyChargeCreate(CamelModel):
    title: str
    description: str = ""
    installment: str = ""
    amount: float = 0
    due_day: int = 0
    starts_on: Optional[date] = None
    ends_on: Optional[date] = None
    status: str = ""
    active: bool = True

    parse_dates = field_validator("starts_on", "ends_on", mode="before")(date_field)


class MonthlyChargeUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    installment: Optional[str] = None
    amount: Optional[float] = None
    due_day: Optional[int] = None
    starts_on: Optional[date] = None
    ends_on: Optional[date] = None
    status: Optional[str] = None
    active: Optional[bool] = None

    parse_dates = field_validator("starts_on", "ends_on", mode="before")(date_field)


class MonthlyChargeOut(CamelModel):
    id: str
    project_id: str
    title: str
    description: str
    installment: str
    amount: float
    due_day: int
    starts_on: Optional[date] = None
    ends_on: Optional[date] = None
    status: str
    active: bool
    created: datetime
    updated: datetime
