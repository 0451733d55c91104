# Schemas/Planning/RevenueSchema.py
from datetime import date, datetime
from typing import List, Optional
from pydantic import field_validator

from Schemas.Planning.common import CamelModel, date_field


class RevenueReceiptIn(CamelModel):
    file_name: str
    file_key: str
    content_type: str = ""
    issued_on: Optional[date] = None
    notes: str = ""

    parse_dates = field_validator("issued_on", mode="before")(date_field)


class RevenueReceiptOut(CamelModel):
    id: str
    project_revenue_id: str
    file_name: str
    file_key: str
    content_type: str
    issued_on: Optional[date] = None
    notes: str
    created: datetime
    updated: datetime


class RevenueCreate(CamelModel):
    title: str
    description: str = ""
    objective: str = ""
    amount: float = 0
    expected_on: Optional[date] = None
    received_on: Optional[date] = None
    status: str = ""
    active: bool = True
    receipts: List[RevenueReceiptIn] = []

    parse_dates = field_validator("expected_on", "received_on", mode="before")(date_field)


class RevenueStatusUpdate(CamelModel):
    status: str


class RevenueOut(CamelModel):
    id: str
    project_id: str
    title: str
    description: str
    objective: str
    amount: float
    expected_on: Optional[date] = None
    received_on: Optional[date] = None
    status: str
    active: bool
    receipts: List[RevenueReceiptOut] = []
    created: datetime
    updated: datetime
