# Schemas/Planning/ProjectTypeSchema.py
from datetime import datetime
from typing import Optional

from Schemas.Planning.common import CamelModel


class ProjectCategoryOut(CamelModel):
    id: str
    code: str
    name: str
    description: str
    active: bool
    created: datetime
    updated: datetime


class ProjectTypeCreate(CamelModel):
    category_id: str
    code: str
    name: str
    description: str = ""
    active: bool = True


class ProjectTypeUpdate(CamelModel):
    category_id: Optional[str] = None
    code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    active: Optional[bool] = None


class ProjectTypeOut(CamelModel):
    id: str
    category_id: str
    category_code: str = ""
    category_name: str = ""
    code: str
    name: str
    description: str
    active: bool
    created: datetime
    updated: datetime
