# Schemas/Planning/common.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from Planning.normalize import parse_date_value


class CamelModel(BaseModel):
    """Base for every planning payload: camelCase on the wire, snake_case in Python."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


def date_field(value):
    return parse_date_value(value)


class FileIn(CamelModel):
    file_name: str
    file_key: str
    content_type: str = ""
    notes: str = ""


class FileOut(CamelModel):
    id: str
    file_name: str
    file_key: str
    content_type: str
    notes: str
    created: Optional[datetime] = None
    updated: Optional[datetime] = None
