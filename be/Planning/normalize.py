"""
Input normalization shared by the schemas and the service layer.
"""

from datetime import date, datetime
from typing import Iterable, List, Optional

from dateutil.parser import isoparse

from Planning.errors import InvalidInputError

LIFECYCLE_TYPES = ("temporario", "recorrente")
DEFAULT_LIFECYCLE_TYPE = "temporario"

TASK_STATUSES = ("planejada", "iniciada", "concluida", "cancelada")
TASK_PLANNED = "planejada"
TASK_STARTED = "iniciada"
TASK_COMPLETED = "concluida"
TASK_CANCELLED = "cancelada"

REVENUE_STATUSES = ("pendente", "recebido", "cancelado")
MONTHLY_CHARGE_STATUSES = ("pendente", "pago", "cancelada")
PENDING = "pendente"

_TASK_STATUS_SYNONYMS = {
    "": TASK_PLANNED,
    "pendente": TASK_PLANNED,
    "em_andamento": TASK_STARTED,
}


def clean_text(value) -> str:
    return (value or "").strip()


def normalize_task_status(value) -> str:
    status = clean_text(value).lower()
    return _TASK_STATUS_SYNONYMS.get(status, status)


def export_task_status(value) -> str:
    """Stored task status as shown in reports; unknown values read as planned."""
    status = normalize_task_status(value)
    return status if status in TASK_STATUSES else TASK_PLANNED


def is_task_completed(value) -> bool:
    return export_task_status(value) == TASK_COMPLETED


def is_task_cancelled(value) -> bool:
    return export_task_status(value) == TASK_CANCELLED


def require_task_status(value) -> str:
    status = normalize_task_status(value)
    if status not in TASK_STATUSES:
        raise InvalidInputError("invalid task status")
    return status


def normalize_lifecycle_type(value) -> str:
    lifecycle = clean_text(value).lower() or DEFAULT_LIFECYCLE_TYPE
    if lifecycle not in LIFECYCLE_TYPES:
        raise InvalidInputError("invalid lifecycle type")
    return lifecycle


def require_choice(value, allowed, default: str, label: str) -> str:
    choice = clean_text(value).lower() or default
    if choice not in allowed:
        raise InvalidInputError(f"invalid {label}")
    return choice


def unique_ids(ids: Optional[Iterable[str]]) -> List[str]:
    seen = []
    for value in ids or []:
        value = clean_text(value)
        if value and value not in seen:
            seen.append(value)
    return seen


def parse_date_value(value) -> Optional[date]:
    """Accept YYYY-MM-DD or an RFC 3339 timestamp and keep only the calendar day."""
    if value is None or isinstance(value, date) and not isinstance(value, datetime):
        return value
    if isinstance(value, datetime):
        return value.date()
    if not isinstance(value, str):
        raise ValueError("date must be a string")
    text = value.strip()
    if not text:
        return None
    if len(text) == 10:
        return date.fromisoformat(text)
    return isoparse(text).date()


def check_date_range(starts_on, ends_on, label: str = "date range"):
    if starts_on is not None and ends_on is not None and ends_on < starts_on:
        raise InvalidInputError(f"invalid {label}")
