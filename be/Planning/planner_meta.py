"""
Planner meta codec.

A task row may carry, in its free-text objective, a small JSON descriptor
that turns it into a logical sub-phase container or attaches it under a
phase, a sub-phase or another task:

    __planner_meta__:{"kind":"task","parentType":"subphase","parentId":"<task id>"}

The prefix is part of the stored data and must never change. Parsing is
total: anything that is not a well formed, accepted descriptor is "no meta"
and the objective is treated as plain text.
"""

import json
from dataclasses import dataclass
from typing import Optional, Tuple

PLANNER_META_PREFIX = "__planner_meta__:"
PLANNER_META_VERSION = 1

KIND_SUBPHASE = "subphase"
KIND_TASK = "task"

PARENT_PHASE = "phase"
PARENT_SUBPHASE = "subphase"
PARENT_TASK = "task"

TASK_PARENT_TYPES = frozenset({PARENT_PHASE, PARENT_SUBPHASE, PARENT_TASK})


@dataclass(frozen=True)
class PlannerMeta:
    kind: str
    parent_type: str = ""
    parent_id: str = ""

    @property
    def is_subphase(self) -> bool:
        return self.kind == KIND_SUBPHASE

    @property
    def parent_task_id(self) -> str:
        """Id of the task row this one hangs under, or "" when the parent is a phase."""
        if self.kind == KIND_TASK and self.parent_type != PARENT_PHASE:
            return self.parent_id
        return ""


def normalize_planner_meta(kind, parent_type="", parent_id="") -> PlannerMeta:
    return PlannerMeta(
        kind=(kind or "").strip().lower(),
        parent_type=(parent_type or "").strip().lower(),
        parent_id=(parent_id or "").strip(),
    )


def is_valid_planner_meta(meta: PlannerMeta) -> bool:
    if meta.kind == KIND_SUBPHASE:
        return True
    return meta.kind == KIND_TASK and meta.parent_type in TASK_PARENT_TYPES


def parse_planner_meta(objective) -> Tuple[Optional[PlannerMeta], bool]:
    if not isinstance(objective, str):
        return None, False

    trimmed = objective.strip()
    if not trimmed.startswith(PLANNER_META_PREFIX):
        return None, False

    raw = trimmed[len(PLANNER_META_PREFIX):].strip()
    if not raw:
        return None, False

    try:
        decoded = json.loads(raw)
    except ValueError:
        return None, False
    if not isinstance(decoded, dict):
        return None, False

    # descriptors written by a newer format are ignored rather than misread
    version = decoded.get("version", PLANNER_META_VERSION)
    if isinstance(version, bool) or version != PLANNER_META_VERSION:
        return None, False

    fields = [decoded.get(key) for key in ("kind", "parentType", "parentId")]
    if any(value is not None and not isinstance(value, str) for value in fields):
        return None, False

    meta = normalize_planner_meta(*fields)
    if not is_valid_planner_meta(meta):
        return None, False
    return meta, True


def encode_planner_meta(meta: PlannerMeta) -> str:
    payload = {
        "kind": meta.kind,
        "parentType": meta.parent_type,
        "parentId": meta.parent_id,
    }
    return PLANNER_META_PREFIX + json.dumps(payload, separators=(",", ":"))
