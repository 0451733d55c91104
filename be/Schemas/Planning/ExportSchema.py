# Schemas/Planning/ExportSchema.py
from datetime import date, datetime
from typing import List, Optional

from Schemas.Planning.common import CamelModel, FileOut
from Schemas.Planning.ProjectSchema import ProjectOut


class PlanningRowOut(CamelModel):
    id: str
    parent_id: str = ""
    level: int
    kind: str
    phase_id: str = ""
    title: str
    description: str
    starts_on: Optional[date] = None
    ends_on: Optional[date] = None
    status: str
    progress_percent: int
    position: int
    files: List[FileOut] = []


class ExportSummaryOut(CamelModel):
    project_percent: int
    total_phases: int
    total_tasks: int
    total_tracked_tasks: int
    total_completed_tasks: int


class ProjectExportOut(CamelModel):
    project: ProjectOut
    summary: ExportSummaryOut
    planning: List[PlanningRowOut]
    generated_at: datetime
