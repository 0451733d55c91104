# APIs/Planning/ProjectRoute.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi import status
from sqlalchemy.orm import Session

from APIs.Core import Principal, build_service, get_db, require_permission
from Schemas.Planning.ExportSchema import ProjectExportOut
from Schemas.Planning.ProjectSchema import (
    ProjectCreate, ProjectUpdate, ProjectStatusUpdate, ProjectOut, ProjectListItem,
)

projectRoute = APIRouter(prefix="/projects", tags=["Projects"])


@projectRoute.get("", response_model=List[ProjectListItem])
def list_projects(
        request: Request,
        search: str = "",
        only_active: bool = Query(False, alias="onlyActive"),
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("projects.read"))
):
    """
    List projects with their child counters, newest first.
    `search` matches name, objective, type and category (case-insensitive).
    """
    rows = build_service(request, db, principal).list_projects(search, only_active)
    return [ProjectListItem.from_row(row) for row in rows]


@projectRoute.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(
        payload: ProjectCreate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("projects.create"))
):
    return build_service(request, db, principal).create_project(payload)


@projectRoute.get("/{project_id}", response_model=ProjectOut)
def get_project(
        project_id: str,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("projects.read"))
):
    return build_service(request, db, principal).get_project(project_id)


@projectRoute.patch("/{project_id}", response_model=ProjectOut)
def update_project(
        project_id: str,
        payload: ProjectUpdate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("projects.update"))
):
    return build_service(request, db, principal).update_project(project_id, payload)


@projectRoute.patch("/{project_id}/status", response_model=ProjectOut)
def update_project_status(
        project_id: str,
        payload: ProjectStatusUpdate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("projects.update"))
):
    """
    Change the project status. Cancelling deactivates every phase and cancels every task;
    "concluido" is stored as "andamento" while a task is already concluded.
    """
    return build_service(request, db, principal).update_project_status(project_id, payload.status)


@projectRoute.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
        project_id: str,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("projects.delete"))
):
    build_service(request, db, principal).delete_project(project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@projectRoute.post("/{project_id}/recalculate", response_model=ProjectOut)
def recalculate_project(
        project_id: str,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("projects.update"))
):
    return build_service(request, db, principal).recalculate_project(project_id)


@projectRoute.get("/{project_id}/export", response_model=ProjectExportOut)
def export_project(
        project_id: str,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("projects.read"))
):
    export = build_service(request, db, principal).export_project(project_id)
    return ProjectExportOut.model_validate(export)


@projectRoute.get("/{project_id}/export-pdf")
def export_project_pdf(
        project_id: str,
        request: Request,
        theme: Optional[str] = None,
        font: Optional[str] = None,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("projects.read"))
):
    content = build_service(request, db, principal).export_project_pdf(project_id, theme=theme, font=font)
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="projeto-{project_id}.pdf"'},
    )
