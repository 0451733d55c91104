# APIs/Planning/ProjectTypeRoute.py
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from fastapi import status
from sqlalchemy.orm import Session

from APIs.Core import Principal, build_service, get_db, require_permission
from Schemas.Planning.ProjectTypeSchema import (
    ProjectCategoryOut, ProjectTypeCreate, ProjectTypeUpdate, ProjectTypeOut,
)

projectTypeRoute = APIRouter(tags=["Project Types"])


@projectTypeRoute.get("/project-categories", response_model=List[ProjectCategoryOut])
def list_project_categories(
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_categories.read"))
):
    return build_service(request, db, principal).list_categories()


@projectTypeRoute.get("/project-types", response_model=List[ProjectTypeOut])
def list_project_types(
        request: Request,
        category_id: str = Query("", alias="categoryId"),
        only_active: bool = Query(False, alias="onlyActive"),
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_types.read"))
):
    return build_service(request, db, principal).list_types(category_id, only_active)


@projectTypeRoute.post("/project-types", response_model=ProjectTypeOut, status_code=status.HTTP_201_CREATED)
def create_project_type(
        payload: ProjectTypeCreate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_types.create"))
):
    return build_service(request, db, principal).create_type(payload)


@projectTypeRoute.patch("/project-types/{type_id}", response_model=ProjectTypeOut)
def update_project_type(
        type_id: str,
        payload: ProjectTypeUpdate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_types.update"))
):
    return build_service(request, db, principal).update_type(type_id, payload)
