# APIs/Planning/RevenueRoute.py
from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi import status
from sqlalchemy.orm import Session

from APIs.Core import Principal, build_service, get_db, require_permission
from Schemas.Planning.RevenueSchema import RevenueCreate, RevenueStatusUpdate, RevenueOut

revenueRoute = APIRouter(prefix="/projects/{project_id}/revenues", tags=["Project Revenues"])


@revenueRoute.get("", response_model=List[RevenueOut])
def list_revenues(
        project_id: str,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_revenues.read"))
):
    return build_service(request, db, principal).list_revenues(project_id)


@revenueRoute.post("", response_model=RevenueOut, status_code=status.HTTP_201_CREATED)
def create_revenue(
        project_id: str,
        payload: RevenueCreate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_revenues.create"))
):
    return build_service(request, db, principal).create_revenue(project_id, payload)


@revenueRoute.patch("/{revenue_id}", response_model=RevenueOut)
def update_revenue_status(
        project_id: str,
        revenue_id: str,
        payload: RevenueStatusUpdate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_revenues.update"))
):
    return build_service(request, db, principal).update_revenue_status(project_id, revenue_id, payload.status)
