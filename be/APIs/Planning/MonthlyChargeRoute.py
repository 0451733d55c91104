# APIs/Planning/MonthlyChargeRoute.py
from typing import List

from fastapi import APIRouter, Depends, Request, Response
from fastapi import status
from sqlalchemy.orm import Session

from APIs.Core import Principal, build_service, get_db, require_permission
from Schemas.Planning.MonthlyChargeSchema import MonthlyChargeCreate, MonthlyChargeUpdate, MonthlyChargeOut

monthlyChargeRoute = APIRouter(prefix="/projects/{project_id}/monthly-charges", tags=["Project Monthly Charges"])


@monthlyChargeRoute.get("", response_model=List[MonthlyChargeOut])
def list_monthly_charges(
        project_id: str,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_monthly_charges.read"))
):
    return build_service(request, db, principal).list_monthly_charges(project_id)


@monthlyChargeRoute.post("", response_model=MonthlyChargeOut, status_code=status.HTTP_201_CREATED)
def create_monthly_charge(
        project_id: str,
        payload: MonthlyChargeCreate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_monthly_charges.create"))
):
    return build_service(request, db, principal).create_monthly_charge(project_id, payload)


@monthlyChargeRoute.patch("/{charge_id}", response_model=MonthlyChargeOut)
def update_monthly_charge(
        project_id: str,
        charge_id: str,
        payload: MonthlyChargeUpdate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_monthly_charges.update"))
):
    """Only pending charges can be edited; paid or cancelled ones answer 409."""
    return build_service(request, db, principal).update_monthly_charge(project_id, charge_id, payload)


@monthlyChargeRoute.delete("/{charge_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_monthly_charge(
        project_id: str,
        charge_id: str,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_monthly_charges.delete"))
):
    build_service(request, db, principal).delete_monthly_charge(project_id, charge_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
