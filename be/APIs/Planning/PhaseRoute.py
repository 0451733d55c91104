# APIs/Planning/PhaseRoute.py
from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi import status
from sqlalchemy.orm import Session

from APIs.Core import Principal, build_service, get_db, require_permission
from Schemas.Planning.PhaseSchema import PhaseCreate, PhaseUpdate, PhaseOut

phaseRoute = APIRouter(prefix="/projects/{project_id}/phases", tags=["Project Phases"])


@phaseRoute.get("", response_model=List[PhaseOut])
def list_phases(
        project_id: str,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_phases.read"))
):
    return build_service(request, db, principal).list_phases(project_id)


@phaseRoute.post("", response_model=PhaseOut, status_code=status.HTTP_201_CREATED)
def create_phase(
        project_id: str,
        payload: PhaseCreate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_phases.create"))
):
    """Create a phase and recalculate the project timeline in the same transaction."""
    return build_service(request, db, principal).create_phase(project_id, payload)


@phaseRoute.patch("/{phase_id}", response_model=PhaseOut)
def update_phase(
        project_id: str,
        phase_id: str,
        payload: PhaseUpdate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_phases.update"))
):
    return build_service(request, db, principal).update_phase(project_id, phase_id, payload)
