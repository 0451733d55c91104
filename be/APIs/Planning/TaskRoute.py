# APIs/Planning/TaskRoute.py
from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi import status
from sqlalchemy.orm import Session

from APIs.Core import Principal, build_service, get_db, require_permission
from Schemas.Planning.TaskSchema import TaskCreate, TaskUpdate, TaskOut, TaskCommentCreate, TaskCommentOut

taskRoute = APIRouter(prefix="/projects/{project_id}/tasks", tags=["Project Tasks"])


@taskRoute.get("", response_model=List[TaskOut])
def list_tasks(
        project_id: str,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_tasks.read"))
):
    return build_service(request, db, principal).list_tasks(project_id)


@taskRoute.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
        project_id: str,
        payload: TaskCreate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_tasks.create"))
):
    """
    Create a task. When `plannerMeta` is sent it is encoded into the objective,
    making the row a sub-phase or a child of another task.
    """
    return build_service(request, db, principal).create_task(project_id, payload)


@taskRoute.patch("/{task_id}", response_model=TaskOut)
def update_task(
        project_id: str,
        task_id: str,
        payload: TaskUpdate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_tasks.update"))
):
    return build_service(request, db, principal).update_task(project_id, task_id, payload)


@taskRoute.get("/{task_id}/comments", response_model=List[TaskCommentOut])
def list_task_comments(
        project_id: str,
        task_id: str,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_tasks.read"))
):
    return build_service(request, db, principal).list_task_comments(project_id, task_id)


@taskRoute.post("/{task_id}/comments", response_model=TaskCommentOut, status_code=status.HTTP_201_CREATED)
def create_task_comment(
        project_id: str,
        task_id: str,
        payload: TaskCommentCreate,
        request: Request,
        db: Session = Depends(get_db),
        principal: Principal = Depends(require_permission("project_tasks.read"))
):
    # the author is whoever holds the token, staff user or client
    return build_service(request, db, principal).create_task_comment(
        project_id, task_id, payload, author_id=principal.id, author_type=principal.kind,
    )
