"""Task API routes.

Routes translate HTTP to TaskService calls; ownership, not-found and
validation are all decided in the service and mapped to status codes
by the exception handlers.

Listing options (query string):
- completed=true|false
- sortBy=<field>[:asc|desc]   e.g. sortBy=created_at:desc
- limit, skip                 pagination, skip applied first
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.auth.dependencies import CurrentIdentity, get_current_user
from taskmanager.db.engine import get_db
from taskmanager.schemas.task import TaskCreate, TaskQuery, TaskRead, TaskUpdate
from taskmanager.services.task_service import TaskService, parse_task_id

router = APIRouter(prefix="/tasks")


def _task_svc(db: AsyncSession = Depends(get_db)) -> TaskService:
    return TaskService(db)


@router.post("", response_model=TaskRead, status_code=201)
async def create_task(
    body: TaskCreate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Create a task owned by the caller."""
    return await svc.create_task(identity.user.id, body)


@router.get("", response_model=list[TaskRead])
async def list_tasks(
    completed: Optional[bool] = Query(None, description="Filter by completion"),
    sort_by: Optional[str] = Query(None, alias="sortBy", description="field[:asc|desc]"),
    limit: Optional[int] = Query(None, ge=0),
    skip: Optional[int] = Query(None, ge=0),
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """List the caller's tasks."""
    query = TaskQuery.from_params(
        completed=completed, sort_by=sort_by, limit=limit, skip=skip
    )
    return await svc.list_tasks(identity.user.id, query)


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    return await svc.get_task(identity.user.id, parse_task_id(task_id))


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: str,
    body: TaskUpdate,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Change description and/or completed. Any other key → 400."""
    return await svc.update_task(identity.user.id, parse_task_id(task_id), body)


@router.delete("/{task_id}", response_model=TaskRead)
async def delete_task(
    task_id: str,
    identity: CurrentIdentity = Depends(get_current_user),
    svc: TaskService = Depends(_task_svc),
):
    """Delete one of the caller's tasks. Returns the removed task."""
    return await svc.delete_task(identity.user.id, parse_task_id(task_id))
