"""Task service — owner-scoped task CRUD and list queries.

Every query carries `owner_id = :acting_user`. A task that exists but
belongs to someone else is reported exactly like a task that doesn't
exist (NotFoundError), so non-owners learn nothing about other
users' ids.

Listing: filter by `completed`, order by one whitelisted column
(descending only for "desc"), then OFFSET skip, LIMIT limit.
"""

import uuid
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.db.models import Task
from taskmanager.errors import NotFoundError, ValidationError
from taskmanager.schemas.task import TaskCreate, TaskQuery, TaskUpdate

logger = structlog.get_logger()

SORTABLE_FIELDS = {
    "created_at": Task.created_at,
    "createdAt": Task.created_at,
    "updated_at": Task.updated_at,
    "updatedAt": Task.updated_at,
    "description": Task.description,
    "completed": Task.completed,
}


def parse_task_id(raw: str) -> uuid.UUID:
    """Malformed ids can't match any task, so they are simply not found."""
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise NotFoundError("Task not found")


class TaskService:
    """Business logic for tasks, always scoped to one owner."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Create ──────────────────────────────────────────

    async def create_task(self, owner_id: uuid.UUID, body: TaskCreate) -> Task:
        task = Task(
            description=body.description,
            completed=body.completed,
            owner_id=owner_id,
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)
        logger.info("task.created", task_id=str(task.id), owner_id=str(owner_id))
        return task

    # ─── Read ────────────────────────────────────────────

    async def get_task(self, owner_id: uuid.UUID, task_id: uuid.UUID) -> Task:
        result = await self.db.execute(
            select(Task).where(Task.id == task_id, Task.owner_id == owner_id)
        )
        task = result.scalars().first()
        if not task:
            raise NotFoundError("Task not found")
        return task

    async def list_tasks(
        self, owner_id: uuid.UUID, query: Optional[TaskQuery] = None
    ) -> list[Task]:
        """List the owner's tasks with optional filter, sort and paging.

        Default order is oldest first. `id` breaks ties so pages are stable.
        """
        query = query or TaskQuery()

        stmt = select(Task).where(Task.owner_id == owner_id)
        if query.completed is not None:
            stmt = stmt.where(Task.completed == query.completed)

        column = Task.created_at
        if query.sort_field:
            column = SORTABLE_FIELDS.get(query.sort_field)
            if column is None:
                raise ValidationError(f"Cannot sort by '{query.sort_field}'")
        if query.sort_direction == "desc":
            stmt = stmt.order_by(column.desc(), Task.id.desc())
        else:
            stmt = stmt.order_by(column.asc(), Task.id.asc())

        if query.skip:
            stmt = stmt.offset(query.skip)
        if query.limit:
            stmt = stmt.limit(query.limit)

        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # ─── Update ──────────────────────────────────────────

    async def update_task(
        self, owner_id: uuid.UUID, task_id: uuid.UUID, body: TaskUpdate
    ) -> Task:
        """Apply description/completed changes. The schema has already
        rejected any other field, so nothing partial can happen here."""
        task = await self.get_task(owner_id, task_id)

        changes = body.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(task, field, value)

        await self.db.commit()
        await self.db.refresh(task)
        logger.info("task.updated", task_id=str(task.id), fields=sorted(changes))
        return task

    # ─── Delete ──────────────────────────────────────────

    async def delete_task(self, owner_id: uuid.UUID, task_id: uuid.UUID) -> Task:
        task = await self.get_task(owner_id, task_id)
        await self.db.delete(task)
        await self.db.commit()
        logger.info("task.deleted", task_id=str(task.id))
        return task
