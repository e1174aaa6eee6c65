"""Pydantic schemas for tasks.

- TaskCreate: what you POST to create a task (owner comes from the token)
- TaskUpdate: what you PATCH; exactly `description` and `completed`
- TaskRead: what the API returns
- TaskQuery: filter / sort / page options for listing
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class TaskCreate(BaseModel):
    description: str = Field(..., min_length=1)
    completed: bool = False

    model_config = {"str_strip_whitespace": True}


class TaskUpdate(BaseModel):
    """Partial update. Unknown keys reject the whole request."""

    description: Optional[str] = Field(None, min_length=1)
    completed: Optional[bool] = None

    model_config = {"str_strip_whitespace": True, "extra": "forbid"}

    @field_validator("description", "completed")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v


class TaskRead(BaseModel):
    id: uuid.UUID
    description: str
    completed: bool
    owner_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskQuery(BaseModel):
    """Listing options. Absent skip/limit mean no skip / no limit."""

    completed: Optional[bool] = None
    sort_field: Optional[str] = None
    sort_direction: Optional[str] = None
    limit: Optional[int] = Field(None, ge=0)
    skip: Optional[int] = Field(None, ge=0)

    @classmethod
    def from_params(
        cls,
        completed: Optional[bool] = None,
        sort_by: Optional[str] = None,
        limit: Optional[int] = None,
        skip: Optional[int] = None,
    ) -> "TaskQuery":
        """Build from query-string values; `sort_by` is `field` or `field:direction`."""
        sort_field = sort_direction = None
        if sort_by:
            sort_field, _, sort_direction = sort_by.partition(":")
        return cls(
            completed=completed,
            sort_field=sort_field or None,
            sort_direction=sort_direction or None,
            limit=limit,
            skip=skip,
        )
