"""
Pydantic schemas for tasks.
"""
from datetime import datetime
from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, StrictStr

from .base import UpdateRequest


class TaskCreate(BaseModel):
    """Schema for creating a task"""
    description: StrictStr = Field(..., description="What needs doing")
    completed: StrictBool = Field(False, description="Whether the task is done")


class TaskUpdate(UpdateRequest):
    """Schema for updating a task"""
    description: Optional[StrictStr] = Field(None, description="What needs doing")
    completed: Optional[StrictBool] = Field(None, description="Whether the task is done")


class TaskResponse(BaseModel):
    """Schema for task response"""
    id: int = Field(..., description="Task ID")
    description: str
    completed: bool
    owner: int = Field(
        ...,
        validation_alias=AliasChoices("owner", "owner_id"),
        description="Account ID that owns the task"
    )
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task update timestamp")

    model_config = ConfigDict(from_attributes=True)
