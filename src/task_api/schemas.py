from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .models import TaskRef


# PUBLIC_INTERFACE
class TaskCreate(BaseModel):
    """
    Schema for creating a new task.

    Length and emptiness rules are enforced by the lifecycle controller so that
    failures surface with their specific error codes.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Buy milk",
                "description": "2%",
            }
        }
    )

    title: str = Field(..., description="Task title (1..100 bytes after trimming); part of the task address")
    description: str = Field(..., description="Task description (1..1000 bytes after trimming)")


# PUBLIC_INTERFACE
class TaskUpdate(BaseModel):
    """
    Schema for updating a task. Only the description can change.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"description": "whole"}})

    description: str = Field(..., description="New task description (1..1000 bytes after trimming)")


# PUBLIC_INTERFACE
class TaskOut(BaseModel):
    """
    Schema returned by the API for a task.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "address": "5f0c...e91a",
                "owner": "9a3b...77c0",
                "title": "Buy milk",
                "description": "2%",
                "completed": False,
                "created_at": 1735725600,
            }
        }
    )

    address: str = Field(..., description="Derived storage address of the task")
    owner: str = Field(..., description="Owner identity as hex")
    title: str = Field(..., description="Task title")
    description: str = Field(..., description="Task description")
    completed: bool = Field(..., description="Completion status flag")
    created_at: int = Field(..., description="Creation time as a Unix timestamp (seconds)")

    @classmethod
    def from_ref(cls, ref: TaskRef) -> "TaskOut":
        record = ref.record
        return cls(
            address=ref.address,
            owner=record["owner"].hex(),
            title=record["title"],
            description=record["description"],
            completed=record["completed"],
            created_at=record["created_at"],
        )


# PUBLIC_INTERFACE
class AddressOut(BaseModel):
    """Address derived for an (owner, title) pair."""

    address: str = Field(..., description="Derived storage address")
    owner: str = Field(..., description="Owner identity as hex")
    title: str = Field(..., description="Task title the address was derived from")
