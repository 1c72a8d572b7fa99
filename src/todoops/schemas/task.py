"""Pydantic schemas for task-related operations.

This module defines the input and output schemas for task operations,
including validation and serialization models.
"""

from datetime import datetime
from typing import Optional, List

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from ..models.task import TaskStatus, as_utc


def _require_text(value: Optional[str], field_name: str) -> str:
    """Strip a required text value, rejecting null and blank input."""
    if value is None:
        raise ValueError(f"{field_name.capitalize()} cannot be null")
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field_name.capitalize()} cannot be empty")
    return stripped


class TaskCreate(BaseModel):
    """Input schema for creating a new task.

    Title and description are required and must not be blank. The status of
    a new task is always NEW, so a status sent by the client is ignored.
    """
    title: str = Field(..., description="Task title (required)")
    description: str = Field(..., description="Task description (required)")
    due_date: Optional[datetime] = Field(None, description="Optional due date (ISO 8601 datetime)")

    @field_validator('title', 'description')
    @classmethod
    def validate_required_text(cls, v: str, info: ValidationInfo) -> str:
        """Validate that title and description are non-empty after stripping whitespace."""
        return _require_text(v, info.field_name)

    @field_validator('due_date')
    @classmethod
    def normalize_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Store due dates in UTC; naive values are taken to be UTC already."""
        return as_utc(v)


class TaskUpdate(BaseModel):
    """Input schema for a partial task update.

    Only fields present in the request are applied. A present title or
    description must be a non-blank string; a present ``due_date: null``
    clears the due date. Status and creation time cannot be changed here.
    """
    title: Optional[str] = Field(None, description="New task title")
    description: Optional[str] = Field(None, description="New task description")
    due_date: Optional[datetime] = Field(None, description="New due date, or null to clear it")

    @field_validator('title', 'description')
    @classmethod
    def validate_present_text(cls, v: Optional[str], info: ValidationInfo) -> str:
        """Reject null or blank values for fields that were sent."""
        return _require_text(v, info.field_name)

    @field_validator('due_date')
    @classmethod
    def normalize_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Store due dates in UTC; naive values are taken to be UTC already."""
        return as_utc(v)


class TaskStatusRequest(BaseModel):
    """Input schema for changing the status of a task."""
    status: TaskStatus = Field(..., description="Target status (NEW, IN_PROGRESS, COMPLETED)")


class TaskResponse(BaseModel):
    """Output schema for task responses."""
    id: int = Field(..., description="Unique task identifier")
    title: str = Field(..., description="Task title")
    description: str = Field(..., description="Task description")
    status: str = Field(..., description="Task status")
    created_at: str = Field(..., description="Task creation timestamp (ISO format string)")
    due_date: Optional[str] = Field(None, description="Task due date (ISO format string)")

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": 42,
                "title": "Complete project documentation",
                "description": "Write README and API docs for the backend",
                "status": "IN_PROGRESS",
                "created_at": "2025-01-15T10:30:00+00:00",
                "due_date": "2025-12-31T23:59:59+00:00"
            }
        }
    }


class TaskPageResponse(BaseModel):
    """Output schema for one page of tasks."""
    content: List[TaskResponse] = Field(default_factory=list, description="Tasks on this page, ordered by id")
    totalElements: int = Field(..., description="Number of tasks in the whole collection")
    totalPages: int = Field(..., description="Number of pages at this page size")
    size: int = Field(..., description="Requested page size")
    number: int = Field(..., description="Requested zero-based page index")


class ErrorObject(BaseModel):
    """Output schema for every error response."""
    code: int = Field(..., description="HTTP status code")
    message: str = Field(..., description="Stable symbolic error identifier")
    humanMessage: str = Field(..., description="Human-readable description")

    model_config = {
        "json_schema_extra": {
            "example": {
                "code": 400,
                "message": "task.not_found",
                "humanMessage": "Task not found: 42"
            }
        }
    }
