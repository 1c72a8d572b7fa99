"""Pydantic schemas for the todoops service.

This package contains all Pydantic models for request/response validation
and serialization.
"""

from .task import (
    TaskCreate,
    TaskUpdate,
    TaskStatusRequest,
    TaskResponse,
    TaskPageResponse,
    ErrorObject,
)

__all__ = [
    "TaskCreate",
    "TaskUpdate",
    "TaskStatusRequest",
    "TaskResponse",
    "TaskPageResponse",
    "ErrorObject",
]
