"""SQLAlchemy ORM models for the todoops service.

This package contains all database models and the base declarative class.
"""

from .base import Base
from .task import Task, TaskStatus

__all__ = ["Base", "Task", "TaskStatus"]
