"""Task SQLAlchemy ORM model for the todoops service.

This module defines the Task model with the TaskStatus enum, a custom
TypeDecorator for enum validation, and a guard keeping the identity and
creation timestamp of a stored task immutable.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any

from sqlalchemy import (
    BigInteger, Column, Integer, String, Text, DateTime, Index, event, inspect
)
from sqlalchemy.types import TypeDecorator, String as SQLString

from .base import Base


class TaskStatus(Enum):
    """Enum for task status values."""
    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class StatusEnumType(TypeDecorator):
    """Custom SQLAlchemy TypeDecorator for TaskStatus enum validation."""
    impl = SQLString
    cache_ok = True

    def process_bind_param(self, value, dialect):
        """Convert TaskStatus enum to string for database storage."""
        if value is None:
            return None
        if isinstance(value, TaskStatus):
            return value.value
        if isinstance(value, str):
            # Validate that the string is a valid TaskStatus value
            try:
                TaskStatus(value)
                return value
            except ValueError:
                raise ValueError(f"Invalid TaskStatus value: {value}. Must be one of {[s.value for s in TaskStatus]}")
        raise ValueError(f"Invalid TaskStatus type: {type(value)}. Must be TaskStatus enum or string.")

    def process_result_value(self, value, dialect):
        """Convert string from database to TaskStatus enum."""
        if value is None:
            return None
        try:
            return TaskStatus(value)
        except ValueError:
            raise ValueError(f"Invalid status value in database: {value}")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return value as an aware UTC datetime.

    SQLite hands back naive datetimes; they are stored as UTC, so they are
    tagged rather than converted.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class Task(Base):
    """Task ORM model.

    The id is assigned by the database on insert. Status only changes through
    the task service, which applies the status transition rules.
    """
    __tablename__ = 'task'

    __table_args__ = (
        Index('idx_task_status', 'status'),
    )

    # Identity column; SQLite only autoincrements a plain INTEGER primary key
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(StatusEnumType, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=True)

    def __init__(self, **kwargs):
        """Initialize Task, stamping created_at when it is not provided."""
        if 'created_at' not in kwargs:
            kwargs['created_at'] = datetime.now(timezone.utc)
        super().__init__(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the Task model instance to a dictionary for serialization.

        Returns:
            Dict containing all task fields with proper type conversion:
            - status converted to its name
            - timestamps converted to ISO format strings in UTC
            - a missing description rendered as an empty string
            - due_date None when the task has no due date
        """
        due_date = as_utc(self.due_date)
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description if self.description is not None else "",
            'status': self.status.value,
            'created_at': as_utc(self.created_at).isoformat(),
            'due_date': due_date.isoformat() if due_date else None,
        }

    def __repr__(self):
        """String representation of the Task object."""
        return f"<Task(id={self.id}, title='{self.title}', status='{self.status.value if self.status else None}')>"


IMMUTABLE_FIELDS = ('id', 'created_at')


@event.listens_for(Task, 'before_update')
def reject_immutable_field_changes(mapper, connection, target):
    """Refuse to flush a Task whose id or created_at was modified after insert."""
    state = inspect(target)
    for field_name in IMMUTABLE_FIELDS:
        if state.attrs[field_name].history.has_changes():
            raise ValueError(f"Task field '{field_name}' cannot be changed after creation")
