"""Service layer for the todoops service.

This package contains the task business logic, the status transition rules
and the task store the service persists through.
"""

from .task_service import (
    create_task,
    list_tasks,
    get_task_by_id,
    update_task,
    delete_task,
    change_task_status,
)
from .status_transitions import is_transition_allowed, transition_path
from .task_store import TaskStore, TaskPage

__all__ = [
    "create_task",
    "list_tasks",
    "get_task_by_id",
    "update_task",
    "delete_task",
    "change_task_status",
    "is_transition_allowed",
    "transition_path",
    "TaskStore",
    "TaskPage",
]
