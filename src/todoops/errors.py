"""Error taxonomy for the todoops service.

Every failure that reaches a client is described by one of these exceptions.
Each carries an HTTP-style ``code``, a stable symbolic ``message`` that
clients may match on, and a free-text ``human_message`` for display.
"""

from typing import Any, Dict, Optional


class TaskServiceError(Exception):
    """Base class for errors rendered as ``{code, message, humanMessage}`` objects."""

    code: int = 500
    message: str = "internal.error"

    def __init__(self, human_message: str):
        super().__init__(human_message)
        self.human_message = human_message

    def to_error_object(self) -> Dict[str, Any]:
        """Return the error in its wire shape."""
        return {
            "code": self.code,
            "message": self.message,
            "humanMessage": self.human_message,
        }


class TaskNotFoundError(TaskServiceError):
    """Exception raised when a task with the specified ID is not found."""

    code = 400
    message = "task.not_found"

    def __init__(self, task_id: int):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class InvalidStatusTransitionError(TaskServiceError):
    """Exception raised when a status change is not an allowed transition."""

    code = 400
    message = "task.invalid_status_transition"

    def __init__(self, current, target):
        current_name = getattr(current, "name", current)
        target_name = getattr(target, "name", target)
        super().__init__(f"Invalid status transition from {current_name} to {target_name}")
        self.current = current
        self.target = target


class TaskValidationError(TaskServiceError):
    """Exception raised when a required field or range constraint is violated."""

    code = 400
    message = "validation.error"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail if detail else "Validation error")


class InternalServerError(TaskServiceError):
    """Generic failure; never carries details of the underlying exception."""

    code = 500
    message = "internal.error"

    def __init__(self):
        super().__init__("Something went wrong...")
