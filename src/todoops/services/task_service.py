"""Task service layer for business logic and data persistence.

This module implements task creation, retrieval, listing, partial update,
deletion and status changes. Every operation runs in one unit of work over
the caller's session; domain failures are raised as errors from
``todoops.errors`` and reach the API boundary unchanged.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from sqlalchemy.orm import Session

from ..database import read_only_unit_of_work, unit_of_work
from ..errors import (
    InvalidStatusTransitionError,
    TaskNotFoundError,
    TaskServiceError,
    TaskValidationError,
)
from ..models.task import Task, TaskStatus
from ..schemas.task import TaskCreate, TaskUpdate
from .status_transitions import allowed_targets, is_transition_allowed
from .task_store import TaskStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ('title', 'description', 'due_date')


def _required_text(value: Optional[str], field_name: str) -> str:
    """Return the stripped value of a required text field.

    Raises:
        TaskValidationError: When the value is missing or blank.
    """
    if value is None:
        raise TaskValidationError(f"{field_name}: must not be null")
    stripped = value.strip()
    if not stripped:
        raise TaskValidationError(f"{field_name}: must not be blank")
    return stripped


def create_task(payload: TaskCreate, db: Session) -> Dict[str, Any]:
    """Create a new task in NEW status.

    Args:
        payload: TaskCreate Pydantic model with validated input data
        db: SQLAlchemy database session

    Returns:
        Dictionary representation of the created task

    Raises:
        TaskValidationError: When title or description is missing or blank
    """
    logger.info(f"Creating task with title: {getattr(payload, 'title', None)}")

    # Validated by Pydantic at the boundary, but the service does not rely on it
    title = _required_text(getattr(payload, 'title', None), 'title')
    description = _required_text(getattr(payload, 'description', None), 'description')

    task = Task(
        title=title,
        description=description,
        status=TaskStatus.NEW,
        created_at=datetime.now(timezone.utc),
        due_date=getattr(payload, 'due_date', None),
    )

    try:
        with unit_of_work(db):
            TaskStore(db).insert(task)
            result = task.to_dict()

        logger.info(f"Successfully created task with ID: {result['id']}")
        return result

    except Exception as e:
        logger.error(e, exc_info=True)
        raise


def list_tasks(db: Session, page: int, size: int) -> Dict[str, Any]:
    """List one page of tasks ordered by id ascending.

    Page bounds are validated at the API boundary; the store's totals are
    returned as they are.

    Args:
        db: SQLAlchemy database session
        page: Zero-based page index
        size: Page size

    Returns:
        Dictionary with ``content`` (task dictionaries), ``totalElements``,
        ``totalPages``, ``size`` and ``number`` (the page index)
    """
    logger.info(f"Listing tasks with page={page}, size={size}")

    try:
        with read_only_unit_of_work(db):
            task_page = TaskStore(db).list_page(page, size)
            content = [task.to_dict() for task in task_page.items]

        logger.info(f"Successfully retrieved {len(content)} tasks out of {task_page.total_elements} total")

        return {
            "content": content,
            "totalElements": task_page.total_elements,
            "totalPages": task_page.total_pages,
            "size": size,
            "number": page,
        }

    except Exception as e:
        logger.error(e, exc_info=True)
        raise


def get_task_by_id(db: Session, task_id: int) -> Dict[str, Any]:
    """Retrieve a task by its id.

    Args:
        db: SQLAlchemy database session
        task_id: Id of the task to retrieve

    Returns:
        Dictionary representation of the task

    Raises:
        TaskNotFoundError: When no task with the specified id exists
    """
    logger.info(f"Retrieving task with ID: {task_id}")

    try:
        with read_only_unit_of_work(db):
            task = TaskStore(db).find_by_id(task_id)
            if task is None:
                raise TaskNotFoundError(task_id)
            result = task.to_dict()

        logger.info(f"Successfully retrieved task with ID: {task_id}")
        return result

    except TaskServiceError as e:
        logger.info(e.human_message)
        raise
    except Exception as e:
        logger.error(e, exc_info=True)
        raise


def update_task(task_id: int, payload: TaskUpdate, db: Session) -> Dict[str, Any]:
    """Apply a partial update to the title, description and due date of a task.

    Only the fields present in the payload (``payload.model_fields_set``) are
    written; absent fields keep their stored value. A present ``due_date`` of
    None clears the due date. Status and created_at are never modified here.
    The fetch and the write happen in one transaction, with the task row
    locked on databases that support it.

    Args:
        task_id: Id of the task to update
        payload: TaskUpdate Pydantic model
        db: SQLAlchemy database session

    Returns:
        Dictionary representation of the updated task. With no fields present
        this is the stored task, unchanged.

    Raises:
        TaskNotFoundError: When no task with the specified id exists
        TaskValidationError: When a present title or description is null or blank
    """
    fields_to_update = [name for name in UPDATABLE_FIELDS if name in payload.model_fields_set]
    logger.info(f"Updating task with ID: {task_id}, fields: {fields_to_update}")

    try:
        with unit_of_work(db):
            store = TaskStore(db)
            task = store.find_by_id(task_id, for_update=True)
            if task is None:
                raise TaskNotFoundError(task_id)

            for field_name in fields_to_update:
                value = getattr(payload, field_name)
                if field_name in ('title', 'description'):
                    value = _required_text(value, field_name)
                setattr(task, field_name, value)

            if fields_to_update:
                store.update(task)
            result = task.to_dict()

        logger.info(f"Successfully updated task with ID: {task_id}")
        return result

    except TaskServiceError as e:
        logger.warning(f"Task update rejected: {e.human_message}")
        raise
    except Exception as e:
        logger.error(e, exc_info=True)
        raise


def delete_task(task_id: int, db: Session) -> None:
    """Permanently delete a task.

    Args:
        task_id: Id of the task to delete
        db: SQLAlchemy database session

    Raises:
        TaskNotFoundError: When no task with the specified id exists
    """
    logger.info(f"Deleting task with ID: {task_id}")

    try:
        with unit_of_work(db):
            if not TaskStore(db).delete(task_id):
                raise TaskNotFoundError(task_id)

        logger.info(f"Successfully deleted task with ID: {task_id}")

    except TaskServiceError as e:
        logger.warning(f"Task deletion rejected: {e.human_message}")
        raise
    except Exception as e:
        logger.error(e, exc_info=True)
        raise


def change_task_status(task_id: int, target: Union[TaskStatus, str], db: Session) -> Dict[str, Any]:
    """Move a task to another status along NEW -> IN_PROGRESS -> COMPLETED.

    Requesting the status the task already has succeeds and returns the task
    without writing anything.

    Args:
        task_id: Id of the task
        target: Requested status, as a TaskStatus or its name
        db: SQLAlchemy database session

    Returns:
        Dictionary representation of the task after the change

    Raises:
        TaskNotFoundError: When no task with the specified id exists
        InvalidStatusTransitionError: When the transition is not allowed
        TaskValidationError: When target is not a known status
    """
    try:
        target = TaskStatus(target)
    except ValueError:
        raise TaskValidationError(
            f"status: must be one of {[s.value for s in TaskStatus]}"
        )

    logger.info(f"Changing status of task with ID: {task_id} to {target.value}")

    try:
        with unit_of_work(db):
            store = TaskStore(db)
            task = store.find_by_id(task_id, for_update=True)
            if task is None:
                raise TaskNotFoundError(task_id)

            current = task.status
            if current == target:
                logger.info(f"Task with ID: {task_id} already in status {current.value}")
                return task.to_dict()

            if not is_transition_allowed(current, target):
                logger.info(
                    f"Allowed transitions from {current.value} are: "
                    f"{[s.value for s in allowed_targets(current)]}"
                )
                raise InvalidStatusTransitionError(current, target)

            task.status = target
            result = store.update(task).to_dict()

        logger.info(f"Successfully changed status of task with ID: {task_id} from {current.value} to {target.value}")
        return result

    except TaskServiceError as e:
        logger.warning(f"Status change rejected: {e.human_message}")
        raise
    except Exception as e:
        logger.error(e, exc_info=True)
        raise
