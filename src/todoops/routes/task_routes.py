"""FastAPI routes for task-related operations.

This module implements the REST endpoints for task management: creation,
listing, retrieval, partial update, deletion and status changes. Request
bodies and parameters are validated here; domain errors raised by the
service pass through unchanged and anything else becomes an internal error.
"""

import logging

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ..config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..database import get_db
from ..errors import InternalServerError, TaskServiceError
from ..schemas.task import (
    ErrorObject,
    TaskCreate,
    TaskPageResponse,
    TaskResponse,
    TaskStatusRequest,
    TaskUpdate,
)
from ..services.task_service import (
    change_task_status,
    create_task,
    delete_task,
    get_task_by_id,
    list_tasks,
    update_task,
)

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorObject, "description": "Validation error, unknown task or invalid status transition"},
    500: {"model": ErrorObject, "description": "Internal error"},
}

# Create API router
task_router = APIRouter(prefix="/tasks", tags=["tasks"], responses=ERROR_RESPONSES)


@task_router.post("", response_model=TaskResponse)
def create_task_endpoint(
    payload: TaskCreate,
    db: Session = Depends(get_db)
) -> TaskResponse:
    """Create a task in NEW status.

    Raises:
        TaskValidationError: 400 if title or description is missing or blank
        InternalServerError: 500 for server errors
    """
    logger.info(f"POST /tasks createTask title={payload.title}")

    try:
        return TaskResponse(**create_task(payload, db))
    except TaskServiceError:
        raise
    except Exception as e:
        logger.error(e, exc_info=True)
        raise InternalServerError() from e


@task_router.get("", response_model=TaskPageResponse)
def list_tasks_endpoint(
    page: int = Query(0, ge=0, description="Zero-based page index"),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, description="Number of tasks per page"),
    db: Session = Depends(get_db)
) -> TaskPageResponse:
    """List one page of tasks ordered by id.

    Out-of-range page or size values are rejected with a 400 validation error.
    """
    logger.info(f"GET /tasks listTasks page={page} size={size}")

    try:
        return TaskPageResponse(**list_tasks(db, page, size))
    except TaskServiceError:
        raise
    except Exception as e:
        logger.error(e, exc_info=True)
        raise InternalServerError() from e


@task_router.get("/{task_id}", response_model=TaskResponse)
def get_task_endpoint(
    task_id: int,
    db: Session = Depends(get_db)
) -> TaskResponse:
    """Retrieve a task by id.

    Raises:
        TaskNotFoundError: 400 if the task does not exist
    """
    logger.info(f"GET /tasks/{task_id} getTask")

    try:
        return TaskResponse(**get_task_by_id(db, task_id))
    except TaskServiceError:
        raise
    except Exception as e:
        logger.error(e, exc_info=True)
        raise InternalServerError() from e


@task_router.put("/{task_id}", response_model=TaskResponse)
def update_task_endpoint(
    task_id: int,
    payload: TaskUpdate,
    db: Session = Depends(get_db)
) -> TaskResponse:
    """Update the fields present in the request body.

    Fields left out of the body keep their stored value; ``"due_date": null``
    clears the due date.

    Raises:
        TaskNotFoundError: 400 if the task does not exist
        TaskValidationError: 400 if a sent title or description is null or blank
    """
    logger.info(f"PUT /tasks/{task_id} updateTask fields={sorted(payload.model_fields_set)}")

    try:
        return TaskResponse(**update_task(task_id, payload, db))
    except TaskServiceError:
        raise
    except Exception as e:
        logger.error(e, exc_info=True)
        raise InternalServerError() from e


@task_router.delete("/{task_id}", response_class=Response)
def delete_task_endpoint(
    task_id: int,
    db: Session = Depends(get_db)
) -> Response:
    """Permanently delete a task. Responds 200 with an empty body.

    Raises:
        TaskNotFoundError: 400 if the task does not exist
    """
    logger.info(f"DELETE /tasks/{task_id} deleteTask")

    try:
        delete_task(task_id, db)
        return Response(status_code=200)
    except TaskServiceError:
        raise
    except Exception as e:
        logger.error(e, exc_info=True)
        raise InternalServerError() from e


@task_router.patch("/{task_id}/status", response_model=TaskResponse)
def change_task_status_endpoint(
    task_id: int,
    payload: TaskStatusRequest,
    db: Session = Depends(get_db)
) -> TaskResponse:
    """Move a task to another status.

    Raises:
        TaskNotFoundError: 400 if the task does not exist
        InvalidStatusTransitionError: 400 if the transition is not allowed
    """
    logger.info(f"PATCH /tasks/{task_id}/status changeTaskStatus status={payload.status.value}")

    try:
        return TaskResponse(**change_task_status(task_id, payload.status, db))
    except TaskServiceError:
        raise
    except Exception as e:
        logger.error(e, exc_info=True)
        raise InternalServerError() from e
