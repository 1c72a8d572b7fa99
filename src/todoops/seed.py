"""Demo data for a fresh todoops database.

Example tasks are created through the task service and moved to their
intended status one allowed transition at a time, so seeded data obeys the
same workflow as data created through the API.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from .database import get_db, read_only_unit_of_work
from .models.task import TaskStatus
from .schemas.task import TaskCreate
from .services.status_transitions import transition_path
from .services.task_service import change_task_status, create_task
from .services.task_store import TaskStore

logger = logging.getLogger(__name__)

# (title, description, status, due date offset in days or None)
DEMO_TASKS: List[Tuple[str, str, TaskStatus, Optional[int]]] = [
    ("Complete project documentation", "Write README and API docs for the backend.", TaskStatus.NEW, 7),
    ("Review pull requests", "Check open PRs and provide feedback.", TaskStatus.IN_PROGRESS, 2),
    ("Deploy to staging", "Run deployment pipeline and smoke tests.", TaskStatus.COMPLETED, -1),
    ("Setup CI/CD", "Configure the build and test pipeline.", TaskStatus.NEW, None),
    ("Add integration tests", "Cover main API endpoints.", TaskStatus.IN_PROGRESS, 5),
    ("Update dependencies", "Bump framework versions and fix deprecations.", TaskStatus.COMPLETED, -3),
    ("Design database schema", "Create ER diagram and migration plan.", TaskStatus.NEW, 10),
    ("Fix timezone handling", "Store and return UTC consistently.", TaskStatus.COMPLETED, -1),
    ("Add health checks", "Liveness and readiness endpoints.", TaskStatus.NEW, 2),
    ("Implement pagination metadata", "Total count and page info in list response.", TaskStatus.IN_PROGRESS, 2),
    ("Document error codes", "List all API error codes and meanings.", TaskStatus.COMPLETED, -2),
    ("Add request logging", "Structured logs for all incoming requests.", TaskStatus.NEW, 3),
]


def seed_demo_tasks(db: Session) -> int:
    """Insert the demo tasks if the task table is empty.

    Args:
        db: SQLAlchemy database session

    Returns:
        Number of tasks created; 0 when tasks already exist.
    """
    with read_only_unit_of_work(db):
        existing = TaskStore(db).count()

    if existing > 0:
        logger.info(f"Skipping demo data, {existing} tasks already stored")
        return 0

    now = datetime.now(timezone.utc)
    for title, description, status, due_in_days in DEMO_TASKS:
        due_date = now + timedelta(days=due_in_days) if due_in_days is not None else None
        task = create_task(TaskCreate(title=title, description=description, due_date=due_date), db)

        for step in transition_path(TaskStatus.NEW, status):
            change_task_status(task['id'], step, db)

    logger.info(f"Seeded {len(DEMO_TASKS)} demo tasks")
    return len(DEMO_TASKS)


def seed_demo_tasks_on_startup() -> int:
    """Seed demo tasks using a session from the application's session factory."""
    db_gen = get_db()
    db = next(db_gen)
    try:
        return seed_demo_tasks(db)
    finally:
        db_gen.close()
