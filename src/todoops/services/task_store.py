"""Persistence operations for task records.

TaskStore wraps one SQLAlchemy session and is the only component that
writes task rows. It flushes but never commits: transaction boundaries
belong to the unit of work the caller runs it in.
"""

import logging
import math
from typing import List, NamedTuple, Optional

from sqlalchemy import select, func, inspect
from sqlalchemy.orm import Session

from ..models.task import Task

logger = logging.getLogger(__name__)


class TaskPage(NamedTuple):
    """One page of tasks ordered by id, with totals for the whole collection."""
    items: List[Task]
    total_elements: int
    total_pages: int


class TaskStore:
    """Create, read, update, delete and paginate Task records over a session."""

    def __init__(self, db: Session):
        self._db = db

    def insert(self, task: Task) -> Task:
        """Persist a new task; the database assigns its id."""
        self._db.add(task)
        self._db.flush()
        logger.debug(f"Inserted task with ID: {task.id}")
        return task

    def find_by_id(self, task_id: int, for_update: bool = False) -> Optional[Task]:
        """Load a task by id, or return None if it does not exist.

        The row is always re-read from the database so that a stale copy in
        the session's identity map is never returned.

        Args:
            task_id: Id of the task.
            for_update: Lock the row until the transaction ends, on databases
                that support SELECT ... FOR UPDATE.
        """
        return self._db.get(
            Task,
            task_id,
            populate_existing=True,
            with_for_update=True if for_update else None,
        )

    def update(self, task: Task) -> Task:
        """Write the current state of a task loaded through this store."""
        if not inspect(task).persistent:
            raise ValueError("Only a stored task can be updated")
        self._db.flush()
        return task

    def delete(self, task_id: int) -> bool:
        """Remove a task.

        Returns:
            True if the task existed and was deleted, False otherwise.
        """
        task = self.find_by_id(task_id, for_update=True)
        if task is None:
            return False
        self._db.delete(task)
        self._db.flush()
        logger.debug(f"Deleted task with ID: {task_id}")
        return True

    def count(self) -> int:
        """Return the number of stored tasks."""
        return self._db.execute(select(func.count(Task.id))).scalar_one()

    def list_page(self, page_index: int, page_size: int) -> TaskPage:
        """Return one page of tasks ordered by id ascending.

        Args:
            page_index: Zero-based page number.
            page_size: Maximum number of tasks per page, at least 1.

        Returns:
            TaskPage; an empty collection yields zero elements and zero pages.
        """
        if page_index < 0 or page_size < 1:
            raise ValueError(f"Invalid page request: page={page_index}, size={page_size}")

        total_elements = self.count()
        total_pages = math.ceil(total_elements / page_size)

        stmt = (
            select(Task)
            .order_by(Task.id.asc())
            .limit(page_size)
            .offset(page_index * page_size)
        )
        items = list(self._db.execute(stmt).scalars().all())

        return TaskPage(items=items, total_elements=total_elements, total_pages=total_pages)
