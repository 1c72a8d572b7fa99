"""Unit tests for the TaskStore persistence layer.

These tests verify id assignment, lookups, updates, deletion and the
pagination arithmetic of list_page.
"""

import math
from datetime import datetime, timezone

import pytest
from sqlalchemy.orm import Session

from todoops.models.task import Task, TaskStatus
from todoops.services.task_store import TaskStore, TaskPage


def _new_task(title: str = "Task", description: str = "Description") -> Task:
    return Task(title=title, description=description, status=TaskStatus.NEW)


class TestInsertAndFind:
    """Test cases for insert and find_by_id."""

    def test_insert_assigns_unique_ids(self, db_session: Session):
        """Test that each inserted task receives a distinct id."""
        store = TaskStore(db_session)

        first = store.insert(_new_task("First"))
        second = store.insert(_new_task("Second"))
        db_session.commit()

        assert first.id is not None
        assert second.id is not None
        assert first.id != second.id

    def test_find_by_id_returns_stored_task(self, db_session: Session):
        """Test that a stored task can be found by its id."""
        store = TaskStore(db_session)
        task = store.insert(_new_task("Findable"))
        db_session.commit()

        found = store.find_by_id(task.id)

        assert found is not None
        assert found.id == task.id
        assert found.title == "Findable"
        assert found.status == TaskStatus.NEW

    def test_find_by_id_missing_returns_none(self, db_session: Session):
        """Test that looking up an unknown id returns None."""
        assert TaskStore(db_session).find_by_id(12345) is None

    def test_find_by_id_for_update(self, db_session: Session):
        """Test that a locking lookup returns the same task."""
        store = TaskStore(db_session)
        task = store.insert(_new_task())
        db_session.commit()

        found = store.find_by_id(task.id, for_update=True)

        assert found is not None
        assert found.id == task.id

    def test_find_by_id_discards_unflushed_changes(self, db_session: Session):
        """Test that find_by_id reloads the row instead of returning a modified in-memory copy."""
        store = TaskStore(db_session)
        task = store.insert(_new_task("Stored title"))
        db_session.commit()

        task.title = "Changed in memory only"

        found = store.find_by_id(task.id)

        assert found.title == "Stored title"


class TestUpdate:
    """Test cases for update."""

    def test_update_writes_changes(self, db_session: Session):
        """Test that changes on a stored task are written."""
        store = TaskStore(db_session)
        task = store.insert(_new_task("Before"))
        db_session.commit()

        task.title = "After"
        store.update(task)
        db_session.commit()

        assert store.find_by_id(task.id).title == "After"

    def test_update_rejects_unsaved_task(self, db_session: Session):
        """Test that a task which was never inserted cannot be updated."""
        with pytest.raises(ValueError):
            TaskStore(db_session).update(_new_task())

    def test_update_rejects_created_at_change(self, db_session: Session):
        """Test that created_at cannot be changed after creation."""
        store = TaskStore(db_session)
        task = store.insert(_new_task())
        db_session.commit()

        task.created_at = datetime(2000, 1, 1, tzinfo=timezone.utc)

        with pytest.raises(ValueError, match="created_at"):
            store.update(task)
        db_session.rollback()


class TestDelete:
    """Test cases for delete."""

    def test_delete_existing_task(self, db_session: Session):
        """Test that deleting a stored task removes it."""
        store = TaskStore(db_session)
        task = store.insert(_new_task())
        db_session.commit()
        task_id = task.id

        assert store.delete(task_id) is True
        db_session.commit()

        assert store.find_by_id(task_id) is None

    def test_delete_missing_task_returns_false(self, db_session: Session):
        """Test that deleting an unknown id reports that nothing was deleted."""
        assert TaskStore(db_session).delete(999) is False

    def test_delete_only_removes_target(self, db_session: Session):
        """Test that other tasks survive a delete."""
        store = TaskStore(db_session)
        keep = store.insert(_new_task("Keep"))
        remove = store.insert(_new_task("Remove"))
        db_session.commit()

        store.delete(remove.id)
        db_session.commit()

        assert store.count() == 1
        assert store.find_by_id(keep.id) is not None


class TestListPage:
    """Test cases for list_page."""

    def _insert_many(self, db_session: Session, count: int) -> list:
        store = TaskStore(db_session)
        tasks = [store.insert(_new_task(f"Task {i}")) for i in range(count)]
        db_session.commit()
        return tasks

    def test_empty_store_has_zero_pages(self, db_session: Session):
        """Test that an empty collection yields zero elements and zero pages."""
        page = TaskStore(db_session).list_page(0, 20)

        assert isinstance(page, TaskPage)
        assert page.items == []
        assert page.total_elements == 0
        assert page.total_pages == 0

    @pytest.mark.parametrize("count, size", [(1, 1), (5, 2), (6, 3), (7, 10), (10, 10), (11, 10)])
    def test_totals_match_ceiling_division(self, db_session: Session, count: int, size: int):
        """Test that total_pages is ceil(k/p) and total_elements is k."""
        self._insert_many(db_session, count)

        page = TaskStore(db_session).list_page(0, size)

        assert page.total_elements == count
        assert page.total_pages == math.ceil(count / size)
        assert len(page.items) == min(count, size)

    def test_items_ordered_by_id_ascending(self, db_session: Session):
        """Test that pages are ordered by id and split without overlap."""
        tasks = self._insert_many(db_session, 5)
        expected_ids = [task.id for task in tasks]
        store = TaskStore(db_session)

        first = store.list_page(0, 2)
        second = store.list_page(1, 2)
        third = store.list_page(2, 2)

        ids = [t.id for t in first.items + second.items + third.items]
        assert ids == sorted(expected_ids)
        assert len(third.items) == 1

    def test_page_beyond_end_is_empty(self, db_session: Session):
        """Test that a page past the last one is empty but keeps the totals."""
        self._insert_many(db_session, 3)

        page = TaskStore(db_session).list_page(5, 2)

        assert page.items == []
        assert page.total_elements == 3
        assert page.total_pages == 2

    @pytest.mark.parametrize("page_index, page_size", [(-1, 10), (0, 0)])
    def test_invalid_page_request_rejected(self, db_session: Session, page_index: int, page_size: int):
        """Test that negative pages and empty page sizes are refused."""
        with pytest.raises(ValueError):
            TaskStore(db_session).list_page(page_index, page_size)
