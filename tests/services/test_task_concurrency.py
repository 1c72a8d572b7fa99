"""Tests for concurrent writers on the same task.

Each writer runs on its own thread with its own session over one file-backed
SQLite engine, the way concurrent requests do. The stored task must always
match one order of the committed operations.
"""

import threading

import pytest

from todoops.database import create_engine_and_session_factory
from todoops.errors import InvalidStatusTransitionError
from todoops.models import Base
from todoops.models.task import TaskStatus
from todoops.schemas.task import TaskCreate, TaskUpdate
from todoops.services.task_service import change_task_status, create_task, get_task_by_id, update_task


@pytest.fixture
def file_session_factory(tmp_path):
    """Session factory over a file-backed SQLite database with the task schema."""
    engine, session_factory = create_engine_and_session_factory(f"sqlite:///{tmp_path / 'concurrency.db'}")
    Base.metadata.create_all(bind=engine)

    yield session_factory

    engine.dispose()


def _run_concurrently(session_factory, *operations):
    """Run each operation on its own thread and session, starting them together.

    Returns:
        One ("ok", result) or ("error", exception) entry per operation, in order.
    """
    barrier = threading.Barrier(len(operations))
    outcomes = [None] * len(operations)

    def worker(index, operation):
        db = session_factory()
        try:
            barrier.wait()
            outcomes[index] = ("ok", operation(db))
        except Exception as e:
            outcomes[index] = ("error", e)
        finally:
            db.close()

    threads = [threading.Thread(target=worker, args=(i, op)) for i, op in enumerate(operations)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert all(not thread.is_alive() for thread in threads)
    return outcomes


def _read_task(session_factory, task_id):
    db = session_factory()
    try:
        return get_task_by_id(db, task_id)
    finally:
        db.close()


class TestConcurrentWriters:
    """Test cases for concurrent update and status change calls on one task."""

    @pytest.fixture
    def task_id(self, file_session_factory):
        """Create a NEW task and return its id."""
        db = file_session_factory()
        try:
            return create_task(TaskCreate(title="Shared", description="Original"), db)['id']
        finally:
            db.close()

    def test_disjoint_updates_both_kept(self, file_session_factory, task_id):
        """Test that concurrent updates of different fields are both stored."""
        outcomes = _run_concurrently(
            file_session_factory,
            lambda db: update_task(task_id, TaskUpdate(title="New title"), db),
            lambda db: update_task(task_id, TaskUpdate(description="New description"), db),
        )

        assert [kind for kind, _ in outcomes] == ["ok", "ok"]
        stored = _read_task(file_session_factory, task_id)
        assert stored['title'] == "New title"
        assert stored['description'] == "New description"
        assert stored['status'] == "NEW"

    def test_same_field_updates_last_commit_wins(self, file_session_factory, task_id):
        """Test that competing updates of one field leave exactly one of the written values."""
        outcomes = _run_concurrently(
            file_session_factory,
            lambda db: update_task(task_id, TaskUpdate(title="First"), db),
            lambda db: update_task(task_id, TaskUpdate(title="Second"), db),
        )

        assert [kind for kind, _ in outcomes] == ["ok", "ok"]
        assert _read_task(file_session_factory, task_id)['title'] in ("First", "Second")

    def test_same_status_requested_twice(self, file_session_factory, task_id):
        """Test that two requests for the next status both succeed and move it once."""
        outcomes = _run_concurrently(
            file_session_factory,
            lambda db: change_task_status(task_id, TaskStatus.IN_PROGRESS, db),
            lambda db: change_task_status(task_id, TaskStatus.IN_PROGRESS, db),
        )

        assert [kind for kind, _ in outcomes] == ["ok", "ok"]
        assert all(result['status'] == "IN_PROGRESS" for _, result in outcomes)
        assert _read_task(file_session_factory, task_id)['status'] == "IN_PROGRESS"

    def test_competing_status_changes_follow_one_order(self, file_session_factory, task_id):
        """Test that NEW -> IN_PROGRESS racing IN_PROGRESS -> COMPLETED ends in a legal state."""
        (start_kind, start_result), (finish_kind, finish_result) = _run_concurrently(
            file_session_factory,
            lambda db: change_task_status(task_id, TaskStatus.IN_PROGRESS, db),
            lambda db: change_task_status(task_id, TaskStatus.COMPLETED, db),
        )

        assert start_kind == "ok"
        stored = _read_task(file_session_factory, task_id)

        if finish_kind == "ok":
            # IN_PROGRESS committed first, then COMPLETED
            assert finish_result['status'] == "COMPLETED"
            assert stored['status'] == "COMPLETED"
        else:
            # COMPLETED was checked against NEW and rejected
            assert isinstance(finish_result, InvalidStatusTransitionError)
            assert finish_result.human_message == "Invalid status transition from NEW to COMPLETED"
            assert stored['status'] == "IN_PROGRESS"

    def test_update_racing_status_change_keeps_both(self, file_session_factory, task_id):
        """Test that an update and a status change on one task do not overwrite each other."""
        outcomes = _run_concurrently(
            file_session_factory,
            lambda db: update_task(task_id, TaskUpdate(title="Renamed"), db),
            lambda db: change_task_status(task_id, TaskStatus.IN_PROGRESS, db),
        )

        assert [kind for kind, _ in outcomes] == ["ok", "ok"]
        stored = _read_task(file_session_factory, task_id)
        assert stored['title'] == "Renamed"
        assert stored['status'] == "IN_PROGRESS"
