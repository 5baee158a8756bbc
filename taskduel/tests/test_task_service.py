"""
Tests for TaskService.

Tests cover:
1. Task creation and validation
2. Owner-only updates
3. Soft deactivation
"""
import pytest
from datetime import date
from unittest.mock import patch
from sqlalchemy.exc import OperationalError

from taskduel.models import Task
from taskduel.schemas import TaskCreate, TaskUpdate
from taskduel.services.task_service import TaskService
from taskduel.services.completion_service import CompletionService
from taskduel.exceptions import TaskNotFoundException, InvalidArgumentException, DatabaseException


class TestCreateTask:
    """Tests for create_task function"""

    def test_creates_active_task(self, db_session, alice):
        service = TaskService(db_session)
        task = service.create_task(alice.id, TaskCreate(name="Gym", target_duration_hours=2, point_value=20))

        assert task.id is not None
        assert task.user_id == alice.id
        assert task.is_active is True
        assert task.point_value == 20

    def test_rejects_non_positive_points(self, db_session, alice):
        """Service validation applies even when the schema is bypassed"""
        service = TaskService(db_session)
        data = TaskCreate.model_construct(name="Gym", target_duration_hours=2.0, point_value=0)

        with pytest.raises(InvalidArgumentException):
            service.create_task(alice.id, data)

    def test_rejects_non_positive_target(self, db_session, alice):
        service = TaskService(db_session)
        data = TaskCreate.model_construct(name="Gym", target_duration_hours=0.0, point_value=10)

        with pytest.raises(InvalidArgumentException):
            service.create_task(alice.id, data)

    def test_lists_only_active_tasks(self, db_session, alice, bob, make_task):
        make_task(alice, "Read")
        make_task(alice, "Old", active=False)
        make_task(bob, "Run")

        names = [t.name for t in TaskService(db_session).get_tasks(alice.id)]

        assert names == ["Read"]


class TestUpdateTask:
    """Tests for update_task function"""

    def test_owner_can_update(self, db_session, alice, make_task):
        task = make_task(alice)
        updated = TaskService(db_session).update_task(alice.id, task.id, TaskUpdate(point_value=50))

        assert updated.point_value == 50
        assert updated.target_duration_hours == 2.0

    def test_other_user_gets_not_found(self, db_session, alice, bob, make_task):
        task = make_task(alice)

        with pytest.raises(TaskNotFoundException):
            TaskService(db_session).update_task(bob.id, task.id, TaskUpdate(point_value=50))

    def test_update_does_not_touch_recorded_points(self, db_session, alice, make_task):
        task = make_task(alice, target=2.0, points=20)
        completion, _ = CompletionService(db_session).record_completion(alice.id, task.id, date(2025, 1, 1), 1.0)

        TaskService(db_session).update_task(
            alice.id, task.id, TaskUpdate(target_duration_hours=1.0, point_value=100)
        )
        db_session.refresh(completion)

        assert completion.earned_points == 10.0


class TestDeactivateTask:
    """Tests for deactivate_task function"""

    def test_sets_inactive_without_deleting(self, db_session, alice, make_task):
        task = make_task(alice)
        TaskService(db_session).deactivate_task(alice.id, task.id)

        stored = db_session.query(Task).filter(Task.id == task.id).first()
        assert stored is not None
        assert stored.is_active is False

    def test_other_user_gets_not_found(self, db_session, alice, bob, make_task):
        task = make_task(alice)

        with pytest.raises(TaskNotFoundException):
            TaskService(db_session).deactivate_task(bob.id, task.id)

    def test_deactivated_task_is_not_found_for_updates(self, db_session, alice, make_task):
        task = make_task(alice)
        service = TaskService(db_session)
        service.deactivate_task(alice.id, task.id)

        with pytest.raises(TaskNotFoundException):
            service.update_task(alice.id, task.id, TaskUpdate(name="Renamed"))

    def test_keeps_history_untouched(self, db_session, alice, make_task):
        gym = make_task(alice, "Gym", 2.0, 20)
        make_task(alice, "Read", 1.0, 30)
        _, score = CompletionService(db_session).record_completion(alice.id, gym.id, date(2025, 1, 1), 2.0)
        before = (score.total_possible_points, score.earned_points, score.percentage_score)

        TaskService(db_session).deactivate_task(alice.id, gym.id)
        db_session.refresh(score)

        assert (score.total_possible_points, score.earned_points, score.percentage_score) == before


def failing_commit():
    return OperationalError("COMMIT", {}, Exception("database is locked"))


class TestWriteFailures:
    """Database errors surface as DatabaseException and leave nothing behind"""

    def test_create_rolls_back(self, db_session, alice):
        service = TaskService(db_session)

        with patch.object(db_session, "commit", side_effect=failing_commit()):
            with pytest.raises(DatabaseException):
                service.create_task(alice.id, TaskCreate(name="Gym", target_duration_hours=2, point_value=20))

        assert db_session.query(Task).count() == 0

    def test_update_rolls_back(self, db_session, alice, make_task):
        task = make_task(alice, "Gym", 2.0, 20)
        service = TaskService(db_session)

        with patch.object(db_session, "commit", side_effect=failing_commit()):
            with pytest.raises(DatabaseException):
                service.update_task(alice.id, task.id, TaskUpdate(point_value=50))

        assert db_session.query(Task).filter(Task.id == task.id).one().point_value == 20

    def test_deactivate_rolls_back(self, db_session, alice, make_task):
        task = make_task(alice)
        service = TaskService(db_session)

        with patch.object(db_session, "commit", side_effect=failing_commit()):
            with pytest.raises(DatabaseException):
                service.deactivate_task(alice.id, task.id)

        assert db_session.query(Task).filter(Task.id == task.id).one().is_active is True
