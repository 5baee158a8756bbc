"""
Task catalog service.
Handles creation, editing and soft deactivation of a user's recurring tasks.
"""
import logging
import math
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from taskduel.models import Task
from taskduel.schemas import TaskCreate, TaskUpdate
from taskduel.repositories.task_repository import TaskRepository
from taskduel.exceptions import TaskNotFoundException, InvalidArgumentException, DatabaseException

logger = logging.getLogger("taskduel.tasks")


class TaskService:
    """Service for the per-user task catalog"""

    def __init__(self, db: Session):
        self.db = db
        self.task_repo = TaskRepository()

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Task {operation} failed: {e}")
            raise DatabaseException(operation, str(e))

    @staticmethod
    def _validate_target(value: Optional[float]) -> None:
        if value is None:
            return
        if not math.isfinite(value) or value <= 0:
            raise InvalidArgumentException("target_duration_hours", "must be a positive number")

    @staticmethod
    def _validate_points(value: Optional[int]) -> None:
        if value is None:
            return
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidArgumentException("point_value", "must be a positive integer")

    @staticmethod
    def _validate_name(value: Optional[str]) -> None:
        if value is not None and not value.strip():
            raise InvalidArgumentException("name", "must not be empty")

    def get_tasks(self, user_id: int) -> List[Task]:
        """Get user's active tasks"""
        return self.task_repo.get_active_for_user(self.db, user_id)

    def get_owned_task(self, user_id: int, task_id: int) -> Task:
        """Get an active task owned by the user or raise"""
        task = self.task_repo.get_owned(self.db, user_id, task_id)
        if not task:
            raise TaskNotFoundException(task_id)
        return task

    def create_task(self, user_id: int, task_data: TaskCreate) -> Task:
        """Create a new task for the user"""
        self._validate_name(task_data.name)
        self._validate_target(task_data.target_duration_hours)
        self._validate_points(task_data.point_value)

        task = Task(
            user_id=user_id,
            name=task_data.name.strip(),
            target_duration_hours=task_data.target_duration_hours,
            point_value=task_data.point_value,
            is_active=True
        )
        try:
            self.task_repo.create(self.db, task)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseException("create task", str(e))
        self._commit("create task")
        self.db.refresh(task)
        logger.info(f"User {user_id} created task {task.id} '{task.name}'")
        return task

    def update_task(self, user_id: int, task_id: int, task_update: TaskUpdate) -> Task:
        """
        Update an owned task.

        Recorded completions keep the earned points computed when they were
        recorded; only future recordings see the new target or point value.
        """
        task = self.get_owned_task(user_id, task_id)

        update_data = task_update.model_dump(exclude_unset=True, exclude_none=True)
        self._validate_name(update_data.get("name"))
        self._validate_target(update_data.get("target_duration_hours"))
        self._validate_points(update_data.get("point_value"))

        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
        for key, value in update_data.items():
            setattr(task, key, value)

        try:
            self.task_repo.update(self.db, task)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseException("update task", str(e))
        self._commit("update task")
        self.db.refresh(task)
        return task

    def deactivate_task(self, user_id: int, task_id: int) -> Task:
        """Soft delete: the task stops counting toward future daily totals"""
        task = self.get_owned_task(user_id, task_id)
        task.is_active = False
        try:
            self.task_repo.update(self.db, task)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseException("deactivate task", str(e))
        self._commit("deactivate task")
        self.db.refresh(task)
        logger.info(f"User {user_id} deactivated task {task_id}")
        return task
