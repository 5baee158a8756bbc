"""
Completion recording service.
Records actual time spent on a task for a day and keeps the day's score in
step with it inside the same transaction.
"""
import logging
import math
from datetime import date
from typing import Dict, Tuple
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from taskduel.models import Task, TaskCompletion, DailyScore
from taskduel.repositories.task_repository import TaskRepository
from taskduel.repositories.user_repository import UserRepository
from taskduel.repositories.score_repository import CompletionRepository
from taskduel.services.score_service import ScoreService
from taskduel.exceptions import (
    TaskNotFoundException, InvalidArgumentException, DatabaseException
)

logger = logging.getLogger("taskduel.completions")


class CompletionService:
    """Service for recording task completions"""

    def __init__(self, db: Session):
        self.db = db
        self.task_repo = TaskRepository()
        self.user_repo = UserRepository()
        self.completion_repo = CompletionRepository()
        self.score_service = ScoreService(db)

    @staticmethod
    def calculate_earned_points(task: Task, actual_duration_hours: float) -> float:
        """
        Points earned for a completion, capped at the task's point value.

        Formula: min(actual / target * point_value, point_value)
        """
        if not task.target_duration_hours or task.target_duration_hours <= 0:
            return 0.0
        raw_points = (actual_duration_hours / task.target_duration_hours) * task.point_value
        return float(min(raw_points, task.point_value))

    def record_completion(
        self,
        user_id: int,
        task_id: int,
        completion_date: date,
        actual_duration_hours: float
    ) -> Tuple[TaskCompletion, DailyScore]:
        """
        Record (or replace) the completion for (user, task, date).

        A repeated call for the same key replaces the stored duration and
        points; it never adds to them. The daily score is recomputed in the
        same transaction, so either both rows change or neither does.

        Args:
            user_id: Caller
            task_id: Task owned by the caller
            completion_date: Day the work counts for
            actual_duration_hours: Hours actually spent (0 is allowed)

        Returns:
            Tuple of (completion, recomputed daily score)

        Raises:
            TaskNotFoundException: Task missing, inactive or owned by someone else
            InvalidArgumentException: Negative or non-finite duration
            DatabaseException: Write failed; nothing was applied
        """
        if actual_duration_hours is None or not math.isfinite(actual_duration_hours) \
                or actual_duration_hours < 0:
            raise InvalidArgumentException("actual_duration_hours", "must be a non-negative number")

        task = self.task_repo.get_owned(self.db, user_id, task_id)
        if not task:
            raise TaskNotFoundException(task_id)

        earned_points = self.calculate_earned_points(task, actual_duration_hours)

        try:
            # Serializes concurrent recomputes for this user
            self.user_repo.lock(self.db, user_id)

            completion = self.completion_repo.upsert(
                self.db,
                user_id,
                task_id,
                completion_date,
                actual_duration_hours,
                earned_points
            )
            score = self.score_service.recompute(user_id, completion_date, commit=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(
                f"Recording completion failed for user {user_id}, task {task_id}, {completion_date}: {e}"
            )
            raise DatabaseException("record completion", str(e))

        self.db.refresh(completion)
        self.db.refresh(score)
        logger.info(
            f"User {user_id} task {task_id} on {completion_date}: "
            f"{actual_duration_hours}h -> {earned_points:.2f} pts, day score {score.percentage_score:.2f}%"
        )
        return completion, score

    def get_completions(self, user_id: int, completion_date: date) -> Dict[int, float]:
        """Map of task_id -> actual hours recorded for a day"""
        return {
            c.task_id: c.actual_duration_hours
            for c in self.completion_repo.get_for_day(self.db, user_id, completion_date)
        }
