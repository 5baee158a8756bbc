"""
Daily score aggregation service.
Rolls a user's completions for one day into a percentage of the day's
possible points. Scores are always rebuilt from scratch, never patched.
"""
import logging
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from taskduel.models import DailyScore
from taskduel.repositories.task_repository import TaskRepository
from taskduel.repositories.score_repository import CompletionRepository, DailyScoreRepository
from taskduel.exceptions import DatabaseException, InvalidArgumentException
from taskduel.constants import MAX_PERCENTAGE_SCORE, MIN_PERCENTAGE_SCORE

logger = logging.getLogger("taskduel.scores")


class ScoreService:
    """Service for daily score aggregation and reads"""

    def __init__(self, db: Session):
        self.db = db
        self.task_repo = TaskRepository()
        self.completion_repo = CompletionRepository()
        self.score_repo = DailyScoreRepository()

    @staticmethod
    def calculate_percentage(earned_points: float, total_possible_points: int) -> float:
        """
        Percentage of possible points earned, bounded to [0, 100].

        Returns 0 when the user has no possible points.
        """
        if total_possible_points <= 0:
            return 0.0
        percentage = (earned_points / total_possible_points) * 100.0
        return max(MIN_PERCENTAGE_SCORE, min(percentage, MAX_PERCENTAGE_SCORE))

    def recompute(self, user_id: int, score_date: date, commit: bool = True) -> DailyScore:
        """
        Rebuild DailyScore(user_id, score_date).

        Possible points are read from the user's tasks as they are active
        now, so deactivating a task changes any later recompute, including
        for past dates.

        Args:
            user_id: Score owner
            score_date: Day to aggregate
            commit: Commit the transaction; False when the caller owns it

        Returns:
            The upserted score row
        """
        total_possible = self.task_repo.get_total_possible_points(self.db, user_id)
        earned = self.completion_repo.sum_earned_points(self.db, user_id, score_date)
        percentage = self.calculate_percentage(earned, total_possible)

        score = self.score_repo.upsert(
            self.db, user_id, score_date, total_possible, earned, percentage
        )

        if commit:
            try:
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Score recompute failed for user {user_id} on {score_date}: {e}")
                raise DatabaseException("score recompute", str(e))
            self.db.refresh(score)

        logger.debug(
            f"Daily score user={user_id} date={score_date}: "
            f"{earned:.2f}/{total_possible} = {percentage:.2f}%"
        )
        return score

    def get_score(self, user_id: int, score_date: date) -> Optional[DailyScore]:
        """Get stored score for a day, None if nothing was recorded"""
        return self.score_repo.get(self.db, user_id, score_date)

    def get_scores(self, user_id: int, start_date: date, end_date: date) -> List[DailyScore]:
        """
        Get stored scores in an inclusive date range, oldest first.

        Raises:
            InvalidArgumentException: If start_date is after end_date
        """
        if start_date > end_date:
            raise InvalidArgumentException("start_date", "must not be after end_date")
        return self.score_repo.get_range(self.db, user_id, start_date, end_date)

    def average_score(self, user_id: int, start_date: date, end_date: date) -> float:
        """
        Mean percentage over the days that have a score row.

        Days without a row are left out of the denominator; with no rows at
        all the average is 0.
        """
        value = self.score_repo.average(self.db, user_id, start_date, end_date)
        return value if value is not None else 0.0
