"""
Score repository - Data access layer for completions and daily scores.
Handles the (user, task, date) and (user, date) keyed upserts.
"""
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, func

from taskduel.models import TaskCompletion, DailyScore


class CompletionRepository:
    """Repository for TaskCompletion data access"""

    @staticmethod
    def get(db: Session, user_id: int, task_id: int, completion_date: date) -> Optional[TaskCompletion]:
        """Get completion by its natural key"""
        return db.query(TaskCompletion).filter(
            and_(
                TaskCompletion.user_id == user_id,
                TaskCompletion.task_id == task_id,
                TaskCompletion.completion_date == completion_date
            )
        ).first()

    @staticmethod
    def get_for_day(db: Session, user_id: int, completion_date: date) -> List[TaskCompletion]:
        """Get all of a user's completions for a date"""
        return db.query(TaskCompletion).filter(
            and_(
                TaskCompletion.user_id == user_id,
                TaskCompletion.completion_date == completion_date
            )
        ).order_by(TaskCompletion.task_id).all()

    @staticmethod
    def sum_earned_points(db: Session, user_id: int, completion_date: date) -> float:
        """Sum earned points over a user's completions for a date"""
        total = db.query(func.coalesce(func.sum(TaskCompletion.earned_points), 0.0)).filter(
            and_(
                TaskCompletion.user_id == user_id,
                TaskCompletion.completion_date == completion_date
            )
        ).scalar()
        return float(total or 0.0)

    @staticmethod
    def upsert(
        db: Session,
        user_id: int,
        task_id: int,
        completion_date: date,
        actual_duration_hours: float,
        earned_points: float
    ) -> TaskCompletion:
        """Insert or replace the completion for (user, task, date)"""
        completion = CompletionRepository.get(db, user_id, task_id, completion_date)
        if completion is None:
            completion = TaskCompletion(
                user_id=user_id,
                task_id=task_id,
                completion_date=completion_date
            )
            db.add(completion)
        completion.actual_duration_hours = actual_duration_hours
        completion.earned_points = earned_points
        db.flush()
        return completion


class DailyScoreRepository:
    """Repository for DailyScore data access"""

    @staticmethod
    def get(db: Session, user_id: int, score_date: date) -> Optional[DailyScore]:
        """Get daily score for a user and date"""
        return db.query(DailyScore).filter(
            and_(
                DailyScore.user_id == user_id,
                DailyScore.score_date == score_date
            )
        ).first()

    @staticmethod
    def get_range(db: Session, user_id: int, start_date: date, end_date: date) -> List[DailyScore]:
        """Get daily scores in [start_date, end_date], oldest first"""
        return db.query(DailyScore).filter(
            and_(
                DailyScore.user_id == user_id,
                DailyScore.score_date >= start_date,
                DailyScore.score_date <= end_date
            )
        ).order_by(DailyScore.score_date).all()

    @staticmethod
    def average(db: Session, user_id: int, start_date: date, end_date: date) -> Optional[float]:
        """Mean percentage score over existing rows in range, None if no rows"""
        value = db.query(func.avg(DailyScore.percentage_score)).filter(
            and_(
                DailyScore.user_id == user_id,
                DailyScore.score_date >= start_date,
                DailyScore.score_date <= end_date
            )
        ).scalar()
        return float(value) if value is not None else None

    @staticmethod
    def upsert(
        db: Session,
        user_id: int,
        score_date: date,
        total_possible_points: int,
        earned_points: float,
        percentage_score: float
    ) -> DailyScore:
        """Insert or overwrite the score row for (user, date)"""
        score = DailyScoreRepository.get(db, user_id, score_date)
        if score is None:
            score = DailyScore(user_id=user_id, score_date=score_date)
            db.add(score)
        score.total_possible_points = total_possible_points
        score.earned_points = earned_points
        score.percentage_score = percentage_score
        db.flush()
        return score
