"""
Challenge repository - Data access layer for Challenge model.
Status changes go through compare-and-swap updates so that concurrent
callers cannot both apply the same transition.
"""
from datetime import date, datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, or_, func

from taskduel.models import Challenge, ChallengeTaskList, ChallengeTask
from taskduel.constants import CHALLENGE_STATUS_ACTIVE, CHALLENGE_STATUS_COMPLETED


class ChallengeRepository:
    """Repository for Challenge data access"""

    @staticmethod
    def get_by_id(db: Session, challenge_id: int) -> Optional[Challenge]:
        """Get challenge by ID"""
        return db.query(Challenge).filter(Challenge.id == challenge_id).first()

    @staticmethod
    def get_for_user(db: Session, user_id: int) -> List[Challenge]:
        """Get challenges where the user is creator or challenger, newest first"""
        return db.query(Challenge).filter(
            or_(
                Challenge.creator_id == user_id,
                Challenge.challenger_id == user_id
            )
        ).order_by(Challenge.created_at.desc(), Challenge.id.desc()).all()

    @staticmethod
    def count_for_user(db: Session, user_id: int, status: str) -> int:
        """Count user's challenges in a status"""
        return db.query(Challenge).filter(
            and_(
                or_(
                    Challenge.creator_id == user_id,
                    Challenge.challenger_id == user_id
                ),
                Challenge.status == status
            )
        ).count()

    @staticmethod
    def get_expired_active(db: Session, as_of: date) -> List[Challenge]:
        """Get active challenges whose end date is on or before as_of"""
        return db.query(Challenge).filter(
            and_(
                Challenge.status == CHALLENGE_STATUS_ACTIVE,
                Challenge.end_date <= as_of
            )
        ).order_by(Challenge.end_date, Challenge.id).all()

    @staticmethod
    def get_completed_for_user(
        db: Session,
        user_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[Challenge]:
        """Get user's completed challenges, optionally by end date range"""
        query = db.query(Challenge).filter(
            and_(
                or_(
                    Challenge.creator_id == user_id,
                    Challenge.challenger_id == user_id
                ),
                Challenge.status == CHALLENGE_STATUS_COMPLETED
            )
        )
        if start_date is not None:
            query = query.filter(Challenge.end_date >= start_date)
        if end_date is not None:
            query = query.filter(Challenge.end_date <= end_date)
        return query.order_by(Challenge.end_date, Challenge.id).all()

    @staticmethod
    def create(db: Session, challenge: Challenge) -> Challenge:
        """Create new challenge"""
        db.add(challenge)
        db.flush()
        return challenge

    @staticmethod
    def transition(
        db: Session,
        challenge_id: int,
        expected_status: str,
        new_status: str,
        winner_id: Optional[int] = None
    ) -> bool:
        """
        Conditionally move a challenge from expected_status to new_status.

        Returns:
            True if this call changed the row, False if the status had
            already moved on
        """
        values = {
            Challenge.status: new_status,
            Challenge.updated_at: datetime.now(),
        }
        if new_status == CHALLENGE_STATUS_COMPLETED:
            values[Challenge.winner_id] = winner_id

        updated = db.query(Challenge).filter(
            and_(
                Challenge.id == challenge_id,
                Challenge.status == expected_status
            )
        ).update(values, synchronize_session=False)
        return updated == 1


class ChallengeTaskRepository:
    """Repository for per-participant challenge task lists"""

    @staticmethod
    def get_task_list(db: Session, challenge_id: int, user_id: int) -> Optional[ChallengeTaskList]:
        """Get a participant's task list for a challenge"""
        return db.query(ChallengeTaskList).filter(
            and_(
                ChallengeTaskList.challenge_id == challenge_id,
                ChallengeTaskList.user_id == user_id
            )
        ).first()

    @staticmethod
    def get_task(db: Session, challenge_task_id: int) -> Optional[ChallengeTask]:
        """Get challenge task by ID"""
        return db.query(ChallengeTask).filter(ChallengeTask.id == challenge_task_id).first()

    @staticmethod
    def create_task_list(db: Session, task_list: ChallengeTaskList) -> ChallengeTaskList:
        """Create a task list together with its tasks"""
        db.add(task_list)
        db.flush()
        return task_list

    @staticmethod
    def average_progress(db: Session, task_list_id: int) -> float:
        """Mean progress over a list's tasks, 0 for an empty list"""
        value = db.query(func.coalesce(func.avg(ChallengeTask.progress), 0.0)).filter(
            ChallengeTask.task_list_id == task_list_id
        ).scalar()
        return float(value or 0.0)
