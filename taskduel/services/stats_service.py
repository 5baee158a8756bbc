"""
Stats projection service.
Leaderboard, user search, dashboard and calendar views derived from
profiles, daily scores and completed challenges.
"""
import logging
from datetime import date, timedelta
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from taskduel.models import User
from taskduel.repositories.user_repository import UserRepository
from taskduel.repositories.task_repository import TaskRepository
from taskduel.repositories.score_repository import CompletionRepository
from taskduel.repositories.challenge_repository import ChallengeRepository
from taskduel.services.date_service import DateService
from taskduel.services.score_service import ScoreService
from taskduel.exceptions import UserNotFoundException, DatabaseException
from taskduel.constants import (
    CHALLENGE_STATUS_ACTIVE,
    DEFAULT_TOP_USERS_LIMIT,
    DEFAULT_SEARCH_LIMIT,
    WEEKLY_AVERAGE_DAYS,
)

logger = logging.getLogger("taskduel.stats")


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class StatsService:
    """Service for leaderboard and statistics views"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository()
        self.task_repo = TaskRepository()
        self.completion_repo = CompletionRepository()
        self.challenge_repo = ChallengeRepository()
        self.date_service = DateService()
        self.score_service = ScoreService(db)

    def top_users(self, excluding_user_id: int, limit: int = DEFAULT_TOP_USERS_LIMIT) -> List[User]:
        """Users by win count, highest first, without the caller"""
        if limit <= 0:
            return []
        return self.user_repo.get_top(self.db, excluding_user_id, limit)

    def search_users(
        self,
        query: Optional[str],
        excluding_user_id: int,
        limit: int = DEFAULT_SEARCH_LIMIT
    ) -> List[User]:
        """
        Case-insensitive substring search over username and display name.

        A blank query returns nothing rather than every user.
        """
        if not query or not query.strip() or limit <= 0:
            return []
        pattern = f"%{_escape_like(query.strip())}%"
        return self.user_repo.search(self.db, pattern, excluding_user_id, limit)

    def rebuild_profile_stats(self, user_id: int) -> User:
        """
        Recompute a user's win/loss totals from completed challenges.

        Ties count as neither a win nor a loss.
        """
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise UserNotFoundException(user_id)

        wins = 0
        losses = 0
        for challenge in self.challenge_repo.get_completed_for_user(self.db, user_id):
            if challenge.winner_id is None:
                continue
            if challenge.winner_id == user_id:
                wins += 1
            else:
                losses += 1

        try:
            self.user_repo.set_totals(self.db, user_id, wins, losses)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseException("rebuild profile stats", str(e))
        self.db.refresh(user)
        logger.info(f"Rebuilt stats for user {user_id}: {wins} wins, {losses} losses")
        return user

    def get_dashboard(self, user_id: int, today: Optional[date] = None) -> dict:
        """
        Today's overview for a user.

        Returns:
            Dictionary with stats and today's tasks with their progress
        """
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise UserNotFoundException(user_id)

        today = today or date.today()
        week_ago = today - timedelta(days=WEEKLY_AVERAGE_DAYS)

        today_score = self.score_service.get_score(user_id, today)
        active_count = self.challenge_repo.count_for_user(self.db, user_id, CHALLENGE_STATUS_ACTIVE)
        weekly_average = self.score_service.average_score(user_id, week_ago, today)

        completions = {
            c.task_id: c for c in self.completion_repo.get_for_day(self.db, user_id, today)
        }
        today_tasks = []
        for task in self.task_repo.get_active_for_user(self.db, user_id):
            completion = completions.get(task.id)
            completed_duration = completion.actual_duration_hours if completion else 0.0
            earned_points = completion.earned_points if completion else 0.0
            completion_percentage = (
                min((completed_duration / task.target_duration_hours) * 100, 100.0)
                if task.target_duration_hours > 0 else 0.0
            )
            today_tasks.append({
                "id": task.id,
                "name": task.name,
                "target_duration_hours": task.target_duration_hours,
                "point_value": task.point_value,
                "completed_duration": completed_duration,
                "earned_points": earned_points,
                "completion_percentage": completion_percentage,
            })

        return {
            "stats": {
                "today_score": today_score.percentage_score if today_score else 0.0,
                "total_wins": user.total_wins or 0,
                "total_losses": user.total_losses or 0,
                "active_challenges": active_count,
                "weekly_average": weekly_average,
            },
            "today_tasks": today_tasks,
        }

    def get_calendar(self, user_id: int, year: int, month: int) -> dict:
        """
        Month view: daily scores, finished challenges and monthly totals.

        Challenges are placed on their end date.
        """
        month_start, month_end = self.date_service.month_range(year, month)

        scores = self.score_service.get_scores(user_id, month_start, month_end)
        challenges = self.challenge_repo.get_completed_for_user(
            self.db, user_id, month_start, month_end
        )

        challenge_results = []
        for challenge in challenges:
            opponent = self.user_repo.get_by_id(self.db, challenge.opponent_of(user_id))
            challenge_results.append({
                "date": challenge.end_date,
                "won": challenge.winner_id == user_id,
                "tie": challenge.winner_id is None,
                "opponent": opponent.display_name if opponent else "",
                "challenge_id": challenge.id,
            })

        wins = sum(1 for r in challenge_results if r["won"])
        losses = sum(1 for r in challenge_results if not r["won"] and not r["tie"])
        average_score = (
            sum(s.percentage_score for s in scores) / len(scores) if scores else 0.0
        )
        best = None
        for score in scores:
            if best is None or score.percentage_score > best.percentage_score:
                best = score

        return {
            "day_scores": scores,
            "challenge_results": challenge_results,
            "monthly_stats": {
                "total_wins": wins,
                "total_losses": losses,
                "average_score": average_score,
                "best_day": {"date": best.score_date, "score": best.percentage_score} if best else None,
            },
        }
