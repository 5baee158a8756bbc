"""
Challenge lifecycle service.

Status graph:
    pending -> active | rejected | cancelled
    active  -> completed

Every transition is a conditional update on the current status, so two
callers racing on the same challenge cannot both succeed.

Each participant also gets a task list copied from their catalog (the
creator on create, the challenger on accept). Task list progress is
tracked for display only; the winner is decided by daily scores.
"""
import logging
import math
from datetime import date, datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from taskduel.models import Challenge, ChallengeTaskList, ChallengeTask, Task
from taskduel.repositories.challenge_repository import ChallengeRepository, ChallengeTaskRepository
from taskduel.repositories.task_repository import TaskRepository
from taskduel.repositories.user_repository import UserRepository
from taskduel.services.date_service import DateService
from taskduel.services.score_service import ScoreService
from taskduel.services.user_service import UserService
from taskduel.exceptions import (
    ChallengeNotFoundException, ChallengeTaskNotFoundException, TaskNotFoundException,
    ForbiddenException, InvalidStateException, InvalidArgumentException, DatabaseException
)
from taskduel.constants import (
    CHALLENGE_STATUS_PENDING,
    CHALLENGE_STATUS_ACTIVE,
    CHALLENGE_STATUS_COMPLETED,
    CHALLENGE_STATUS_CANCELLED,
    CHALLENGE_STATUS_REJECTED,
    MIN_TASK_PROGRESS,
    MAX_TASK_PROGRESS,
)

logger = logging.getLogger("taskduel.challenges")


class ChallengeService:
    """Service for challenge creation, responses and completion"""

    def __init__(self, db: Session):
        self.db = db
        self.challenge_repo = ChallengeRepository()
        self.challenge_task_repo = ChallengeTaskRepository()
        self.task_repo = TaskRepository()
        self.user_repo = UserRepository()
        self.user_service = UserService(db)
        self.date_service = DateService()
        self.score_service = ScoreService(db)

    def _commit(self, operation: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Challenge {operation} failed: {e}")
            raise DatabaseException(operation, str(e))

    def _get_or_raise(self, challenge_id: int) -> Challenge:
        challenge = self.challenge_repo.get_by_id(self.db, challenge_id)
        if not challenge:
            raise ChallengeNotFoundException(challenge_id)
        return challenge

    def _resolve_tasks(self, user_id: int, task_ids: Optional[List[int]]) -> List[Task]:
        """
        Pick the catalog tasks to copy into a challenge task list.

        None means every active task of the user. Explicit ids must all be
        active tasks the user owns; duplicates are ignored.
        """
        if task_ids is None:
            return self.task_repo.get_active_for_user(self.db, user_id)

        tasks = []
        seen = set()
        for task_id in task_ids:
            if task_id in seen:
                continue
            seen.add(task_id)
            task = self.task_repo.get_owned(self.db, user_id, task_id)
            if not task:
                raise TaskNotFoundException(task_id)
            tasks.append(task)
        return tasks

    def _add_task_list(self, challenge: Challenge, user_id: int, tasks: List[Task]) -> ChallengeTaskList:
        task_list = ChallengeTaskList(
            challenge=challenge,
            user_id=user_id,
            total_progress=0.0,
            tasks=[
                ChallengeTask(
                    source_task_id=task.id,
                    name=task.name,
                    target_duration_hours=task.target_duration_hours,
                    point_value=task.point_value,
                    progress=0.0
                )
                for task in tasks
            ]
        )
        return self.challenge_task_repo.create_task_list(self.db, task_list)

    def get_challenges(self, user_id: int) -> List[Challenge]:
        """Get challenges the user takes part in, newest first"""
        return self.challenge_repo.get_for_user(self.db, user_id)

    def get_challenge(self, user_id: int, challenge_id: int) -> Challenge:
        """Get one challenge; only participants may read it"""
        challenge = self._get_or_raise(challenge_id)
        if not challenge.is_participant(user_id):
            raise ForbiddenException(user_id, f"view challenge {challenge_id}")
        return challenge

    def create_challenge(
        self,
        creator_id: int,
        challenger_username: str,
        duration_type: str,
        duration_count: int,
        today: Optional[date] = None,
        task_ids: Optional[List[int]] = None
    ) -> Challenge:
        """
        Create a pending challenge starting today.

        Args:
            creator_id: Caller
            challenger_username: Opponent's username
            duration_type: day, week, month or year
            duration_count: Positive number of units
            today: Start date (defaults to the current date)
            task_ids: Creator's tasks for the challenge task list
                (defaults to all active tasks)

        Raises:
            UserNotFoundException: Unknown username
            InvalidArgumentException: Self-challenge or bad duration
            TaskNotFoundException: A task id is not an active task of the creator
        """
        challenger = self.user_service.get_by_username((challenger_username or "").strip())
        if challenger.id == creator_id:
            raise InvalidArgumentException("challenger_username", "you cannot challenge yourself")

        start_date = today or date.today()
        end_date = self.date_service.calculate_end_date(start_date, duration_type, duration_count)
        tasks = self._resolve_tasks(creator_id, task_ids)

        challenge = Challenge(
            creator_id=creator_id,
            challenger_id=challenger.id,
            start_date=start_date,
            end_date=end_date,
            status=CHALLENGE_STATUS_PENDING
        )
        try:
            self.challenge_repo.create(self.db, challenge)
            self._add_task_list(challenge, creator_id, tasks)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseException("create challenge", str(e))
        self._commit("create challenge")
        self.db.refresh(challenge)

        logger.info(
            f"Challenge {challenge.id} created: {creator_id} vs {challenger.id}, "
            f"{start_date} -> {end_date}, {len(tasks)} task(s)"
        )
        return challenge

    def respond(
        self,
        challenge_id: int,
        challenger_id: int,
        accept: bool,
        task_ids: Optional[List[int]] = None
    ) -> Challenge:
        """
        Accept (-> active) or reject (-> rejected) a pending challenge.

        Accepting copies the challenger's tasks (task_ids, or all active
        tasks when None) into their challenge task list.

        Raises:
            ChallengeNotFoundException: Unknown challenge
            ForbiddenException: Caller is not the challenged user
            InvalidStateException: Challenge is no longer pending
            TaskNotFoundException: A task id is not an active task of the challenger
        """
        challenge = self._get_or_raise(challenge_id)
        if challenge.challenger_id != challenger_id:
            raise ForbiddenException(challenger_id, f"respond to challenge {challenge_id}")
        if challenge.status != CHALLENGE_STATUS_PENDING:
            raise InvalidStateException(challenge_id, challenge.status, "respond to")

        tasks = self._resolve_tasks(challenger_id, task_ids) if accept else []

        new_status = CHALLENGE_STATUS_ACTIVE if accept else CHALLENGE_STATUS_REJECTED
        changed = self.challenge_repo.transition(
            self.db, challenge_id, CHALLENGE_STATUS_PENDING, new_status
        )
        if not changed:
            self.db.rollback()
            self.db.refresh(challenge)
            logger.warning(f"Challenge {challenge_id} changed concurrently, now '{challenge.status}'")
            raise InvalidStateException(challenge_id, challenge.status, "respond to")

        if accept:
            try:
                self._add_task_list(challenge, challenger_id, tasks)
            except SQLAlchemyError as e:
                self.db.rollback()
                raise DatabaseException("respond", str(e))

        self._commit("respond")
        self.db.refresh(challenge)
        logger.info(f"Challenge {challenge_id} {new_status} by user {challenger_id}")
        return challenge

    def cancel(self, challenge_id: int, creator_id: int) -> Challenge:
        """
        Cancel a pending challenge.

        Raises:
            ChallengeNotFoundException: Unknown challenge
            ForbiddenException: Caller is not the creator
            InvalidStateException: Challenge is no longer pending
        """
        challenge = self._get_or_raise(challenge_id)
        if challenge.creator_id != creator_id:
            raise ForbiddenException(creator_id, f"cancel challenge {challenge_id}")
        if challenge.status != CHALLENGE_STATUS_PENDING:
            raise InvalidStateException(challenge_id, challenge.status, "cancel")

        changed = self.challenge_repo.transition(
            self.db, challenge_id, CHALLENGE_STATUS_PENDING, CHALLENGE_STATUS_CANCELLED
        )
        if not changed:
            self.db.rollback()
            self.db.refresh(challenge)
            logger.warning(f"Challenge {challenge_id} changed concurrently, now '{challenge.status}'")
            raise InvalidStateException(challenge_id, challenge.status, "cancel")

        self._commit("cancel")
        self.db.refresh(challenge)
        logger.info(f"Challenge {challenge_id} cancelled by user {creator_id}")
        return challenge

    def update_task_progress(self, user_id: int, challenge_task_id: int, progress: float) -> ChallengeTask:
        """
        Set progress (0-100) on one of the caller's challenge tasks and
        refresh the list's total progress.

        Raises:
            InvalidArgumentException: Progress is not a number in [0, 100]
            ChallengeTaskNotFoundException: Unknown challenge task
            ForbiddenException: Task belongs to the other participant
            InvalidStateException: Challenge is completed, cancelled or rejected
        """
        if (
            isinstance(progress, bool)
            or not isinstance(progress, (int, float))
            or not math.isfinite(progress)
            or not MIN_TASK_PROGRESS <= progress <= MAX_TASK_PROGRESS
        ):
            raise InvalidArgumentException("progress", "must be a number between 0 and 100")

        task = self.challenge_task_repo.get_task(self.db, challenge_task_id)
        if not task:
            raise ChallengeTaskNotFoundException(challenge_task_id)
        task_list = task.task_list
        if task_list.user_id != user_id:
            raise ForbiddenException(user_id, f"update challenge task {challenge_task_id}")
        challenge = task_list.challenge
        if challenge.status not in (CHALLENGE_STATUS_PENDING, CHALLENGE_STATUS_ACTIVE):
            raise InvalidStateException(challenge.id, challenge.status, "update progress in")

        try:
            task.progress = float(progress)
            self.db.flush()
            task_list.total_progress = self.challenge_task_repo.average_progress(self.db, task_list.id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseException("update task progress", str(e))
        self._commit("update task progress")
        self.db.refresh(task)

        logger.info(f"User {user_id} set challenge task {challenge_task_id} progress to {progress}")
        return task

    def determine_winner(self, challenge: Challenge) -> Optional[int]:
        """
        Compare average daily scores over the challenge period.

        Returns:
            Winner id, or None for a tie
        """
        creator_avg = self.score_service.average_score(
            challenge.creator_id, challenge.start_date, challenge.end_date
        )
        challenger_avg = self.score_service.average_score(
            challenge.challenger_id, challenge.start_date, challenge.end_date
        )
        logger.debug(
            f"Challenge {challenge.id} averages: creator={creator_avg:.2f}, "
            f"challenger={challenger_avg:.2f}"
        )

        if creator_avg > challenger_avg:
            return challenge.creator_id
        if challenger_avg > creator_avg:
            return challenge.challenger_id
        return None

    def close_challenge(self, challenge: Challenge) -> bool:
        """
        Complete one active challenge and record the result.

        Win/loss counters move only when this call performed the
        active -> completed update, which makes repeated or concurrent
        closing harmless.

        Returns:
            True if this call closed the challenge, False if it was already closed
        """
        challenge_id = challenge.id
        winner_id = self.determine_winner(challenge)
        loser_id = challenge.opponent_of(winner_id) if winner_id is not None else None

        try:
            changed = self.challenge_repo.transition(
                self.db, challenge_id, CHALLENGE_STATUS_ACTIVE, CHALLENGE_STATUS_COMPLETED,
                winner_id=winner_id
            )
            if not changed:
                self.db.rollback()
                logger.info(f"Challenge {challenge_id} already closed, skipping")
                return False

            if winner_id is not None:
                self.user_repo.increment_result(self.db, winner_id, loser_id)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Closing challenge {challenge_id} failed: {e}")
            raise DatabaseException("close challenge", str(e))

        if winner_id is None:
            logger.info(f"Challenge {challenge_id} completed: tie")
        else:
            logger.info(f"Challenge {challenge_id} completed: winner {winner_id}")
        return True

    def sweep_completions(self, now: Optional[datetime] = None) -> List[Challenge]:
        """
        Close every active challenge whose end date has been reached.

        Safe to call repeatedly and from several workers at once.

        Args:
            now: Current time (defaults to datetime.now())

        Returns:
            Challenges closed by this call
        """
        now = now or datetime.now()
        as_of = now.date() if isinstance(now, datetime) else now

        candidates = self.challenge_repo.get_expired_active(self.db, as_of)
        closed = []
        for challenge in candidates:
            if challenge.status != CHALLENGE_STATUS_ACTIVE:
                continue
            if self.close_challenge(challenge):
                closed.append(challenge)

        for challenge in closed:
            self.db.refresh(challenge)

        if candidates:
            logger.info(f"Sweep as of {as_of}: closed {len(closed)} of {len(candidates)} expired challenges")
        return closed
