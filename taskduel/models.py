from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Float, Date, ForeignKey,
    UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime

from taskduel.database import Base
from taskduel.constants import CHALLENGE_STATUS_PENDING, CHALLENGE_STATUSES


class User(Base):
    """User profile with challenge tallies. Identity comes from the auth layer."""
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, nullable=False, unique=True, index=True)
    display_name = Column(String, nullable=False)
    avatar_url = Column(String, nullable=True)

    # Challenge tallies, only touched after a successful status transition
    total_wins = Column(Integer, nullable=False, default=0)
    total_losses = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class Task(Base):
    __tablename__ = "tasks"
    __table_args__ = (
        CheckConstraint("target_duration_hours > 0", name="ck_tasks_target_positive"),
        CheckConstraint("point_value > 0", name="ck_tasks_points_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    target_duration_hours = Column(Float, nullable=False)
    point_value = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)  # soft delete flag
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class TaskCompletion(Base):
    __tablename__ = "task_completions"
    __table_args__ = (
        UniqueConstraint("user_id", "task_id", "completion_date", name="uq_completion_user_task_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    completion_date = Column(Date, nullable=False, index=True)
    actual_duration_hours = Column(Float, nullable=False, default=0.0)
    earned_points = Column(Float, nullable=False, default=0.0)  # fixed at recording time
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class DailyScore(Base):
    __tablename__ = "daily_scores"
    __table_args__ = (
        UniqueConstraint("user_id", "score_date", name="uq_daily_score_user_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    score_date = Column(Date, nullable=False, index=True)

    total_possible_points = Column(Integer, nullable=False, default=0)
    earned_points = Column(Float, nullable=False, default=0.0)
    percentage_score = Column(Float, nullable=False, default=0.0)  # 0-100

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class Challenge(Base):
    __tablename__ = "challenges"
    __table_args__ = (
        CheckConstraint("creator_id <> challenger_id", name="ck_challenges_distinct_users"),
        CheckConstraint("end_date > start_date", name="ck_challenges_date_order"),
        CheckConstraint(
            "status IN (" + ", ".join(f"'{s}'" for s in CHALLENGE_STATUSES) + ")",
            name="ck_challenges_status",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    creator_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    challenger_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False, index=True)
    status = Column(String, nullable=False, default=CHALLENGE_STATUS_PENDING, index=True)
    winner_id = Column(Integer, ForeignKey("profiles.id"), nullable=True)  # null = undecided or tie
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    task_lists = relationship(
        "ChallengeTaskList",
        back_populates="challenge",
        cascade="all, delete-orphan",
        order_by="ChallengeTaskList.id",
        lazy="selectin",
    )

    def opponent_of(self, user_id: int) -> int:
        """Return the other participant's id"""
        return self.challenger_id if user_id == self.creator_id else self.creator_id

    def is_participant(self, user_id: int) -> bool:
        return user_id in (self.creator_id, self.challenger_id)


class ChallengeTaskList(Base):
    """One participant's tasks for a challenge, copied from their catalog"""
    __tablename__ = "challenge_task_lists"
    __table_args__ = (
        UniqueConstraint("challenge_id", "user_id", name="uq_challenge_task_list_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    challenge_id = Column(Integer, ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    total_progress = Column(Float, nullable=False, default=0.0)  # mean of task progress, 0-100
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    challenge = relationship("Challenge", back_populates="task_lists")
    tasks = relationship(
        "ChallengeTask",
        back_populates="task_list",
        cascade="all, delete-orphan",
        order_by="ChallengeTask.id",
        lazy="selectin",
    )


class ChallengeTask(Base):
    """Snapshot of a catalog task inside a challenge task list"""
    __tablename__ = "challenge_tasks"
    __table_args__ = (
        CheckConstraint("progress >= 0 AND progress <= 100", name="ck_challenge_tasks_progress_range"),
    )

    id = Column(Integer, primary_key=True, index=True)
    task_list_id = Column(
        Integer, ForeignKey("challenge_task_lists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    source_task_id = Column(Integer, ForeignKey("tasks.id", ondelete="SET NULL"), nullable=True)
    name = Column(String, nullable=False)
    target_duration_hours = Column(Float, nullable=False)
    point_value = Column(Integer, nullable=False)
    progress = Column(Float, nullable=False, default=0.0)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    task_list = relationship("ChallengeTaskList", back_populates="tasks")
