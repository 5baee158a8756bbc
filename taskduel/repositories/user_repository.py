"""
User repository - Data access layer for profiles.
Handles lookups, leaderboard queries and the win/loss counters.
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import or_

from taskduel.models import User


class UserRepository:
    """Repository for User data access"""

    @staticmethod
    def get_by_id(db: Session, user_id: int) -> Optional[User]:
        """Get user by ID"""
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_by_username(db: Session, username: str) -> Optional[User]:
        """Get user by exact username"""
        return db.query(User).filter(User.username == username).first()

    @staticmethod
    def lock(db: Session, user_id: int) -> Optional[User]:
        """
        Load a user row with a row-level lock held until the transaction ends.

        Used to serialize score recomputes for one user. SQLite ignores
        FOR UPDATE; its write transactions are already serialized.
        """
        return db.query(User).filter(User.id == user_id).with_for_update().first()

    @staticmethod
    def get_top(db: Session, excluding_user_id: int, limit: int) -> List[User]:
        """Get users ordered by wins, excluding one user"""
        return db.query(User).filter(
            User.id != excluding_user_id
        ).order_by(User.total_wins.desc(), User.id.asc()).limit(limit).all()

    @staticmethod
    def search(db: Session, pattern: str, excluding_user_id: int, limit: int) -> List[User]:
        """Case-insensitive LIKE search over username and display name"""
        return db.query(User).filter(
            User.id != excluding_user_id,
            or_(
                User.username.ilike(pattern, escape="\\"),
                User.display_name.ilike(pattern, escape="\\")
            )
        ).order_by(User.id.asc()).limit(limit).all()

    @staticmethod
    def create(db: Session, user: User) -> User:
        """Create new user"""
        db.add(user)
        db.flush()
        return user

    @staticmethod
    def increment_result(db: Session, winner_id: int, loser_id: int) -> None:
        """Add one win and one loss with SQL-side increments"""
        db.query(User).filter(User.id == winner_id).update(
            {User.total_wins: User.total_wins + 1}, synchronize_session=False
        )
        db.query(User).filter(User.id == loser_id).update(
            {User.total_losses: User.total_losses + 1}, synchronize_session=False
        )

    @staticmethod
    def set_totals(db: Session, user_id: int, wins: int, losses: int) -> None:
        """Overwrite win/loss totals"""
        db.query(User).filter(User.id == user_id).update(
            {User.total_wins: wins, User.total_losses: losses}, synchronize_session=False
        )
