"""
Profile service.
Profiles are created by the signup flow; this service only stores and reads them.
"""
import logging
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from taskduel.models import User
from taskduel.repositories.user_repository import UserRepository
from taskduel.exceptions import (
    UserNotFoundException, InvalidArgumentException
)

logger = logging.getLogger("taskduel.users")


class UserService:
    """Service for user profiles"""

    def __init__(self, db: Session):
        self.db = db
        self.user_repo = UserRepository()

    def create_profile(self, username: str, display_name: str, avatar_url: Optional[str] = None) -> User:
        """Create a profile; usernames are unique"""
        username = (username or "").strip()
        display_name = (display_name or "").strip()
        if not username:
            raise InvalidArgumentException("username", "must not be empty")
        if not display_name:
            raise InvalidArgumentException("display_name", "must not be empty")
        if self.user_repo.get_by_username(self.db, username):
            raise InvalidArgumentException("username", f"'{username}' is already taken")

        user = User(username=username, display_name=display_name, avatar_url=avatar_url)
        try:
            self.user_repo.create(self.db, user)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise InvalidArgumentException("username", f"'{username}' is already taken")
        self.db.refresh(user)
        logger.info(f"Created profile {user.id} ({user.username})")
        return user

    def get_profile(self, user_id: int) -> User:
        """Get profile by id or raise"""
        user = self.user_repo.get_by_id(self.db, user_id)
        if not user:
            raise UserNotFoundException(user_id)
        return user

    def get_by_username(self, username: str) -> User:
        """Resolve a username or raise"""
        user = self.user_repo.get_by_username(self.db, username)
        if not user:
            raise UserNotFoundException(username)
        return user
