"""
Profile, leaderboard and search HTTP routes.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from taskduel.database import get_db
from taskduel.auth import verify_api_key, get_current_user_id
from taskduel.schemas import ProfileCreate, ProfileResponse
from taskduel.services.user_service import UserService
from taskduel.services.stats_service import StatsService
from taskduel.constants import DEFAULT_TOP_USERS_LIMIT, DEFAULT_SEARCH_LIMIT

router = APIRouter(tags=["users"])


@router.post(
    "/api/profiles",
    response_model=ProfileResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(verify_api_key)]
)
def create_profile(data: ProfileCreate, db: Session = Depends(get_db)):
    """Create a profile (called by the signup flow)"""
    return UserService(db).create_profile(data.username, data.display_name, data.avatar_url)


@router.get("/api/profiles/me", response_model=ProfileResponse)
def get_my_profile(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get the caller's profile"""
    return UserService(db).get_profile(user_id)


@router.get("/api/users/top", response_model=List[ProfileResponse])
def get_top_users(
    limit: int = Query(DEFAULT_TOP_USERS_LIMIT, ge=1, le=100),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Users with the most wins"""
    return StatsService(db).top_users(user_id, limit)


@router.get("/api/users/search", response_model=List[ProfileResponse])
def search_users(
    q: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_SEARCH_LIMIT, ge=1, le=50),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Search users by username or display name"""
    return StatsService(db).search_users(q, user_id, limit)
