"""
Challenge HTTP routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from datetime import datetime
from typing import List

from taskduel.database import get_db
from taskduel.auth import verify_api_key, get_current_user_id
from taskduel.schemas import (
    ChallengeCreate, ChallengeRespond, ChallengeResponse, SweepResponse,
    ChallengeTaskProgress, ChallengeTaskResponse
)
from taskduel.services.challenge_service import ChallengeService

router = APIRouter(prefix="/api/challenges", tags=["challenges"])


@router.get("", response_model=List[ChallengeResponse])
def get_challenges(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get the caller's challenges"""
    return ChallengeService(db).get_challenges(user_id)


@router.post("", response_model=ChallengeResponse, status_code=status.HTTP_201_CREATED)
def create_challenge(
    data: ChallengeCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Challenge another user"""
    return ChallengeService(db).create_challenge(
        user_id, data.challenger_username, data.duration.type, data.duration.count,
        task_ids=data.task_ids
    )


@router.post("/complete", response_model=SweepResponse, dependencies=[Depends(verify_api_key)])
def complete_challenges(db: Session = Depends(get_db)):
    """Close expired active challenges (for external schedulers)"""
    closed = ChallengeService(db).sweep_completions(datetime.now())
    return {"completed": len(closed), "challenge_ids": [c.id for c in closed]}


@router.put("/tasks/{challenge_task_id}/progress", response_model=ChallengeTaskResponse)
def update_task_progress(
    challenge_task_id: int,
    data: ChallengeTaskProgress,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Set progress on one of the caller's challenge tasks"""
    return ChallengeService(db).update_task_progress(user_id, challenge_task_id, data.progress)


@router.get("/{challenge_id}", response_model=ChallengeResponse)
def get_challenge(
    challenge_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get one of the caller's challenges"""
    return ChallengeService(db).get_challenge(user_id, challenge_id)


@router.put("/{challenge_id}/respond", response_model=ChallengeResponse)
def respond_to_challenge(
    challenge_id: int,
    data: ChallengeRespond,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Accept or reject a pending challenge"""
    return ChallengeService(db).respond(challenge_id, user_id, data.accept, data.task_ids)


@router.put("/{challenge_id}/cancel", response_model=ChallengeResponse)
def cancel_challenge(
    challenge_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Cancel a pending challenge (creator only)"""
    return ChallengeService(db).cancel(challenge_id, user_id)
