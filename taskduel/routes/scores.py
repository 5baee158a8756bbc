"""
Score HTTP routes.
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import List

from taskduel.database import get_db
from taskduel.auth import get_current_user_id
from taskduel.schemas import DashboardResponse, CalendarResponse, DailyScoreResponse
from taskduel.services.stats_service import StatsService
from taskduel.services.score_service import ScoreService

router = APIRouter(prefix="/api/scores", tags=["scores"])


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Today's score, tallies and task progress"""
    return StatsService(db).get_dashboard(user_id, date.today())


@router.get("/calendar", response_model=CalendarResponse)
def get_calendar(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1970, le=9999),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Daily scores and challenge results for a month"""
    return StatsService(db).get_calendar(user_id, year, month)


@router.get("/daily", response_model=List[DailyScoreResponse])
def get_daily_scores(
    start_date: date = Query(...),
    end_date: date = Query(...),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Stored daily scores in an inclusive date range"""
    return ScoreService(db).get_scores(user_id, start_date, end_date)
