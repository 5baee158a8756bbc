from pydantic import BaseModel, Field
from datetime import datetime, date
from typing import Optional, List, Literal


# Profile schemas
class ProfileCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    display_name: str = Field(..., min_length=1, max_length=100)
    avatar_url: Optional[str] = None

class ProfileResponse(BaseModel):
    id: int
    username: str
    display_name: str
    avatar_url: Optional[str] = None
    total_wins: int = 0
    total_losses: int = 0

    class Config:
        from_attributes = True


# Task schemas
class TaskBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    target_duration_hours: float = Field(..., gt=0, le=24)
    point_value: int = Field(..., gt=0, le=10000)

class TaskCreate(TaskBase):
    pass

class TaskUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    target_duration_hours: Optional[float] = Field(None, gt=0, le=24)
    point_value: Optional[int] = Field(None, gt=0, le=10000)

class TaskResponse(TaskBase):
    id: int
    user_id: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


# Completion schemas
class CompletionCreate(BaseModel):
    task_id: int
    actual_duration_hours: float = Field(..., ge=0, le=24)
    completion_date: Optional[date] = None  # defaults to today

class CompletionResponse(BaseModel):
    id: int
    user_id: int
    task_id: int
    completion_date: date
    actual_duration_hours: float
    earned_points: float

    class Config:
        from_attributes = True


class DailyScoreResponse(BaseModel):
    user_id: int
    score_date: date
    total_possible_points: int
    earned_points: float
    percentage_score: float

    class Config:
        from_attributes = True


# Challenge schemas
class DurationSpec(BaseModel):
    type: Literal["day", "week", "month", "year"]
    count: int = Field(..., gt=0, le=1000)

class ChallengeCreate(BaseModel):
    challenger_username: str = Field(..., min_length=1)
    duration: DurationSpec
    task_ids: Optional[List[int]] = None  # defaults to all active tasks

class ChallengeRespond(BaseModel):
    accept: bool
    task_ids: Optional[List[int]] = None  # used when accepting

class ChallengeTaskProgress(BaseModel):
    progress: float = Field(..., ge=0, le=100)

class ChallengeTaskResponse(BaseModel):
    id: int
    task_list_id: int
    source_task_id: Optional[int] = None
    name: str
    target_duration_hours: float
    point_value: int
    progress: float

    class Config:
        from_attributes = True

class ChallengeTaskListResponse(BaseModel):
    id: int
    user_id: int
    total_progress: float
    tasks: List[ChallengeTaskResponse] = []

    class Config:
        from_attributes = True

class ChallengeResponse(BaseModel):
    id: int
    creator_id: int
    challenger_id: int
    start_date: date
    end_date: date
    status: str
    winner_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    task_lists: List[ChallengeTaskListResponse] = []

    class Config:
        from_attributes = True

class SweepResponse(BaseModel):
    completed: int
    challenge_ids: List[int]


# Dashboard / calendar schemas
class DashboardTask(BaseModel):
    id: int
    name: str
    target_duration_hours: float
    point_value: int
    completed_duration: float
    earned_points: float
    completion_percentage: float

class DashboardStats(BaseModel):
    today_score: float
    total_wins: int
    total_losses: int
    active_challenges: int
    weekly_average: float

class DashboardResponse(BaseModel):
    stats: DashboardStats
    today_tasks: List[DashboardTask]

class ChallengeResult(BaseModel):
    date: date
    won: bool
    tie: bool
    opponent: str
    challenge_id: int

class BestDay(BaseModel):
    date: date
    score: float

class MonthlyStats(BaseModel):
    total_wins: int
    total_losses: int
    average_score: float
    best_day: Optional[BestDay] = None

class CalendarResponse(BaseModel):
    day_scores: List[DailyScoreResponse]
    challenge_results: List[ChallengeResult]
    monthly_stats: MonthlyStats
