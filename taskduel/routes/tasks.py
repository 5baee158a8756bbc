"""
Task catalog and completion HTTP routes.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from datetime import date
from typing import Dict, List, Optional

from taskduel.database import get_db
from taskduel.auth import get_current_user_id
from taskduel.schemas import (
    TaskCreate, TaskUpdate, TaskResponse, CompletionCreate, CompletionResponse, DailyScoreResponse
)
from taskduel.services.task_service import TaskService
from taskduel.services.completion_service import CompletionService

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=List[TaskResponse])
def get_tasks(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Get the caller's active tasks"""
    return TaskService(db).get_tasks(user_id)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Create a task"""
    return TaskService(db).create_task(user_id, task)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_update: TaskUpdate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Update an owned task"""
    return TaskService(db).update_task(user_id, task_id, task_update)


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Soft delete an owned task"""
    TaskService(db).deactivate_task(user_id, task_id)
    return {"message": "Task deleted successfully"}


@router.get("/completions", response_model=Dict[int, float])
def get_completions(
    completion_date: Optional[date] = Query(None),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Hours recorded per task for a day (today by default)"""
    return CompletionService(db).get_completions(user_id, completion_date or date.today())


@router.post("/completions")
def record_completion(
    data: CompletionCreate,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """Record time spent on a task and return the updated day score"""
    completion, score = CompletionService(db).record_completion(
        user_id,
        data.task_id,
        data.completion_date or date.today(),
        data.actual_duration_hours
    )
    return {
        "completion": CompletionResponse.model_validate(completion),
        "daily_score": DailyScoreResponse.model_validate(score),
    }
