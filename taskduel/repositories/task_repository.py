"""
Task repository - Data access layer for Task model.
Handles all database queries related to the task catalog.
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import and_, func

from taskduel.models import Task


class TaskRepository:
    """Repository for Task data access"""

    @staticmethod
    def get_by_id(db: Session, task_id: int) -> Optional[Task]:
        """Get task by ID"""
        return db.query(Task).filter(Task.id == task_id).first()

    @staticmethod
    def get_owned(db: Session, user_id: int, task_id: int, active_only: bool = True) -> Optional[Task]:
        """Get task by ID only if it belongs to the user"""
        query = db.query(Task).filter(
            and_(
                Task.id == task_id,
                Task.user_id == user_id
            )
        )
        if active_only:
            query = query.filter(Task.is_active == True)
        return query.first()

    @staticmethod
    def get_active_for_user(db: Session, user_id: int) -> List[Task]:
        """Get user's active tasks, newest first"""
        return db.query(Task).filter(
            and_(
                Task.user_id == user_id,
                Task.is_active == True
            )
        ).order_by(Task.created_at.desc(), Task.id.desc()).all()

    @staticmethod
    def get_total_possible_points(db: Session, user_id: int) -> int:
        """Sum of point values over the user's currently active tasks"""
        total = db.query(func.coalesce(func.sum(Task.point_value), 0)).filter(
            and_(
                Task.user_id == user_id,
                Task.is_active == True
            )
        ).scalar()
        return int(total or 0)

    @staticmethod
    def create(db: Session, task: Task) -> Task:
        """Create new task"""
        db.add(task)
        db.flush()
        return task

    @staticmethod
    def update(db: Session, task: Task) -> Task:
        """Flush pending changes to a task"""
        db.flush()
        return task
