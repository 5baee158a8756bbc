"""
Custom exceptions for the scoring and challenge engine.
Every engine error belongs to one of four kinds: not found, forbidden,
invalid state and invalid argument.
"""
from typing import Optional


class TaskDuelException(Exception):
    """Base exception for the engine"""
    pass


class NotFoundException(TaskDuelException):
    """Raised when a referenced entity is absent or not owned by the caller"""
    def __init__(self, entity: str, key):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key} not found")


class TaskNotFoundException(NotFoundException):
    """Raised when a task is not found for the caller"""
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__("Task", task_id)


class UserNotFoundException(NotFoundException):
    """Raised when a user id or username does not resolve"""
    def __init__(self, key):
        super().__init__("User", key)


class ChallengeNotFoundException(NotFoundException):
    """Raised when a challenge is not found"""
    def __init__(self, challenge_id: int):
        self.challenge_id = challenge_id
        super().__init__("Challenge", challenge_id)


class ChallengeTaskNotFoundException(NotFoundException):
    """Raised when a challenge task is not found"""
    def __init__(self, challenge_task_id: int):
        self.challenge_task_id = challenge_task_id
        super().__init__("Challenge task", challenge_task_id)


class ForbiddenException(TaskDuelException):
    """Raised when the caller may not perform the requested transition"""
    def __init__(self, user_id: int, action: str):
        self.user_id = user_id
        self.action = action
        super().__init__(f"User {user_id} is not allowed to {action}")


class InvalidStateException(TaskDuelException):
    """Raised when a transition is not legal from the current status"""
    def __init__(self, challenge_id: int, status: Optional[str], action: str):
        self.challenge_id = challenge_id
        self.status = status
        self.action = action
        super().__init__(
            f"Cannot {action} challenge {challenge_id} in status '{status}'"
        )


class InvalidArgumentException(TaskDuelException):
    """Raised when input is malformed or semantically invalid"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class DatabaseException(TaskDuelException):
    """Raised when database operations fail"""
    def __init__(self, operation: str, details: str):
        self.operation = operation
        self.details = details
        super().__init__(f"Database {operation} failed: {details}")
