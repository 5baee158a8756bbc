"""
Shared constants for the scoring and challenge engine.
"""

# Challenge statuses
CHALLENGE_STATUS_PENDING = "pending"
CHALLENGE_STATUS_ACTIVE = "active"
CHALLENGE_STATUS_COMPLETED = "completed"
CHALLENGE_STATUS_CANCELLED = "cancelled"
CHALLENGE_STATUS_REJECTED = "rejected"

CHALLENGE_STATUSES = (
    CHALLENGE_STATUS_PENDING,
    CHALLENGE_STATUS_ACTIVE,
    CHALLENGE_STATUS_COMPLETED,
    CHALLENGE_STATUS_CANCELLED,
    CHALLENGE_STATUS_REJECTED,
)

# Challenge duration units
DURATION_DAY = "day"
DURATION_WEEK = "week"
DURATION_MONTH = "month"
DURATION_YEAR = "year"

DURATION_UNITS = (DURATION_DAY, DURATION_WEEK, DURATION_MONTH, DURATION_YEAR)

DAYS_PER_WEEK = 7

# Challenge task progress bounds (percent)
MIN_TASK_PROGRESS = 0.0
MAX_TASK_PROGRESS = 100.0

# Score bounds
MAX_PERCENTAGE_SCORE = 100.0
MIN_PERCENTAGE_SCORE = 0.0

# Leaderboard / search
DEFAULT_TOP_USERS_LIMIT = 20
DEFAULT_SEARCH_LIMIT = 10

# Dashboard
WEEKLY_AVERAGE_DAYS = 7

# Scheduler
DEFAULT_SWEEP_INTERVAL_MINUTES = 15

# Persistence / logging
DEFAULT_DATABASE_URL = "sqlite:///./taskduel.db"
DEFAULT_LOG_DIRECTORY_PROD = "/var/log/taskduel"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"
DEFAULT_LOG_FILE = "app.log"

CORS_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
]
