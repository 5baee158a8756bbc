from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
from pathlib import Path

from taskduel.database import engine, Base
from taskduel import models  # Import all models to register them with Base
from taskduel import config
from taskduel.constants import DEFAULT_LOG_DIRECTORY_DEV
from taskduel.exceptions import (
    TaskDuelException, NotFoundException, ForbiddenException,
    InvalidStateException, InvalidArgumentException, DatabaseException
)
from taskduel.routes import tasks, challenges, scores, users
from taskduel.services.scheduler_service import start_scheduler, stop_scheduler

LOG_DIR = config.LOG_DIR
LOG_FILE = config.LOG_FILE

# Create log directory if it doesn't exist (for development)
try:
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    Path(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = Path(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger("taskduel")

app = FastAPI(
    title="TaskDuel API",
    description="Daily task scoring and head-to-head challenges",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_STATUS_BY_EXCEPTION = (
    (NotFoundException, status.HTTP_404_NOT_FOUND),
    (ForbiddenException, status.HTTP_403_FORBIDDEN),
    (InvalidStateException, status.HTTP_409_CONFLICT),
    (InvalidArgumentException, status.HTTP_400_BAD_REQUEST),
    (DatabaseException, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


@app.exception_handler(TaskDuelException)
async def engine_exception_handler(request: Request, exc: TaskDuelException):
    for exc_type, status_code in _STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            break
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


# Startup event
@app.on_event("startup")
async def startup_event():
    Base.metadata.create_all(bind=engine)
    logger.info(f"TaskDuel API started. Logging to: {log_path}")
    if config.SCHEDULER_ENABLED:
        start_scheduler()

# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down TaskDuel API")
    stop_scheduler()

# Health check (no auth required)
@app.get("/")
async def root():
    return {"message": "TaskDuel API", "status": "active"}


app.include_router(users.router)
app.include_router(tasks.router)
app.include_router(challenges.router)
app.include_router(scores.router)
