import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Depends, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from .settings import settings
from . import deps, schemas, models, crud, utils
from .database import init_db
from .errors import register_exception_handlers
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.LOG_LEVEL)
    if settings.DB_CREATE_TABLES:
        init_db()
    logger.info("Task manager API starting (env=%s)", settings.APP_ENV)
    yield
    logger.info("Task manager API stopped")


# -----------------------------------------------------------------------------
# App & CORS
# -----------------------------------------------------------------------------
app = FastAPI(title="Task Manager API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> 500 (%.1f ms)", request.method, request.url.path, elapsed_ms)
        raise
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


def _auth_payload(message: str, user: models.User) -> schemas.AuthResponse:
    return schemas.AuthResponse(
        message=message,
        token=utils.create_access_token(user.id),
        user=schemas.UserOut.model_validate(user),
    )


# -----------------------------------------------------------------------------
# AUTH routes
# -----------------------------------------------------------------------------
@app.post("/api/auth/signup", response_model=schemas.AuthResponse, status_code=201)
def signup(user_in: schemas.SignupIn, db: Session = Depends(deps.get_db)):
    user = crud.create_user(db, user_in)
    return _auth_payload("User created successfully", user)


@app.post("/api/auth/login", response_model=schemas.AuthResponse)
def login(credentials: schemas.LoginIn, db: Session = Depends(deps.get_db)):
    user = crud.authenticate(db, credentials.email, credentials.password)
    logger.info("User id=%s logged in", user.id)
    return _auth_payload("Login successful", user)


@app.get("/api/auth/profile", response_model=schemas.ProfileResponse)
def get_profile(current_user: models.User = Depends(deps.get_current_user)):
    return schemas.ProfileResponse(user=schemas.UserOut.model_validate(current_user))


@app.put("/api/auth/profile", response_model=schemas.ProfileUpdateResponse)
def update_profile(
    profile_in: schemas.ProfileUpdate,
    db: Session = Depends(deps.get_db),
    current_user: models.User = Depends(deps.get_current_user),
):
    user = crud.update_profile(db, current_user, profile_in)
    return schemas.ProfileUpdateResponse(
        message="Profile updated",
        user=schemas.UserOut.model_validate(user),
    )


# -----------------------------------------------------------------------------
# HEALTH
# -----------------------------------------------------------------------------
@app.get("/health", response_model=schemas.HealthResponse)
def health():
    return schemas.HealthResponse(status="Server running", timestamp=datetime.now(timezone.utc))


# -----------------------------------------------------------------------------
# TASK routes
# -----------------------------------------------------------------------------
@app.get("/api/tasks", response_model=schemas.TaskListResponse)
def list_tasks(
    search: Optional[str] = Query(None, description="case-insensitive match on title or description"),
    status: Optional[str] = Query(None, description="pending | completed"),
    db: Session = Depends(deps.get_db),
    owner_id: int = Depends(deps.get_current_user_id),
):
    items = crud.list_tasks(db, owner_id=owner_id, search=search, status=status)
    return schemas.TaskListResponse(tasks=[schemas.TaskOut.model_validate(t) for t in items])


@app.post("/api/tasks", response_model=schemas.TaskResponse, status_code=201)
def create_task(
    task_in: Optional[schemas.TaskCreate] = None,
    db: Session = Depends(deps.get_db),
    owner_id: int = Depends(deps.get_current_user_id),
):
    task = crud.create_task(db, owner_id=owner_id, task_in=task_in or schemas.TaskCreate())
    return schemas.TaskResponse(message="Task created", task=schemas.TaskOut.model_validate(task))


@app.put("/api/tasks/{task_id}", response_model=schemas.TaskResponse)
def update_task(
    task_id: int,
    task_in: Optional[schemas.TaskUpdate] = None,
    db: Session = Depends(deps.get_db),
    owner_id: int = Depends(deps.get_current_user_id),
):
    task = crud.update_task(db, owner_id=owner_id, task_id=task_id, task_in=task_in or schemas.TaskUpdate())
    return schemas.TaskResponse(message="Task updated", task=schemas.TaskOut.model_validate(task))


@app.delete("/api/tasks/{task_id}", response_model=schemas.MessageResponse)
def delete_task(
    task_id: int,
    db: Session = Depends(deps.get_db),
    owner_id: int = Depends(deps.get_current_user_id),
):
    crud.delete_task(db, owner_id=owner_id, task_id=task_id)
    return schemas.MessageResponse(message="Task deleted")
