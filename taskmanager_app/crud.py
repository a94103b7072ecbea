"""CRUD helpers for users and tasks.

This module contains database operations used by the API layer:
- User helpers for signup/login/profile flows.
- Task list/create/update/delete, every query scoped to the owning user.

Failures are raised as errors from ``errors`` and rendered by the app's
exception handlers.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy import desc, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from . import models, schemas, utils
from .errors import AuthError, AuthErrorKind, ConflictError, NotFound, ValidationError

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# USERS
# -----------------------------------------------------------------------------
def get_user(db: Session, user_id: int) -> models.User | None:
    """Return a user by id or None if not found."""
    return db.get(models.User, user_id)


def get_user_by_email(db: Session, email: str) -> models.User | None:
    """Return a user by normalized email or None if not found."""
    norm = (email or "").strip().lower()
    if not norm:
        return None
    return db.query(models.User).filter(models.User.email == norm).first()


def user_exists(db: Session, email: str) -> bool:
    """Return True if a user with the given email already exists."""
    return get_user_by_email(db, email) is not None


def create_user(db: Session, user_in: schemas.SignupIn) -> models.User:
    """Create a new user hashing the provided password."""
    if user_exists(db, user_in.email):
        raise ConflictError("User already exists")
    user = models.User(
        email=user_in.email,
        name=user_in.name,
        password_hash=utils.hash_password(user_in.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race against a concurrent signup for the same email
        db.rollback()
        raise ConflictError("User already exists")
    db.refresh(user)
    logger.info("Registered user id=%s", user.id)
    return user


def authenticate(db: Session, email: str, password: str) -> models.User:
    """Return the user for valid credentials; unknown email and wrong password look the same."""
    user = get_user_by_email(db, email)
    if not user or not utils.verify_password(password, user.password_hash):
        raise AuthError(AuthErrorKind.INVALID_CREDENTIALS)
    return user


def update_profile(db: Session, user: models.User, profile_in: schemas.ProfileUpdate) -> models.User:
    """Apply a partial name/email change to ``user``."""
    if profile_in.name is not None:
        user.name = profile_in.name
    if profile_in.email is not None and profile_in.email != user.email:
        if user_exists(db, profile_in.email):
            raise ConflictError("Email already in use", status_code=400)
        user.email = profile_in.email
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already in use", status_code=400)
    db.refresh(user)
    return user


# -----------------------------------------------------------------------------
# TASKS
# -----------------------------------------------------------------------------
_FIELD_LIMITS = {
    "title": models.TITLE_MAX_LENGTH,
    "description": models.DESCRIPTION_MAX_LENGTH,
}


def _clean_field(name: str, value: str) -> str:
    """Trim a task text field and enforce its length limit."""
    cleaned = value.strip()
    if not cleaned:
        raise ValidationError(f"{name.capitalize()} cannot be empty")
    limit = _FIELD_LIMITS[name]
    if len(cleaned) > limit:
        raise ValidationError(f"{name.capitalize()} must be at most {limit} characters")
    return cleaned


# ids are signed 64-bit integers in the database
MAX_TASK_ID = 2**63 - 1


def _valid_id(task_id: int) -> bool:
    return 1 <= task_id <= MAX_TASK_ID


def _owned_task(db: Session, owner_id: int, task_id: int) -> models.Task | None:
    """Return the task only if it belongs to ``owner_id``."""
    if not _valid_id(task_id):
        return None
    return (
        db.query(models.Task)
        .filter(models.Task.id == task_id, models.Task.owner_id == owner_id)
        .first()
    )


def list_tasks(
    db: Session,
    owner_id: int,
    search: Optional[str] = None,
    status: Optional[str] = None,
) -> Sequence[models.Task]:
    """List the owner's tasks, newest first.

    ``search`` matches title OR description as a case-insensitive substring.
    ``status`` is compared literally, so an unknown value simply matches nothing.
    The result is not paginated.
    """
    q = db.query(models.Task).filter(models.Task.owner_id == owner_id)

    if search:
        q = q.filter(
            or_(
                models.Task.title.icontains(search, autoescape=True),
                models.Task.description.icontains(search, autoescape=True),
            )
        )
    if status:
        q = q.filter(models.Task.status == status)

    return q.order_by(desc(models.Task.created_at), desc(models.Task.id)).all()


def create_task(db: Session, owner_id: int, task_in: schemas.TaskCreate) -> models.Task:
    """Create a pending task owned by ``owner_id``."""
    if not (task_in.title or "").strip() or not (task_in.description or "").strip():
        raise ValidationError("Title and description required")

    obj = models.Task(
        title=_clean_field("title", task_in.title),
        description=_clean_field("description", task_in.description),
        status="pending",
        owner_id=owner_id,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    logger.info("Created task id=%s owner=%s", obj.id, owner_id)
    return obj


def update_task(
    db: Session, owner_id: int, task_id: int, task_in: schemas.TaskUpdate
) -> models.Task:
    """Partially update an owned task.

    Title and description are applied only when truthy, so an empty string
    leaves the stored value alone. A status outside the allowed set is
    ignored while the other fields still apply.
    """
    obj = _owned_task(db, owner_id, task_id)
    if not obj:
        raise NotFound("Task not found")

    if task_in.title:
        obj.title = _clean_field("title", task_in.title)
    if task_in.description:
        obj.description = _clean_field("description", task_in.description)
    if task_in.status:
        if task_in.status in models.TASK_STATUSES:
            obj.status = task_in.status
        else:
            logger.debug("Ignoring unknown status %r for task id=%s", task_in.status, task_id)

    obj.updated_at = models.utcnow()
    db.commit()
    db.refresh(obj)
    return obj


def delete_task(db: Session, owner_id: int, task_id: int) -> None:
    """Permanently delete an owned task; NotFound if none matched."""
    if not _valid_id(task_id):
        raise NotFound("Task not found")
    deleted = (
        db.query(models.Task)
        .filter(models.Task.id == task_id, models.Task.owner_id == owner_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    if not deleted:
        raise NotFound("Task not found")
    logger.info("Deleted task id=%s owner=%s", task_id, owner_id)
