"""Database configuration for SQLAlchemy.

This module sets up the SQLAlchemy engine, declarative base, and session factory.
It supports both persistent and in-memory SQLite databases, as well as any
other backend configured via the `DATABASE_URL` setting.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, DeclarativeBase
from sqlalchemy.pool import StaticPool

from .settings import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base class for ORM models."""
    pass


def _make_engine(url: str):
    """Create an SQLAlchemy engine depending on the database URL."""
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if url.endswith(":///:memory:") or url.endswith("://"):
            return create_engine(
                url,
                connect_args=connect_args,
                poolclass=StaticPool,
            )
        return create_engine(
            url,
            connect_args=connect_args,
            pool_pre_ping=True,
        )
    return create_engine(url, pool_pre_ping=True)


engine = _make_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db() -> None:
    """Create any missing tables for the registered models."""
    from . import models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(bind=engine)
    logger.info(
        "Database ready (%s)",
        make_url(settings.DATABASE_URL).render_as_string(hide_password=True),
    )
