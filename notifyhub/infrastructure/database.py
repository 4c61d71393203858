"""Database configuration and session management."""

from __future__ import annotations

import logging

from collections.abc import Iterable
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for SQLAlchemy models."""


def create_database_engine(database_url: str) -> Engine:
    """Build the SQLAlchemy engine for ``database_url``.

    SQLite connections are shared with the FastAPI threadpool, so same-thread
    checking is disabled; in-memory databases keep a single connection so
    every session sees the same data.
    """

    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, pool_pre_ping=True)

    options: dict[str, object] = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return create_engine(database_url, **options)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return the session factory handed to repositories."""

    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def initialize_database(engine: Engine) -> None:
    """Ensure all ORM models have corresponding database tables."""

    from notifyhub.infrastructure import models  # noqa: F401  # ensure models are imported

    Base.metadata.create_all(bind=engine, checkfirst=True)
    logger.debug("Database schema ensured for %s", engine.url.render_as_string(hide_password=True))


def update_or_insert(
    session: Session,
    model_class: type[Base],
    criteria: Iterable[Any],
    values: dict[str, Any],
    *,
    identity: dict[str, Any],
) -> None:
    """Write ``values`` to the row matching ``criteria``, inserting it when missing.

    The row is changed with a single ``UPDATE``. When nothing matched, the row
    is inserted from ``identity`` plus ``values``; an insert that collides with
    a concurrent one rolls back and repeats the ``UPDATE``.
    """

    criteria = list(criteria)
    updated = (
        session.query(model_class).filter(*criteria).update(values, synchronize_session=False)
    )
    if updated:
        session.commit()
        return
    try:
        session.add(model_class(**identity, **values))
        session.commit()
    except IntegrityError:
        session.rollback()
        logger.debug("Concurrent insert on %s; updating instead", model_class.__tablename__)
        session.query(model_class).filter(*criteria).update(values, synchronize_session=False)
        session.commit()


__all__ = [
    "Base",
    "create_database_engine",
    "create_session_factory",
    "initialize_database",
    "update_or_insert",
]
