"""
Hospital Auth - Account Store Engine

Engine construction for the accounts table. In-memory and file SQLite
share one connection (StaticPool); server databases (MySQL via pymysql,
PostgreSQL) get a bounded pool so that a burst of logins waits at most
DB_POOL_TIMEOUT seconds for a connection. The resulting
sqlalchemy.exc.TimeoutError surfaces as a 500 server_error.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from hospital_auth.config import settings


logger = logging.getLogger(__name__)


def get_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """Build the account store engine for `database_url` (settings by default)."""
    url = database_url or settings.DATABASE_URL

    if url.startswith("sqlite"):
        options = {
            "connect_args": {"check_same_thread": False},
            "poolclass": StaticPool,
        }
    else:
        options = {
            "pool_size": settings.DB_POOL_SIZE,
            "max_overflow": settings.DB_MAX_OVERFLOW,
            "pool_timeout": settings.DB_POOL_TIMEOUT,
            "pool_pre_ping": True,
        }

    engine = create_engine(url, echo=echo, **options)
    logger.info("Account store engine created (%s)", engine.url.get_backend_name())
    return engine


def init_db(engine: Engine) -> None:
    # Registers Account on SQLModel.metadata; create_all skips existing tables
    from hospital_auth.auth.models import Account  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session_factory(engine: Engine) -> Callable[[], Session]:
    """Per-request session factory, stored on app.state by the lifespan."""
    def session_factory() -> Session:
        return Session(engine)

    return session_factory
