"""
Database engine and session factory
"""
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from order_service.config import Settings

Base = declarative_base()


def create_db_engine(settings: Settings) -> Engine:
    """
    Create the SQLAlchemy engine for the configured database

    PostgreSQL connections get a server-side statement_timeout so a stuck
    query fails instead of holding the request forever.
    """
    kwargs = {
        "echo": settings.DB_ECHO,
        "pool_pre_ping": True,
    }

    if settings.DATABASE_URL.startswith("postgresql"):
        kwargs.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
        )
        if settings.DB_STATEMENT_TIMEOUT_MS > 0:
            kwargs["connect_args"] = {
                "options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"
            }

    return create_engine(settings.DATABASE_URL, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker:
    """Create a session factory bound to engine"""
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create tables that do not exist yet"""
    # Models must be imported so they register on Base.metadata
    from order_service.models import order  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency yielding one session per request"""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
