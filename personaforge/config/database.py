"""Database configuration using SQLAlchemy."""

from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from .settings import settings


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def configure_sqlite_connections(target: Engine) -> None:
    """
    Per-connection SQLite setup.

    Turns on foreign key enforcement (SQLite ignores ON DELETE CASCADE
    without it) and replaces the built-in ASCII-only lower() with a Unicode
    one, so case-insensitive search folds accented names too.
    """

    @event.listens_for(target, "connect")
    def _configure(dbapi_connection, connection_record):
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if settings.is_sqlite:
    engine = create_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        connect_args={"check_same_thread": False},  # FastAPI runs sync deps in a thread pool
    )
    configure_sqlite_connections(engine)
else:
    engine = create_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,
    )

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Base class for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Dependency that provides a database session.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None) -> None:
    """Initialize database tables."""
    # Import all models to register them with Base
    from personaforge import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
