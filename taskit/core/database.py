import logging
from typing import Generator
from sqlalchemy import create_engine, event, text, Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool

from .config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def build_engine(database_url: str) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL

    SQLite URLs get a thread-tolerant connection (requests are served from a
    thread pool); in-memory SQLite shares one connection so every session sees
    the same database.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(database_url, echo=settings.debug, **kwargs)

        @event.listens_for(engine, "connect")
        def receive_connect(dbapi_connection, connection_record):
            """Event listener for database connections"""
            logger.debug("SQLite connection established")

        return engine

    return create_engine(
        database_url,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=300,
        echo=settings.debug,
    )


# Create SQLAlchemy engine with proper configuration
engine = build_engine(settings.database_url)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)

# Base class for models
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Database dependency for FastAPI

    Yields:
        Session: Database session
    """
    db = SessionLocal()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}")
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine = None) -> None:
    """Create all tables"""
    # Import all models here to ensure they are registered
    from ..models import account, task  # noqa: F401

    Base.metadata.create_all(bind=bind if bind is not None else engine)
    logger.info("Database tables created successfully")


def check_db_connection(db: Session) -> bool:
    """
    Check database connectivity

    Returns:
        bool: True if connected, False otherwise
    """
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}")
        return False
