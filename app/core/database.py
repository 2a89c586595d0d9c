"""
Database Configuration for the Visa Processing System
SQLAlchemy engine, session factory and transaction helpers
"""

from contextlib import contextmanager
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from app.core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


def _build_engine(database_url: str):
    """SQLite (tests, local runs) shares one connection; other backends are pooled"""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=settings.DEBUG,
        )
    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_pre_ping=True,  # Verify connections before use
        echo=settings.DEBUG,  # Log SQL queries in debug mode
    )


engine = _build_engine(settings.DATABASE_URL)

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """
    Database dependency for FastAPI
    Provides a database session that automatically closes after request
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction_scope(db: Session):
    """
    Run a unit of work as a single transaction.
    Everything flushed inside the block commits together or is rolled back.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def test_database_connection():
    """Test database connection and return status (useful for health checks)"""
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True, "Database connection successful"
    except Exception as e:
        return False, f"Database connection failed: {str(e)}"


def create_tables():
    """Create all database tables"""
    from app.models.base import Base

    # Import all models to ensure they're registered with Base.metadata
    from app.models import user, application, document, payment, biometric, notification  # noqa: F401

    logger.info(f"Creating {len(Base.metadata.tables)} tables")
    Base.metadata.create_all(bind=engine)


def drop_tables():
    """Drop all database tables (use with caution!)"""
    from app.models.base import Base
    from app.models import user, application, document, payment, biometric, notification  # noqa: F401

    Base.metadata.drop_all(bind=engine)
