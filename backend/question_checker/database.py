"""
SQLAlchemy engine and session for the credential store. Supports PostgreSQL and SQLite.
Sync usage; sessions are short-lived and opened per store operation.
"""
import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from question_checker.config import settings

logger = logging.getLogger(__name__)

_is_sqlite = "sqlite" in settings.database_url
_connect_args = {"check_same_thread": False} if _is_sqlite else {}
engine = create_engine(
    settings.database_url,
    pool_pre_ping=not _is_sqlite,
    connect_args=_connect_args,
    echo=False,  # Set True for SQL logging during development
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db(bind=None):
    """Create the gemini_api_keys table if missing. Call once at app startup."""
    from question_checker.models import api_key  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Credential store tables ready")
