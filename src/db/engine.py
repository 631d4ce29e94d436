"""Database engine and session factory."""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.settings import get_settings

_engine = None


def get_engine():
    """Get or create the database engine from settings."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_engine(
            settings.database_url,
            echo=settings.database_echo,
            pool_pre_ping=True,
        )
    return _engine


def get_session_factory(engine=None):
    return sessionmaker(bind=engine or get_engine(), expire_on_commit=False)


def init_db(engine=None) -> None:
    """Create any missing tables."""
    from src.db import models  # noqa: F401  (registers tables on Base)
    from src.db.base import Base

    Base.metadata.create_all(engine or get_engine())
