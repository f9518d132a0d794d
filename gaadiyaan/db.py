# gaadiyaan/db.py
"""Database engine and session utilities.

The engine is built from the settings object and handed to the session factory;
request handlers receive their session through the `get_db` dependency and never
touch the engine directly.
"""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import settings

Base = declarative_base()


def build_engine(url: str, pool_size: int = 5, max_overflow: int = 10) -> Engine:
    if url.startswith("sqlite"):
        # sqlite's default pool takes no size arguments
        return create_engine(url, connect_args={"check_same_thread": False})
    # tuned pool settings for cloud DB
    return create_engine(
        url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True
    )


engine = build_engine(settings.database_url, settings.db_pool_size, settings.db_max_overflow)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine):
    # make sure every table is registered on the metadata
    from . import models  # noqa: F401
    Base.metadata.create_all(bind=bind)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
