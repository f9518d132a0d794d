"""
Script to create database tables manually.
Run this once against a fresh database before starting the API.
"""
from sqlalchemy import inspect

from gaadiyaan.db import engine, init_db
from gaadiyaan.utils import logger


def create_tables():
    """Create all database tables."""
    logger.info("Creating database tables...")
    init_db(engine)
    tables = inspect(engine).get_table_names()
    logger.info("Tables present: %s", ", ".join(sorted(tables)))


if __name__ == "__main__":
    create_tables()
