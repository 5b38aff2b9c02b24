"""
Database engine utilities.
Engines are built explicitly and handed to the monitoring store; nothing here holds a global connection.
"""

from __future__ import annotations

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError


def create_database_engine(database_url: str) -> Engine:
    """Build a pooled SQLAlchemy engine for the given URL."""

    if not database_url:
        raise ValueError("database_url must be a non-empty SQLAlchemy URL.")
    return create_engine(database_url, pool_pre_ping=True, future=True)


def can_connect(engine: Engine) -> bool:
    """Return True if the database can be reached and queried."""

    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False
