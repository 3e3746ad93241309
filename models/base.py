"""
SQLAlchemy engine and session factory.

Everything that touches the database runs on the asyncio event loop
(the FastAPI handlers and the queue's history listener), so there is a
single async engine + async session factory here. Tests swap in an
in-memory SQLite engine via aiosqlite.
"""

from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from config.settings import settings


class Base(DeclarativeBase):
    """Base class for all ORM models. SQLAlchemy uses this to track table metadata."""
    pass


async_engine = create_async_engine(settings.database_url, echo=False)
AsyncSessionLocal = async_sessionmaker(async_engine, expire_on_commit=False)
