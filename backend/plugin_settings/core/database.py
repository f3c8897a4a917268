"""Database connection and session management using SQLAlchemy."""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class DatabaseManager:
    """Database connection and session manager."""

    def __init__(self, database_url: str, echo: bool = False):
        """Initialize database manager with a synchronous engine.

        :param database_url: SQLAlchemy database URL
        :param echo: Enable SQL logging
        """
        self.database_url = database_url

        engine_kwargs = {"echo": echo}
        if database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if database_url in ("sqlite://", "sqlite:///:memory:"):
                # Share the single in-memory database across threads
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_engine(database_url, **engine_kwargs)

        self.session_factory = sessionmaker(
            self.engine,
            class_=Session,
            expire_on_commit=False,
            autoflush=False,
        )

    def create_tables(self) -> None:
        """Create all tables registered on the declarative base."""
        Base.metadata.create_all(self.engine)

    @contextmanager
    def get_session(self) -> Generator[Session, None, None]:
        """Get a database session with proper cleanup."""
        with self.session_factory() as session:
            try:
                yield session
            except Exception:
                session.rollback()
                raise
            finally:
                session.close()

    def close(self) -> None:
        """Close database connections."""
        self.engine.dispose()
