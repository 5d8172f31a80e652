"""Database engine and session management with connection pooling"""

from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from card_tracker.config import Settings
from card_tracker.infrastructure.database.models import Base


class Database:
    """
    Owns the engine (and its connection pool) and hands out sessions.

    Built once by the process entry point and passed to the app factory;
    the application lifespan disposes of the pool on shutdown.
    """

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    @classmethod
    def from_url(
        cls,
        url: str,
        pool_size: int = 10,
        max_overflow: int = 10,
        pool_recycle: int = 3600,
    ) -> "Database":
        if url.startswith("sqlite"):
            # One shared connection so in-memory databases survive across sessions
            engine = create_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            engine = create_engine(
                url,
                pool_pre_ping=True,  # Verify connections before using
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=pool_recycle,
            )
        return cls(engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls.from_url(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_recycle=settings.db_pool_recycle_seconds,
        )

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(bind=self.engine)

    def session(self) -> Generator[Session, None, None]:
        db = self.session_factory()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency injection for database sessions"""
    yield from request.app.state.database.session()
