"""Database sessions for the curator store.

Invariants:
    - A session that raises is rolled back before the error leaves it
    - IntegrityError means a lost uniqueness race (live review per profile, featured slot,
      username, issue number per profile) and surfaces as StaleStateError (409)
    - Other SQLAlchemy failures surface as DatabaseError (503)

Design Decisions:
    - db_manager is created by the app lifespan, never at import time
    - expire_on_commit=False: services return ORM rows after their transaction commits
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from threesby.core.errors import DatabaseError, StaleStateError

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Owns the engine and hands out one AsyncSession per request."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.warning(f"Uniqueness conflict at commit: {e.orig}")
            raise StaleStateError(
                "Record changed concurrently (uniqueness conflict). Reload and try again.",
            )
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB unreachable: {e}")
            raise DatabaseError("Connection lost or refused", "execute")
        except (DBAPIError, SQLAlchemyError) as e:
            await session.rollback()
            logger.error(f"Curator store query failed: {e}")
            raise DatabaseError("Curator store query failed", "query")
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """True when the curator store answers SELECT 1."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except (DatabaseError, OSError) as e:
            logger.error(f"Curator store unreachable: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
