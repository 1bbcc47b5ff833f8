"""Database sessions — how store failures leave the session boundary.

Tests cover:
    - a uniqueness race that reaches the boundary is a 409 StaleStateError
    - connection failures are a 503 DatabaseError and roll the session back
    - health_check reports the store as reachable
"""

from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from threesby.core.errors import DatabaseError, StaleStateError
from threesby.infrastructure.database import DatabaseSessionManager
from threesby.models.profile import Profile


@pytest.fixture
def manager(test_engine, test_session_factory):
    manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    manager.engine = test_engine
    manager._session_factory = test_session_factory
    return manager


async def test_duplicate_username_is_stale_state(manager, curator_id, clock):
    with pytest.raises(StaleStateError) as exc:
        async with manager.session() as db:
            db.add(Profile(
                id=uuid4(), email="other@example.com", username="ada", status="draft",
                created_at=clock.now(), updated_at=clock.now(),
            ))
            await db.flush()

    assert exc.value.http_status == 409
    assert exc.value.code == "STALE_STATE"
    async with manager.session() as db:
        usernames = (await db.execute(select(Profile.username))).scalars().all()
    assert usernames == ["ada"]


async def test_operational_error_is_database_error(manager):
    with pytest.raises(DatabaseError) as exc:
        async with manager.session():
            raise OperationalError("SELECT 1", {}, ConnectionResetError("gone"))

    assert exc.value.http_status == 503
    assert exc.value.operation == "execute"


async def test_health_check_reaches_store(manager):
    assert await manager.health_check() is True
