"""Service test fixtures — async DB, deterministic collaborators, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db, clock, code generator and account provider overridden on the app
    - db_manager patched so the readiness route sees the test engine
    - Seed helpers commit, so services under test always read committed rows

Design Decisions:
    - SQLite in-memory: fast, no external dependency; partial unique indexes are declared
      with sqlite_where so the live-review and featured-slot guarantees hold here too
    - FakeClock instead of freezing time: tests move time explicitly with advance()
"""

import itertools
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

import threesby.infrastructure.database as db_module
from threesby.api.dependencies import (
    get_account_provider, get_clock, get_code_generator,
)
from threesby.db.base import Base
from threesby.infrastructure.database import DatabaseSessionManager, get_db
from threesby.main import app
from threesby.models.pick import Pick
from threesby.models.profile import Profile
from threesby.services.collection_store import CollectionStore
from threesby.services.curator_lifecycle import CuratorLifecycle
from threesby.services.invite_registry import InviteRegistry
from threesby.services.pick_store import PickStore
from threesby.services.review_workflow import ReviewWorkflow

START = datetime(2026, 4, 1, 10, 0, tzinfo=timezone.utc)
CATEGORIES = ("books", "products", "places")


class FakeClock:
    def __init__(self, start: datetime = START):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


class SequenceCodeGenerator:
    """Deterministic codes INV00002, INV00003, ... unless fixed codes are queued first."""

    def __init__(self, codes: list[str] | None = None):
        self._fixed = list(codes or [])
        self._counter = itertools.count(2)

    def generate(self) -> str:
        if self._fixed:
            return self._fixed.pop(0)
        return f"INV{next(self._counter):05d}"


class FakeAccountProvider:
    """Records calls; fail_create / fail_delete make the next call raise."""

    def __init__(self):
        self.created: list[tuple[UUID, str]] = []
        self.deleted: list[UUID] = []
        self.fail_create: Exception | None = None
        self.fail_delete: Exception | None = None

    async def create_account(self, email: str, password: str) -> UUID:
        if self.fail_create:
            raise self.fail_create
        account_id = uuid4()
        self.created.append((account_id, email))
        return account_id

    async def delete_account(self, account_id: UUID) -> None:
        if self.fail_delete:
            raise self.fail_delete
        self.deleted.append(account_id)


# ─── Database ───────────────────────────────────────────────────

@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


# ─── Collaborators ──────────────────────────────────────────────

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def codes():
    return SequenceCodeGenerator()


@pytest.fixture
def accounts():
    return FakeAccountProvider()


@pytest.fixture
def lifecycle(test_db, clock):
    return CuratorLifecycle(test_db, clock)


@pytest.fixture
def reviews(test_db, clock):
    return ReviewWorkflow(test_db, clock)


@pytest.fixture
def invites(test_db, clock, codes):
    return InviteRegistry(test_db, clock, codes, quota=3, ttl_days=30)


@pytest.fixture
def picks(test_db, clock):
    return PickStore(test_db, clock)


@pytest.fixture
def collections(test_db, clock):
    return CollectionStore(test_db, clock)


# ─── Seed helpers ───────────────────────────────────────────────

async def _add_profile(db: AsyncSession, clock: FakeClock, **overrides) -> UUID:
    """Insert a complete draft profile. Returns its id."""
    fields = {
        "id": uuid4(),
        "email": "curator@example.com",
        "full_name": "Ada Reader",
        "title": "Librarian",
        "avatar_url": "https://img.example/ada.png",
        "status": "draft",
        "created_at": clock.now(),
        "updated_at": clock.now(),
    }
    fields.update(overrides)
    db.add(Profile(**fields))
    await db.commit()
    return fields["id"]


async def _add_shelf(
    db: AsyncSession, clock: FakeClock, profile_id: UUID, status: str = "draft",
) -> dict[tuple[str, int], UUID]:
    """Ranks 1-3 in every category. Returns {(category, rank): pick_id}."""
    ids = {}
    for category in CATEGORIES:
        for rank in (1, 2, 3):
            pick = Pick(
                id=uuid4(), profile_id=profile_id, category=category, rank=rank,
                status=status, title=f"{category} #{rank}",
                created_at=clock.now(), updated_at=clock.now(),
            )
            db.add(pick)
            ids[(category, rank)] = pick.id
    await db.commit()
    return ids


@pytest.fixture
async def admin_id(test_db, clock):
    return await _add_profile(
        test_db, clock, email="admin@example.com", username="admin", is_admin=True,
    )


@pytest.fixture
async def curator_id(test_db, clock):
    """Draft profile with complete fields and a full shelf of draft picks."""
    profile_id = await _add_profile(test_db, clock, username="ada")
    await _add_shelf(test_db, clock, profile_id)
    return profile_id


@pytest.fixture
async def approved_id(test_db, clock):
    """Approved curator with a full published shelf."""
    profile_id = await _add_profile(
        test_db, clock, username="bea", email="bea@example.com", status="approved",
        last_submitted_at=clock.now(),
    )
    await _add_shelf(test_db, clock, profile_id, status="published")
    return profile_id


# ─── HTTP client ────────────────────────────────────────────────

@pytest.fixture
async def client(test_engine, test_session_factory, clock, codes, accounts):
    """FastAPI test client with DB and collaborators overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_code_generator] = lambda: codes
    app.dependency_overrides[get_account_provider] = lambda: accounts

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


def _as_user(profile_id: UUID) -> dict[str, str]:
    return {"X-User-Id": str(profile_id)}


@pytest.fixture
def as_user():
    """Headers identifying the caller: as_user(profile_id)."""
    return _as_user


@pytest.fixture
def make_profile(test_db, clock):
    """Insert a profile: await make_profile(**overrides) -> id."""
    async def _make(**overrides):
        overrides.setdefault("username", f"user_{uuid4().hex[:8]}")
        return await _add_profile(test_db, clock, **overrides)
    return _make


@pytest.fixture
def make_shelf(test_db, clock):
    """Insert ranks 1-3 per category: await make_shelf(profile_id, status) -> ids."""
    async def _make(profile_id: UUID, status: str = "draft"):
        return await _add_shelf(test_db, clock, profile_id, status)
    return _make
