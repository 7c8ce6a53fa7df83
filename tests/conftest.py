"""
Shared pytest fixtures for the CarePay backend tests.

Uses SQLite in-memory with StaticPool so all sessions share one connection,
meaning data written in one session is visible to others (important for HTTP client tests).
"""
import uuid
from datetime import date, time
from decimal import Decimal
from types import SimpleNamespace

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

import app.models  # noqa – registers all SQLAlchemy models with Base.metadata
from app.core.database import Base, get_db
from app.main import app
from app.models.contract import Contract

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

EMPLOYEE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000e1")


# ── Shared engine (function-scoped: fresh DB per test) ───────────────────────

@pytest_asyncio.fixture
async def engine():
    """Creates a fresh in-memory SQLite engine per test with a shared connection pool."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,          # single shared connection → all sessions see same data
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine) -> AsyncSession:
    """Async DB session for direct data inspection inside tests."""
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


# ── HTTP client fixture ───────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(engine) -> AsyncClient:
    """
    FastAPI test client with get_db overridden to use the test engine.
    Each request gets its own session (proper handling) but shares the same
    underlying connection via StaticPool.
    """
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


# ── Contract fixture ──────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def contract(db) -> Contract:
    c = Contract(
        id=uuid.uuid4(),
        employee_id=EMPLOYEE_ID,
        employer_name="Mme Dupont",
        start_date=date(2024, 1, 1),
        hourly_rate=Decimal("15.00"),
        weekly_hours=Decimal("35.00"),
    )
    db.add(c)
    await db.commit()
    await db.refresh(c)
    return c


# ── Stub helpers ──────────────────────────────────────────────────────────────

def _t(value: str) -> time:
    h, m = map(int, value.split(":"))
    return time(h, m)


def make_shift(
    shift_date: date,
    start: str,
    end: str,
    break_minutes: int = 0,
    shift_type: str = "effective",
    employee_id=EMPLOYEE_ID,
    status: str = "planned",
    night_interventions_count: int = 0,
    has_night_action: bool = False,
    guard_segments=None,
):
    return SimpleNamespace(
        id=uuid.uuid4(),
        date=shift_date,
        start_time=_t(start),
        end_time=_t(end),
        break_minutes=break_minutes,
        shift_type=shift_type,
        employee_id=employee_id,
        status=status,
        night_interventions_count=night_interventions_count,
        has_night_action=has_night_action,
        guard_segments=guard_segments,
    )


def make_segment(start: str, segment_type: str, break_minutes: int = 0) -> dict:
    return {"start_time": start, "type": segment_type, "break_minutes": break_minutes}


def make_contract(hourly_rate: float = 15.0, weekly_hours: float = 35.0, start_date=date(2024, 1, 1)):
    return SimpleNamespace(
        id=uuid.uuid4(),
        employee_id=EMPLOYEE_ID,
        hourly_rate=hourly_rate,
        weekly_hours=weekly_hours,
        start_date=start_date,
    )
