"""Shared fixtures: a throwaway SQLite database per test."""

import pytest
import pytest_asyncio

from database import build_engine, build_session_factory, init_db
from ledger import SlotLocks
from models import Professional


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'scheduling.db'}"


@pytest_asyncio.fixture
async def engine(database_url):
    engine = build_engine(database_url)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return build_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def locks():
    return SlotLocks()


@pytest.fixture
def make_professional(session_factory):
    """Factory inserting a professional; returns its id."""

    async def add_professional(**overrides) -> int:
        fields = {
            "first_name": "Grace",
            "last_name": "Hopper",
            "specialization": "Cardiology",
            "availability_start": "09:00:00",
            "availability_end": "10:00:00",
        }
        fields.update(overrides)
        async with session_factory() as session:
            professional = Professional(**fields)
            session.add(professional)
            await session.commit()
            await session.refresh(professional)
            return professional.id

    return add_professional


@pytest_asyncio.fixture
async def professional_id(make_professional):
    """Professional working 09:00-10:00, grid [09:00, 09:30]."""
    return await make_professional()
