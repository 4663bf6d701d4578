from dataclasses import dataclass

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardcatalog.db.database import enable_sqlite_foreign_keys, get_session
from cardcatalog.db.taxonomy import create_sub_type, create_type
from cardcatalog.main import app
from cardcatalog.models.db import Base


@dataclass(frozen=True)
class Taxonomy:
    """Ids of a small committed taxonomy shared by tests."""

    monster_id: str
    effect_monster_id: str
    normal_monster_id: str
    spell_id: str
    normal_spell_id: str


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory) -> AsyncSession:
    """Provide a database session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def taxonomy(session_factory) -> Taxonomy:
    """Seed Monster/Spell types with a few subtypes and commit them."""
    async with session_factory() as session:
        monster = await create_type(session, "Monster")
        spell = await create_type(session, "Spell")
        effect = await create_sub_type(session, "Effect Monster", monster.id)
        normal = await create_sub_type(session, "Normal Monster", monster.id)
        normal_spell = await create_sub_type(session, "Normal Spell", spell.id)
        ids = Taxonomy(
            monster_id=monster.id,
            effect_monster_id=effect.id,
            normal_monster_id=normal.id,
            spell_id=spell.id,
            normal_spell_id=normal_spell.id,
        )
        await session.commit()
    return ids


@pytest.fixture
async def client(session_factory):
    """Provide an async test client with overridden database session."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
