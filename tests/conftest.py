import os
import tempfile

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from referee.config import GameConfig
from referee.database import create_engine, get_db, init_db
from referee.dependencies import get_game_context
from referee.main import app
from referee.models.base import Base
from referee.services.actions import GameContext

TERRITORIES = [
    {"abbr": "CA", "name": "California", "aliases": ["Cali"], "neighbors": ["NV", "OR", "AZ"]},
    {"abbr": "NV", "name": "Nevada", "neighbors": ["CA", "OR", "UT", "AZ"]},
    {"abbr": "OR", "name": "Oregon", "neighbors": ["CA", "NV"]},
    {"abbr": "AZ", "name": "Arizona", "neighbors": ["CA", "NV", "UT"]},
    {"abbr": "UT", "name": "Utah", "neighbors": ["NV", "AZ"]},
]


def make_config(**overrides) -> GameConfig:
    data = {
        "initialArmies": 3,
        "maxArmiesPerTerritory": 5,
        "unclaimedTerritoriesHave1Army": False,
        "territories": TERRITORIES,
    }
    data.update(overrides)
    return GameConfig.model_validate(data)


def make_context(rng=None, **overrides) -> GameContext:
    kwargs = {"rng": rng} if rng is not None else {}
    return GameContext.from_config(make_config(**overrides), **kwargs)


@pytest.fixture
async def db_engine():
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(db_fd)
    engine = create_engine(f"sqlite+aiosqlite:///{db_path}", connect_args={"check_same_thread": False})
    await init_db(engine)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
async def db_session(db_engine) -> AsyncSession:
    session_factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def ctx() -> GameContext:
    return make_context()


@pytest.fixture
async def db_client(db_session: AsyncSession, ctx: GameContext) -> AsyncClient:
    """HTTP client with the DB and game context overridden for tests."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_game_context] = lambda: ctx
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_ctx():
    """Factory for game contexts with config overrides, e.g. make_ctx(FixedRoll(1), initialArmies=1)."""
    return make_context


@pytest.fixture
def make_game_config():
    """Factory for validated game configs over the test map."""
    return make_config


@pytest.fixture
def territories() -> list[dict]:
    return [dict(t) for t in TERRITORIES]
