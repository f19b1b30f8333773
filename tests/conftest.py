"""
Shared fixtures: a fresh SQLite database per test and repositories bound to it.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from portal.infrastructure.local.achievement_list_repository import SqliteAchievementListRepository
from portal.infrastructure.local.achievement_repository import SqliteAchievementRepository
from portal.infrastructure.local.api_key_repository import SqliteApiKeyRepository
from portal.infrastructure.local.app_repository import SqliteAppRepository
from portal.infrastructure.local.database import init_db
from portal.infrastructure.local.player_repository import SqlitePlayerRepository
from portal.models.achievement_list import AchievementListCreate
from portal.models.app import AppCreate


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def app_repo(session_factory):
    return SqliteAppRepository(session_factory=session_factory)


@pytest.fixture
def list_repo(session_factory):
    return SqliteAchievementListRepository(session_factory=session_factory)


@pytest.fixture
def achievement_repo(session_factory):
    return SqliteAchievementRepository(session_factory=session_factory)


@pytest.fixture
def player_repo(session_factory):
    return SqlitePlayerRepository(session_factory=session_factory)


@pytest.fixture
def api_key_repo(session_factory):
    return SqliteApiKeyRepository(session_factory=session_factory)


@pytest_asyncio.fixture
async def game_app(app_repo):
    return await app_repo.create(AppCreate(title="Space Miner", description="Mining game"))


@pytest_asyncio.fixture
async def achievement_list(list_repo, game_app):
    return await list_repo.create(
        AchievementListCreate(app_id=game_app.id, title="Main", description="Main list")
    )
