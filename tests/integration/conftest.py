import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_reward_provider, get_unit_of_work
from tests.fixtures.api_helpers import SUPERADMIN_EMAIL
from tests.fixtures.fake_provider import FakeRewardProvider


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest.fixture
def provider():
    return FakeRewardProvider()


@pytest.fixture(autouse=True)
def superadmin_allowlist(monkeypatch):
    monkeypatch.setattr(ApplicationConfig, "PLATFORM_SUPERADMIN_EMAILS", [SUPERADMIN_EMAIL])
    monkeypatch.setattr(ApplicationConfig, "PLATFORM_SUPERADMIN_AUTH_IDS", [])


@pytest_asyncio.fixture
async def client(db_session, provider):
    from src.api.app import create_app

    app = create_app(ApplicationConfig)

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
    app.dependency_overrides[get_reward_provider] = lambda: provider

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
