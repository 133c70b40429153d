import sys
from pathlib import Path

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from typing import AsyncGenerator

import pytest_asyncio
import httpx
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from main import app
from database import build_engine, build_session_factory, init_db
from dependencies import get_storage
from storage import FileStorage

@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    # file-backed so concurrent sessions share one database
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test_files.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()

@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine):
    return build_session_factory(test_engine)

@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()

@pytest_asyncio.fixture(scope="function")
async def storage(tmp_path, session_factory) -> FileStorage:
    file_storage = FileStorage(tmp_path / "uploads", session_factory)
    await file_storage.init()
    return file_storage

@pytest_asyncio.fixture(scope="function")
async def async_client(storage: FileStorage) -> AsyncGenerator[AsyncClient, None]:
    app.dependency_overrides[get_storage] = lambda: storage

    transport = httpx.ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testfts") as client:
        yield client

    app.dependency_overrides.clear()
