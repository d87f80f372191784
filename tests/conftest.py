"""
Test configuration and fixtures for the Site Scraper API.

Environment variables are set before the application is imported so the
module-level settings pick up the mock fetch backend and a throwaway database.
"""

import os
import tempfile
from typing import Generator

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

load_dotenv()

os.environ["FETCH_BACKEND"] = "mock"
os.environ["OPENAI_API_KEY"] = ""
os.environ["APP_NAME"] = "Site Scraper"

test_db_url = os.getenv("TEST_DATABASE_URL")
if test_db_url:
    if "postgresql://" in test_db_url and "asyncpg" not in test_db_url:
        test_db_url = test_db_url.replace("postgresql://", "postgresql+asyncpg://")
    os.environ["DATABASE_URL"] = test_db_url
else:
    test_db_path = os.path.join(tempfile.mkdtemp(), "test_site_scraper.db")
    os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{test_db_path}"


@pytest.fixture(scope="session")
def test_app():
    """Create FastAPI test application."""
    from app.main import app

    return app


@pytest.fixture(scope="function")
def client(test_app) -> Generator[TestClient, None, None]:
    """
    Test client with the application lifespan running, so tables exist and
    ``app.state.fetcher`` is the mock fetcher.
    """
    with TestClient(test_app) as test_client:
        yield test_client
    test_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def db_session(tmp_path):
    """A session on a fresh SQLite file, isolated from the app database."""
    from app.platform.db.session import init_db

    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'results.db'}", poolclass=NullPool)
    await init_db(bind=engine)

    session_factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()
