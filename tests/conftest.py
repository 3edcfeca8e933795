import asyncio

import pytest
from fastapi.testclient import TestClient

from foodcourt.core.config import Settings
from foodcourt.database import DataStore
from foodcourt.main import create_app
from foodcourt.models import MenuItem, Vendor
from foodcourt.seed import seed


def make_settings(database_url: str, **overrides) -> Settings:
    values = {
        "database_url": database_url,
        "db_health_check_interval": 0,
        "db_connect_timeout": 2,
    }
    values.update(overrides)
    return Settings(**values)


async def _seed_with_extras(settings: Settings) -> None:
    store = DataStore(settings)
    try:
        await seed(store)
        async with store.session() as db:
            db.add(Vendor(id=4, name="Closed Stall", cuisine="Snacks", rating=3.9, is_active=False))
            db.add(MenuItem(id=104, vendor_id=1, name="Seasonal Shake", price=90.0,
                            category="Drinks", is_available=False))
            await db.commit()
    finally:
        await store.dispose()


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'foodcourt.db'}"


@pytest.fixture
def unreachable_db_url(tmp_path):
    # The parent directory does not exist, so SQLite cannot open the file
    return f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'foodcourt.db'}"


@pytest.fixture
def sql_settings(db_url):
    settings = make_settings(db_url)
    asyncio.run(_seed_with_extras(settings))
    return settings


@pytest.fixture
def sql_app(sql_settings):
    return create_app(sql_settings)


@pytest.fixture
def sql_client(sql_app):
    with TestClient(sql_app) as client:
        yield client


@pytest.fixture
def mock_app(unreachable_db_url):
    return create_app(make_settings(unreachable_db_url))


@pytest.fixture
def mock_client(mock_app):
    with TestClient(mock_app) as client:
        yield client


@pytest.fixture(params=["database", "mock"])
def client(request):
    """Runs the test once against the database and once in fallback mode."""
    return request.getfixturevalue("sql_client" if request.param == "database" else "mock_client")
