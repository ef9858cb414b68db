"""
Pytest configuration and fixtures

Tests run against SQLite files through aiosqlite. The bronze and public
schemas are separate database files ATTACHed on every connection, so
schema-qualified names behave as they do on PostgreSQL.
"""

import csv
import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool
from models import Base
from core.database import make_session_maker
from ingestion.config_store import ConfigStore
from ingestion.registry import JobRegistry
from models.config_entry import BASE_PATH_CRM_KEY, BASE_PATH_ERP_KEY
from schemas.jobs import LoadJobSpec

ATTACHED_SCHEMAS = ("bronze", "public")


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Create test database engine with all tables"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'warehouse.db'}",
        echo=False,
        poolclass=NullPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _attach_schemas(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        for schema in ATTACHED_SCHEMAS:
            cursor.execute(f"ATTACH DATABASE '{tmp_path / schema}.db' AS {schema}")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(test_engine):
    return make_session_maker(test_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker):
    """Create database session for tests"""
    async with session_maker() as session:
        yield session


@pytest.fixture
def source_dirs(tmp_path):
    """CRM and ERP source directories"""
    crm = tmp_path / "source_crm"
    erp = tmp_path / "source_erp"
    crm.mkdir()
    erp.mkdir()
    return {"crm": crm, "erp": erp}


@pytest.fixture
def write_csv():
    """Write a CSV file with a header row"""
    def _write(path, header, rows):
        with open(path, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow(header)
            writer.writerows(rows)
        return path
    return _write


@pytest_asyncio.fixture
async def configured_paths(db_session, source_dirs):
    """Seed both base paths into public.etl_config"""
    await ConfigStore(db_session).seed_missing({
        BASE_PATH_CRM_KEY: str(source_dirs["crm"]),
        BASE_PATH_ERP_KEY: str(source_dirs["erp"]),
    })
    return source_dirs


@pytest.fixture
def register_jobs(db_session):
    """Register jobs directly in bronze.load_jobs"""
    async def _register(*jobs):
        registry = JobRegistry(db_session)
        await registry.upsert([LoadJobSpec(**job) for job in jobs])
    return _register


@pytest.fixture
def location_rows():
    return [
        ["AW00011000", "Australia"],
        ["AW00011001", "Australia"],
        ["AW00011002", "Germany"],
    ]


@pytest.fixture
def category_rows():
    return [
        ["AC_BR", "Accessories", "Bike Racks", "Yes"],
        ["AC_BS", "Accessories", "Bike Stands", "No"],
    ]
