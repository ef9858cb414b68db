"""
Bronze layer setup: schema provisioning, table creation, configuration
seeding and job registration.
"""

from typing import Mapping, Optional
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncEngine
import logging

from core.config import settings
from core.database import make_session_maker
from core.exceptions import PrerequisiteError
from ingestion.config_store import ConfigStore
from ingestion.registry import JobRegistry
from models import Base, ConfigEntry, LoadLogEntry, BRONZE_SCHEMA
from models.config_entry import BASE_PATH_CRM_KEY, BASE_PATH_ERP_KEY

logger = logging.getLogger(__name__)

# Medallion layers; only bronze has tables
MEDALLION_SCHEMAS = ("bronze", "silver", "gold")


class BronzeSetup:
    """
    Idempotent provisioning of everything the batch loader depends on.

    Order:
    1. create_schemas  - bronze/silver/gold (PostgreSQL)
    2. create_tables   - etl_config, load_jobs, load_log, bronze data tables
    3. seed_config     - base paths, missing keys only
    4. orchestrate     - prerequisite checks, then registry seeding
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_maker = make_session_maker(engine)

    async def create_schemas(self) -> None:
        """Create the medallion schemas if missing (no-op outside PostgreSQL)"""
        if self.engine.dialect.name != "postgresql":
            logger.info(f"Schemas are not created on {self.engine.dialect.name}; skipping")
            return

        async with self.engine.begin() as conn:
            for schema in MEDALLION_SCHEMAS:
                quoted = conn.dialect.identifier_preparer.quote_schema(schema)
                await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {quoted}"))
        logger.info(f"Schemas ensured: {', '.join(MEDALLION_SCHEMAS)}")

    async def create_tables(self) -> None:
        """Create all tables defined in models"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Warehouse tables created")

    async def seed_config(self, base_paths: Optional[Mapping[str, Optional[str]]] = None) -> int:
        """Seed base path keys from settings unless explicit values are given"""
        if base_paths is None:
            base_paths = {
                BASE_PATH_CRM_KEY: settings.BASE_PATH_CRM,
                BASE_PATH_ERP_KEY: settings.BASE_PATH_ERP,
            }
        async with self.session_maker() as session:
            return await ConfigStore(session).seed_missing(base_paths)

    async def check_prerequisites(self) -> None:
        """
        Verify the objects the registry and the loader rely on.

        Raises:
            PrerequisiteError: Naming the first missing schema or table
        """
        config_table = ConfigEntry.__table__
        log_table = LoadLogEntry.__table__

        def _missing(sync_conn):
            inspector = inspect(sync_conn)
            if BRONZE_SCHEMA not in inspector.get_schema_names():
                return f"schema {BRONZE_SCHEMA}"
            if not inspector.has_table(config_table.name, schema=config_table.schema):
                return config_table.fullname
            if not inspector.has_table(log_table.name, schema=log_table.schema):
                return log_table.fullname
            return None

        async with self.engine.connect() as conn:
            missing = await conn.run_sync(_missing)

        if missing:
            raise PrerequisiteError(
                f"{missing} does not exist; run the setup first",
                context={"missing": missing}
            )

    async def orchestrate(self) -> int:
        """
        Validate prerequisites and seed the job registry.

        Returns:
            Number of jobs registered in bronze.load_jobs
        """
        await self.check_prerequisites()

        async with self.session_maker() as session:
            registry = JobRegistry(session)
            await registry.seed()
            total = len(await registry.all_jobs())

        logger.info(f"Bronze layer setup complete: bronze.load_jobs holds {total} job(s)")
        return total

    async def run_complete_setup(self, base_paths: Optional[Mapping[str, Optional[str]]] = None) -> int:
        """Provision, seed configuration and register jobs in one go"""
        await self.create_schemas()
        await self.create_tables()
        await self.seed_config(base_paths)
        return await self.orchestrate()
