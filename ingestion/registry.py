"""
Job registry: discovers bronze tables, resolves their source files and
keeps bronze.load_jobs converged with the configuration store.
"""

from itertools import groupby
from typing import Dict, Iterable, List, Mapping, Sequence
from sqlalchemy import inspect, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from core.database import upsert_insert
from core.exceptions import InvalidIdentifierError, RegistryError
from core.identifiers import QualifiedTableName
from ingestion.config_store import ConfigStore
from models.base import BRONZE_SCHEMA
from models.load_job import LoadJob
from models.load_log import LoadLogEntry
from schemas.jobs import LoadJobSpec

logger = logging.getLogger(__name__)

# Source systems in load priority order; CRM jobs always run before ERP jobs
SOURCE_SYSTEMS = ("crm", "erp")
ORDER_BLOCK_SIZE = 1000

# Bookkeeping tables living next to the data tables
_INTERNAL_TABLES = {LoadJob.__tablename__, LoadLogEntry.__tablename__}


def split_table_name(table_name: str):
    """
    Decompose ``bronze.<source>_<dataset>`` into (source, dataset).

    Returns None when the relation name has no source prefix.
    """
    relname = QualifiedTableName.parse(table_name).name
    source, sep, dataset = relname.partition("_")
    if not sep or not dataset:
        return None
    return source, dataset


def resolve_jobs(
    table_names: Iterable[str],
    base_paths: Mapping[str, str],
    source_systems: Sequence[str] = SOURCE_SYSTEMS
) -> List[LoadJobSpec]:
    """
    Map destination tables to load jobs.

    file_path is ``<base path>/<dataset>.csv``. load_order keeps every
    source contiguous (priority * 1000) and orders datasets by name within
    a source. Tables without a known source prefix are skipped.

    Args:
        table_names: Schema-qualified destination tables
        base_paths: Source prefix -> base directory
        source_systems: Source prefixes in priority order

    Returns:
        Job specs sorted by load_order
    """
    parsed = []
    for table_name in table_names:
        try:
            parts = split_table_name(table_name)
        except InvalidIdentifierError:
            logger.warning(f"Skipping {table_name!r}: not a valid table identifier")
            continue
        if parts is None or parts[0] not in base_paths or parts[0] not in source_systems:
            logger.debug(f"Skipping {table_name}: no source base path for it")
            continue
        parsed.append((parts[0], parts[1], str(QualifiedTableName.parse(table_name))))

    priority = {source: index for index, source in enumerate(source_systems)}
    parsed.sort(key=lambda p: (priority[p[0]], p[1]))

    jobs = []
    for source, group in groupby(parsed, key=lambda p: p[0]):
        base = base_paths[source].rstrip("/\\")
        for rank, (_, dataset, table_name) in enumerate(group, start=1):
            jobs.append(
                LoadJobSpec(
                    table_name=table_name,
                    file_path=f"{base}/{dataset}.csv",
                    is_enabled=True,
                    load_order=priority[source] * ORDER_BLOCK_SIZE + rank
                )
            )
    return jobs


class JobRegistry:
    """
    Read and maintain bronze.load_jobs.

    Ensures:
    - One row per destination table (upsert on table_name)
    - Re-seeding converges, it never adds duplicates
    - Seeding writes nothing unless every base path is configured
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.config = ConfigStore(db_session)

    async def discover_tables(self, schema: str = BRONZE_SCHEMA) -> List[str]:
        """List the data tables of a schema, schema-qualified and sorted"""
        def _table_names(sync_session):
            return inspect(sync_session.connection()).get_table_names(schema=schema)

        names = await self.db.run_sync(_table_names)
        return sorted(
            f"{schema}.{name}" for name in names
            if name not in _INTERNAL_TABLES
        )

    async def seed(self) -> List[LoadJobSpec]:
        """
        Populate the registry from discovered tables and configured base paths.

        Raises:
            ConfigurationError: If a base path is missing (nothing is written)
            RegistryError: If the upsert fails (rolled back)
        """
        base_paths = await self.config.base_paths()
        tables = await self.discover_tables()
        jobs = resolve_jobs(tables, base_paths)

        await self.upsert(jobs)
        logger.info(f"Job registry seeded with {len(jobs)} job(s) from {len(tables)} table(s)")
        return jobs

    async def register(self, job: LoadJobSpec) -> None:
        """Insert or overwrite a single job"""
        await self.upsert([job])

    async def upsert(self, jobs: List[LoadJobSpec]) -> int:
        """Upsert jobs in one transaction"""
        if not jobs:
            return 0

        stmt = upsert_insert(self.db, LoadJob).values([
            {
                "table_name": job.table_name,
                "file_path": job.file_path,
                "is_enabled": job.is_enabled,
                "load_order": job.load_order,
            }
            for job in jobs
        ])
        stmt = stmt.on_conflict_do_update(
            index_elements=["table_name"],
            set_={
                "file_path": stmt.excluded.file_path,
                "is_enabled": stmt.excluded.is_enabled,
                "load_order": stmt.excluded.load_order,
            }
        )

        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise RegistryError(
                "Failed to upsert load jobs",
                context={"table_name": "bronze.load_jobs", "jobs": len(jobs)},
                original_exception=e
            )
        return len(jobs)

    async def set_enabled(self, table_name: str, enabled: bool) -> bool:
        """
        Enable or disable a job.

        Returns:
            True if a job was updated
        """
        try:
            table_name = str(QualifiedTableName.parse(table_name))
        except InvalidIdentifierError:
            return False

        result = await self.db.execute(
            update(LoadJob)
            .where(LoadJob.table_name == table_name)
            .values(is_enabled=enabled)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def enabled_jobs(self) -> List[LoadJobSpec]:
        """Enabled jobs in execution order (load_order, then table_name)"""
        result = await self.db.execute(
            select(LoadJob)
            .where(LoadJob.is_enabled.is_(True))
            .order_by(LoadJob.load_order, LoadJob.table_name)
        )
        return [
            LoadJobSpec.model_construct(
                table_name=job.table_name,
                is_enabled=job.is_enabled,
                file_path=job.file_path,
                load_order=job.load_order
            )
            for job in result.scalars().all()
        ]

    async def all_jobs(self) -> Dict[str, LoadJob]:
        """Every registered job keyed by table name"""
        result = await self.db.execute(select(LoadJob).order_by(LoadJob.load_order, LoadJob.table_name))
        return {job.table_name: job for job in result.scalars().all()}
