"""
Key-value configuration store backed by public.etl_config
"""

from typing import Dict, Mapping, Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from core.database import upsert_insert
from core.exceptions import ConfigurationError, RegistryError
from models.config_entry import ConfigEntry, BASE_PATH_CRM_KEY, BASE_PATH_ERP_KEY

logger = logging.getLogger(__name__)

# Source system prefix -> config key holding its base directory
SOURCE_PATH_KEYS = {
    "crm": BASE_PATH_CRM_KEY,
    "erp": BASE_PATH_ERP_KEY,
}


class ConfigStore:
    """
    Read and write environment-specific configuration entries.

    The store itself has no behaviour beyond get/set; the job registry is
    its only consumer and requires both base path keys to be present.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get(self, key: str) -> Optional[str]:
        """Return the value stored under key, or None when absent"""
        result = await self.db.execute(
            select(ConfigEntry.config_value).where(ConfigEntry.config_key == key)
        )
        return result.scalar_one_or_none()

    async def set(self, key: str, value: str) -> None:
        """Insert or overwrite a configuration entry"""
        stmt = upsert_insert(self.db, ConfigEntry).values(config_key=key, config_value=value)
        stmt = stmt.on_conflict_do_update(
            index_elements=["config_key"],
            set_={"config_value": stmt.excluded.config_value}
        )
        await self._execute_and_commit(stmt)
        logger.info(f"Config entry {key} set")

    async def seed_missing(self, values: Mapping[str, Optional[str]]) -> int:
        """
        Insert entries that are not present yet; existing values are kept.

        None values are skipped so unset settings never overwrite anything.

        Returns:
            Number of keys submitted for seeding
        """
        rows = [
            {"config_key": key, "config_value": value}
            for key, value in values.items()
            if value is not None
        ]
        if not rows:
            return 0

        stmt = upsert_insert(self.db, ConfigEntry).values(rows)
        stmt = stmt.on_conflict_do_nothing(index_elements=["config_key"])
        await self._execute_and_commit(stmt)
        logger.info(f"Seeded config keys (missing only): {', '.join(r['config_key'] for r in rows)}")
        return len(rows)

    async def base_paths(self) -> Dict[str, str]:
        """
        Resolve the base path of every source system.

        Returns:
            Mapping of source prefix ("crm", "erp") to base directory

        Raises:
            ConfigurationError: If any base path key is missing or empty
        """
        result = await self.db.execute(
            select(ConfigEntry.config_key, ConfigEntry.config_value).where(
                ConfigEntry.config_key.in_(SOURCE_PATH_KEYS.values())
            )
        )
        stored = {key: value for key, value in result.all()}

        missing = [
            key for key in SOURCE_PATH_KEYS.values()
            if not (stored.get(key) or "").strip()
        ]
        if missing:
            raise ConfigurationError(
                "Missing base path configuration in public.etl_config",
                context={"missing_keys": ", ".join(missing)}
            )

        return {source: stored[key].strip() for source, key in SOURCE_PATH_KEYS.items()}

    async def _execute_and_commit(self, stmt) -> None:
        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise RegistryError(
                "Failed to write configuration",
                context={"table_name": "public.etl_config"},
                original_exception=e
            )
