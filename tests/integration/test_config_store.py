"""
Integration tests for the configuration store
"""

import pytest
from core.exceptions import ConfigurationError
from ingestion.config_store import ConfigStore
from models.config_entry import BASE_PATH_CRM_KEY, BASE_PATH_ERP_KEY


class TestConfigStore:
    """Test public.etl_config access"""
    
    @pytest.mark.asyncio
    async def test_get_missing_key(self, db_session):
        assert await ConfigStore(db_session).get("base_path_crm") is None
    
    @pytest.mark.asyncio
    async def test_set_and_overwrite(self, db_session):
        store = ConfigStore(db_session)
        
        await store.set(BASE_PATH_CRM_KEY, "/data/source_crm")
        await store.set(BASE_PATH_CRM_KEY, "/mnt/source_crm")
        
        assert await store.get(BASE_PATH_CRM_KEY) == "/mnt/source_crm"
    
    @pytest.mark.asyncio
    async def test_seed_missing_preserves_existing_values(self, db_session):
        store = ConfigStore(db_session)
        await store.set(BASE_PATH_CRM_KEY, "/operator/choice")
        
        await store.seed_missing({
            BASE_PATH_CRM_KEY: "/default/crm",
            BASE_PATH_ERP_KEY: "/default/erp",
            "silver_load_mode": None,
        })
        
        assert await store.get(BASE_PATH_CRM_KEY) == "/operator/choice"
        assert await store.get(BASE_PATH_ERP_KEY) == "/default/erp"
        assert await store.get("silver_load_mode") is None
    
    @pytest.mark.asyncio
    async def test_base_paths(self, db_session, configured_paths):
        paths = await ConfigStore(db_session).base_paths()
        
        assert paths == {
            "crm": str(configured_paths["crm"]),
            "erp": str(configured_paths["erp"]),
        }
    
    @pytest.mark.asyncio
    async def test_base_paths_missing_key(self, db_session):
        store = ConfigStore(db_session)
        await store.set(BASE_PATH_CRM_KEY, "/data/source_crm")
        
        with pytest.raises(ConfigurationError) as exc_info:
            await store.base_paths()
        
        assert BASE_PATH_ERP_KEY in exc_info.value.context["missing_keys"]
        assert BASE_PATH_CRM_KEY not in exc_info.value.context["missing_keys"]
    
    @pytest.mark.asyncio
    async def test_base_paths_empty_value_counts_as_missing(self, db_session):
        store = ConfigStore(db_session)
        await store.set(BASE_PATH_CRM_KEY, "/data/source_crm")
        await store.set(BASE_PATH_ERP_KEY, "  ")
        
        with pytest.raises(ConfigurationError):
            await store.base_paths()
