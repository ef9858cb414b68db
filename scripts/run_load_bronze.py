"""
Run one bronze batch load (no arguments; jobs come from bronze.load_jobs)
"""

import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.database import engine, make_session_maker
from core.exceptions import WarehouseError
from core.logging import setup_logging
from ingestion.audit import AuditLogReader
from ingestion.runner import BronzeBatchRunner

logger = logging.getLogger(__name__)


async def run_load_bronze():
    """Run the bronze batch and report its summary"""
    
    try:
        run_id = await BronzeBatchRunner(engine).run()
        
        async with make_session_maker(engine)() as session:
            summary = await AuditLogReader(session).run_summary(run_id)
        
        logger.info(
            f"Run {run_id}: {summary.status.value} - "
            f"Loaded={summary.total_rows_loaded} rows, "
            f"Tables OK={len(summary.tables_loaded)}, Failed={len(summary.tables_failed)}"
        )
        for table_name in summary.tables_failed:
            logger.warning(f"Failed table: {table_name}")
            
    except WarehouseError as e:
        logger.error(f"Bronze batch failed: {e}")
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    asyncio.run(run_load_bronze())
