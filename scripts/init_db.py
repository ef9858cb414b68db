import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.database import engine
from core.exceptions import WarehouseError
from core.logging import setup_logging
from ingestion.setup import BronzeSetup

logger = logging.getLogger(__name__)

async def init_database():
    logger.info("Connecting to database...")
    try:
        setup = BronzeSetup(engine)
        total = await setup.run_complete_setup()
        logger.info(f"Warehouse initialised, {total} bronze job(s) registered.")
    except WarehouseError as e:
        logger.error(f"Setup failed: {e}")
        sys.exit(1)
    finally:
        await engine.dispose()

if __name__ == "__main__":
    setup_logging()
    asyncio.run(init_database())
