import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from core.config import settings
from core.database import engine
from core.exceptions import WarehouseError
from ingestion.runner import BronzeBatchRunner

logger = logging.getLogger(__name__)

class BronzeScheduler:
    def __init__(self, interval_minutes: int = None):
        self.scheduler = AsyncIOScheduler()
        self.engine = engine
        self.interval_minutes = interval_minutes or settings.BATCH_INTERVAL_MINUTES
        self.runner = BronzeBatchRunner(self.engine)

    async def run_batch_job(self):
        """Job to run one bronze batch load"""
        logger.info("Scheduler: Starting bronze batch")
        try:
            run_id = await self.runner.run()
            logger.info(f"Scheduler: Bronze batch {run_id} done")
        except WarehouseError as e:
            # Already recorded in bronze.load_log; keep the scheduler alive
            logger.error(f"Scheduler: Bronze batch failed - {e}")

    def start(self):
        """Start the scheduler"""
        self.scheduler.add_job(
            self.run_batch_job,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id="bronze_batch",
            replace_existing=True,
            max_instances=1,
            coalesce=True
        )
        self.scheduler.start()
        logger.info(f"Bronze scheduler started (every {self.interval_minutes} minutes)")

    async def stop(self):
        self.scheduler.shutdown()
        await self.engine.dispose()
        logger.info("Bronze scheduler stopped")
