# ============================================================================
# File: ingestion/runner.py
# Description: Bronze batch loader with per-job isolation and audit logging
# ============================================================================
"""
Bronze batch runner - truncates and reloads every enabled bronze table.

This module provides the one procedural piece of the warehouse:
- Reads enabled jobs from bronze.load_jobs in load_order
- TRUNCATE then bulk-load each destination table from its CSV file
- Per-job failures are logged and the batch moves on (no retries)
- Every transition is written to bronze.load_log under one run_id
- Failures outside a job are logged best-effort and raised to the caller
"""

from typing import List, Optional
from uuid import UUID, uuid4
from sqlalchemy.ext.asyncio import AsyncEngine
import logging

from core.config import settings
from core.database import make_session_maker
from core.exceptions import WarehouseError, LoadError, BatchLoadError
from ingestion.audit import AuditLogger, utc_now
from ingestion.loaders.table_loader import TableLoader
from ingestion.registry import JobRegistry
from models.base import AuditPhase, AuditStatus
from schemas.jobs import LoadJobSpec

logger = logging.getLogger(__name__)


class BronzeBatchRunner:
    """
    Bronze layer batch loader

    Responsibilities:
    - Generate a run_id per invocation
    - Preflight: count enabled jobs, exit cleanly when there are none
    - Run TRUNCATE -> LOAD per job strictly in sequence
    - Skip LOAD when TRUNCATE fails
    - Record FINISH with ERROR status if any job failed
    """

    def __init__(
        self,
        engine: AsyncEngine,
        loader: Optional[TableLoader] = None,
        write_separators: Optional[bool] = None
    ):
        self.engine = engine
        self.session_maker = make_session_maker(engine)
        self.loader = loader or TableLoader(engine)
        self.write_separators = (
            settings.AUDIT_SEPARATORS if write_separators is None else write_separators
        )

    async def run(self) -> UUID:
        """
        Run one full bronze load.

        Returns:
            The run_id correlating every load log row of this run. Whether
            jobs failed is recorded in the log (FINISH status), not returned.

        Raises:
            BatchLoadError: Unexpected failure outside a job (wrapped)
            WarehouseError: Typed fatal failure, e.g. AuditLogError
        """
        run_id = uuid4()
        audit = AuditLogger(self.session_maker, run_id)
        batch_started_at = utc_now()
        logger.info(f"Bronze batch {run_id} starting")

        try:
            # --------------------------------------------------
            # START
            # --------------------------------------------------
            await audit.record(
                AuditPhase.BATCH_START,
                started_at=batch_started_at,
                message="Bronze batch load started"
            )

            # --------------------------------------------------
            # PREFLIGHT VALIDATION
            # --------------------------------------------------
            jobs = await self._enabled_jobs()
            await audit.record(
                AuditPhase.VALIDATION,
                started_at=utc_now(),
                finished_at=utc_now(),
                message=f"{len(jobs)} enabled job(s)"
            )

            if not jobs:
                logger.warning("No enabled jobs in bronze.load_jobs; nothing to load")
                await audit.record(
                    AuditPhase.BATCH_FINISH,
                    started_at=batch_started_at,
                    finished_at=utc_now(),
                    message="No enabled jobs, 0 jobs executed"
                )
                return run_id

            # --------------------------------------------------
            # PER-JOB TRUNCATE -> LOAD
            # --------------------------------------------------
            failed_tables: List[str] = []
            rows_total = 0

            for job in jobs:
                rows_loaded = await self._run_job(audit, job)
                if rows_loaded is None:
                    failed_tables.append(job.table_name)
                else:
                    rows_total += rows_loaded

                if self.write_separators:
                    await audit.record(AuditPhase.SEPARATOR, table_name=job.table_name)

            # --------------------------------------------------
            # FINISH
            # --------------------------------------------------
            if failed_tables:
                status = AuditStatus.ERROR
                message = f"Completed with errors: {len(failed_tables)} of {len(jobs)} job(s) failed ({', '.join(failed_tables)})"
            else:
                status = AuditStatus.OK
                message = f"{len(jobs)} job(s) loaded, {rows_total} rows"

            await audit.record(
                AuditPhase.BATCH_FINISH,
                status=status,
                started_at=batch_started_at,
                finished_at=utc_now(),
                message=message
            )

            logger.info(f"Bronze batch {run_id} finished: {status.value} - {message}")
            return run_id

        except WarehouseError as e:
            logger.error(
                f"Bronze batch {run_id} aborted: {e.message}",
                extra={"error_context": e.to_dict()}
            )
            await self._record_fatal(audit, batch_started_at, e)
            raise

        except Exception as e:
            logger.exception(f"Unexpected error in bronze batch {run_id}")
            await self._record_fatal(audit, batch_started_at, e)
            raise BatchLoadError(
                "Unexpected error in bronze batch load",
                context={"run_id": str(run_id)},
                original_exception=e
            )

    async def _enabled_jobs(self) -> List[LoadJobSpec]:
        async with self.session_maker() as session:
            return await JobRegistry(session).enabled_jobs()

    async def _run_job(self, audit: AuditLogger, job: LoadJobSpec) -> Optional[int]:
        """
        TRUNCATE then LOAD one job.

        Audit writes stay outside the try blocks: a log failure is fatal,
        only LoadErrors are contained here.

        Returns:
            Rows loaded, or None if the job failed
        """
        step_id, started_at = await audit.open_step(AuditPhase.TRUNCATE, job)
        try:
            await self.loader.truncate(job.table_name)
        except LoadError as e:
            logger.error(f"TRUNCATE failed for {job.table_name}, skipping load: {e.message}")
            await audit.fail_step(step_id, AuditPhase.TRUNCATE, job, started_at, e.message)
            return None
        await audit.close_step(step_id, started_at)

        step_id, started_at = await audit.open_step(AuditPhase.LOAD, job)
        try:
            rows_loaded = await self.loader.copy_csv(job.table_name, job.file_path)
        except LoadError as e:
            logger.error(f"LOAD failed for {job.table_name}: {e.message}")
            await audit.fail_step(step_id, AuditPhase.LOAD, job, started_at, e.message)
            return None
        await audit.close_step(step_id, started_at, rows_loaded=rows_loaded)

        return rows_loaded

    async def _record_fatal(self, audit: AuditLogger, batch_started_at, error: Exception) -> None:
        """Best-effort ERROR row; the original error is what propagates"""
        message = error.message if isinstance(error, WarehouseError) else str(error)
        try:
            await audit.record(
                AuditPhase.ERROR,
                status=AuditStatus.ERROR,
                started_at=batch_started_at,
                finished_at=utc_now(),
                message=message or type(error).__name__
            )
        except Exception as log_error:
            logger.error(f"Could not record fatal error for run {audit.run_id}: {log_error}")
