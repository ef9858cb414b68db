"""
Audit log writer and reader for bronze.load_log.

Every batch run writes one row per transition: START, VALIDATION, a
TRUNCATE and a LOAD step per job, optional SEPARATORs, and FINISH. Step
rows are inserted when the step begins and completed exactly once, so a
row with no finished_at is a step that never returned.
"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID
from sqlalchemy import select, update, func, case
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
import logging

from core.exceptions import AuditLogError
from models.base import AuditPhase, AuditStatus
from models.load_log import LoadLogEntry
from schemas.audit import AuditEntryRead, RunSummary
from schemas.jobs import LoadJobSpec

logger = logging.getLogger(__name__)

STEP_PHASES = (AuditPhase.TRUNCATE, AuditPhase.LOAD)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def duration_between(started_at: Optional[datetime], finished_at: Optional[datetime]) -> Optional[int]:
    """Whole seconds between two timestamps, None if either is missing"""
    if started_at is None or finished_at is None:
        return None
    return int(round((finished_at - started_at).total_seconds()))


class AuditLogger:
    """
    Append-only writer for one batch run.

    Each write is its own committed transaction, independent of the job
    work being logged. A failed write raises AuditLogError, which the
    batch loader treats as fatal.
    """

    def __init__(self, session_maker: async_sessionmaker, run_id: UUID):
        self.session_maker = session_maker
        self.run_id = run_id

    async def record(
        self,
        phase: AuditPhase,
        status: AuditStatus = AuditStatus.OK,
        table_name: Optional[str] = None,
        file_path: Optional[str] = None,
        started_at: Optional[datetime] = None,
        finished_at: Optional[datetime] = None,
        rows_loaded: Optional[int] = None,
        message: Optional[str] = None
    ) -> int:
        """
        Insert one complete audit row.

        Returns:
            The new row id
        """
        entry = LoadLogEntry(
            run_id=self.run_id,
            phase=phase,
            table_name=table_name,
            file_path=file_path,
            status=status,
            rows_loaded=rows_loaded,
            started_at=started_at or utc_now(),
            finished_at=finished_at,
            duration_seconds=duration_between(started_at, finished_at),
            message=message
        )

        try:
            async with self.session_maker() as session:
                session.add(entry)
                await session.commit()
                return entry.id
        except SQLAlchemyError as e:
            raise AuditLogError(
                "Failed to write load log entry",
                context={"run_id": str(self.run_id), "phase": phase.value, "table_name": table_name},
                original_exception=e
            )

    async def open_step(self, phase: AuditPhase, job: LoadJobSpec) -> Tuple[int, datetime]:
        """Insert the row of a step that is about to start"""
        started_at = utc_now()
        step_id = await self.record(
            phase,
            table_name=job.table_name,
            file_path=job.file_path,
            started_at=started_at
        )
        return step_id, started_at

    async def close_step(
        self,
        step_id: int,
        started_at: datetime,
        rows_loaded: Optional[int] = None
    ) -> None:
        """Complete a step row after success"""
        finished_at = utc_now()
        await self._update(
            step_id,
            finished_at=finished_at,
            duration_seconds=duration_between(started_at, finished_at),
            rows_loaded=rows_loaded
        )

    async def fail_step(
        self,
        step_id: int,
        phase: AuditPhase,
        job: LoadJobSpec,
        started_at: datetime,
        message: str
    ) -> None:
        """
        Mark a step row as failed and append an ERROR-phase row with the
        same detail, so error scans by phase see every failure.
        """
        finished_at = utc_now()
        await self._update(
            step_id,
            status=AuditStatus.ERROR,
            finished_at=finished_at,
            duration_seconds=duration_between(started_at, finished_at),
            message=message
        )
        await self.record(
            AuditPhase.ERROR,
            status=AuditStatus.ERROR,
            table_name=job.table_name,
            file_path=job.file_path,
            started_at=started_at,
            finished_at=finished_at,
            message=f"{phase.value} failed: {message}"
        )

    async def _update(self, step_id: int, **values) -> None:
        try:
            async with self.session_maker() as session:
                await session.execute(
                    update(LoadLogEntry)
                    .where(LoadLogEntry.id == step_id)
                    .values(**values)
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise AuditLogError(
                "Failed to complete load log entry",
                context={"run_id": str(self.run_id), "step_id": step_id},
                original_exception=e
            )


class AuditLogReader:
    """Queries over bronze.load_log for operators and tests"""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def entries_for_run(self, run_id: UUID) -> List[AuditEntryRead]:
        """Every row of a run in write order"""
        result = await self.db.execute(
            select(LoadLogEntry)
            .where(LoadLogEntry.run_id == run_id)
            .order_by(LoadLogEntry.id)
        )
        return [AuditEntryRead.model_validate(row) for row in result.scalars().all()]

    async def failed_steps(self, run_id: UUID) -> List[AuditEntryRead]:
        """TRUNCATE/LOAD rows of a run that ended in ERROR"""
        result = await self.db.execute(
            select(LoadLogEntry)
            .where(
                LoadLogEntry.run_id == run_id,
                LoadLogEntry.phase.in_(STEP_PHASES),
                LoadLogEntry.status == AuditStatus.ERROR
            )
            .order_by(LoadLogEntry.id)
        )
        return [AuditEntryRead.model_validate(row) for row in result.scalars().all()]

    async def table_results(self, run_id: UUID) -> List[AuditEntryRead]:
        """Successful LOAD rows of a run with their row counts"""
        result = await self.db.execute(
            select(LoadLogEntry)
            .where(
                LoadLogEntry.run_id == run_id,
                LoadLogEntry.phase == AuditPhase.LOAD,
                LoadLogEntry.status == AuditStatus.OK
            )
            .order_by(LoadLogEntry.table_name)
        )
        return [AuditEntryRead.model_validate(row) for row in result.scalars().all()]

    async def latest_run_id(self) -> Optional[UUID]:
        """run_id of the most recently started batch"""
        result = await self.db.execute(
            select(LoadLogEntry.run_id)
            .where(LoadLogEntry.phase == AuditPhase.BATCH_START)
            .order_by(LoadLogEntry.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def run_summary(self, run_id: UUID) -> Optional[RunSummary]:
        """
        Summarize a run from its rows.

        status is taken from the FINISH row; a run without one was aborted
        by a fatal error and reports ERROR.
        """
        entries = await self.entries_for_run(run_id)
        if not entries:
            return None

        start = next((e for e in entries if e.phase == AuditPhase.BATCH_START), None)
        finish = next((e for e in entries if e.phase == AuditPhase.BATCH_FINISH), None)
        loads = [e for e in entries if e.phase == AuditPhase.LOAD and e.status == AuditStatus.OK]
        failed = [e for e in entries if e.phase in STEP_PHASES and e.status == AuditStatus.ERROR]

        return RunSummary(
            run_id=run_id,
            status=finish.status if finish else AuditStatus.ERROR,
            started_at=start.started_at if start else entries[0].started_at,
            finished_at=finish.finished_at if finish else None,
            duration_seconds=finish.duration_seconds if finish else None,
            total_rows_loaded=sum(e.rows_loaded or 0 for e in loads),
            had_errors=any(e.status == AuditStatus.ERROR for e in entries),
            tables_loaded=[e.table_name for e in loads],
            tables_failed=[e.table_name for e in failed],
            message=finish.message if finish else None
        )

    async def recent_runs(self, limit: int = 5) -> List[RunSummary]:
        """One aggregated row per run, newest first"""
        had_errors = func.max(case((LoadLogEntry.status == AuditStatus.ERROR, 1), else_=0))
        rows_loaded = func.sum(
            case((LoadLogEntry.phase == AuditPhase.LOAD, LoadLogEntry.rows_loaded), else_=0)
        )
        finished = func.max(
            case((LoadLogEntry.phase == AuditPhase.BATCH_FINISH, 1), else_=0)
        )

        result = await self.db.execute(
            select(
                LoadLogEntry.run_id,
                func.min(LoadLogEntry.started_at),
                func.max(LoadLogEntry.finished_at),
                rows_loaded,
                had_errors,
                finished
            )
            .group_by(LoadLogEntry.run_id)
            .order_by(func.min(LoadLogEntry.id).desc())
            .limit(limit)
        )

        return [
            RunSummary(
                run_id=run_id,
                status=AuditStatus.OK if (completed and not errors) else AuditStatus.ERROR,
                started_at=started_at,
                finished_at=finished_at,
                total_rows_loaded=int(total or 0),
                had_errors=bool(errors)
            )
            for run_id, started_at, finished_at, total, errors, completed in result.all()
        ]
