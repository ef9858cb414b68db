"""
Bronze layer ingestion components.

This package contains everything that moves source files into the bronze
tables and records what happened:

Modules:
    config_store: Key-value access to public.etl_config (source base paths)
    registry: Job discovery, path resolution and bronze.load_jobs upserts
    audit: bronze.load_log writer (per run) and reader (run summaries)
    runner: Batch loader that truncates and reloads every enabled table
    setup: Schema/table provisioning and registry seeding
    scheduler: APScheduler integration for periodic batch runs

Subpackages:
    loaders: Table truncation and CSV bulk loading

Architecture:
    public.etl_config -> (seed) -> bronze.load_jobs -> runner
    runner -> TRUNCATE/LOAD bronze.<table> and append to bronze.load_log

    Each job is isolated: a failed TRUNCATE skips that job's LOAD, a failed
    LOAD is logged, and the batch always continues to the next job.

Usage:
    from ingestion.runner import BronzeBatchRunner
    from ingestion.audit import AuditLogReader

Example:
    runner = BronzeBatchRunner(engine)
    run_id = await runner.run()

    async with make_session_maker(engine)() as session:
        summary = await AuditLogReader(session).run_summary(run_id)
        print(f"{summary.status.value}: {summary.total_rows_loaded} rows")

Error Handling:
    Per-job failures are LoadError subclasses and never leave the runner.
    Everything else is logged as an ERROR row and raised.
"""

__all__ = [
    "ConfigStore",
    "JobRegistry",
    "AuditLogger",
    "AuditLogReader",
    "TableLoader",
    "BronzeBatchRunner",
    "BronzeSetup",
    "BronzeScheduler",
]
