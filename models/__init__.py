"""
SQLAlchemy ORM models for database tables.

This package defines the warehouse schema using SQLAlchemy:

Models:
    base: Base declarative class and shared enums (AuditPhase, AuditStatus)
    config_entry: public.etl_config key-value store for source base paths
    load_job: bronze.load_jobs registry (destination table -> source file)
    load_log: bronze.load_log append-only audit trail
    bronze_tables: raw bronze destination tables (CRM and ERP)

Database Schema:
    All tables hang off Base.metadata and are fully schema-qualified, so
    nothing depends on a session search path. Importing this package
    registers every table, which is what create_all relies on.

Usage:
    from models import LoadJob, LoadLogEntry, ConfigEntry
    from models.base import AuditPhase, AuditStatus

Example:
    # Register a job by hand
    job = LoadJob(
        table_name="bronze.crm_customer_info",
        file_path="/data/source_crm/customer_info.csv",
        load_order=10,
    )
    session.add(job)
    await session.commit()
"""

from models.base import Base, AuditPhase, AuditStatus, BRONZE_SCHEMA, CONFIG_SCHEMA
from models.config_entry import ConfigEntry
from models.load_job import LoadJob
from models.load_log import LoadLogEntry
from models.bronze_tables import BRONZE_TABLES

__all__ = [
    "Base",
    "AuditPhase",
    "AuditStatus",
    "BRONZE_SCHEMA",
    "CONFIG_SCHEMA",
    "ConfigEntry",
    "LoadJob",
    "LoadLogEntry",
    "BRONZE_TABLES",
]
