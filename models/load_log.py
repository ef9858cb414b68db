from sqlalchemy import Column, BigInteger, String, Enum, DateTime, Integer, Text, Index, Uuid
from models.base import (
    Base, BRONZE_SCHEMA, SurrogateKey, AuditPhase, AuditStatus, enum_values
)


class LoadLogEntry(Base):
    """
    Append-only audit trail of bronze batch runs.
    
    Purpose:
    - One row per batch/job/phase transition (START, VALIDATION, TRUNCATE,
      LOAD, SEPARATOR, FINISH, ERROR)
    - run_id correlates every row of one batch invocation
    - Step rows are inserted when a step starts and completed exactly once
      (finished_at, duration_seconds, rows_loaded or error message)
    """
    __tablename__ = "load_log"
    
    id = Column(SurrogateKey, primary_key=True, autoincrement=True)
    run_id = Column(Uuid(as_uuid=True), nullable=False)
    
    phase = Column(
        Enum(AuditPhase, name="load_log_phase", native_enum=False,
             create_constraint=True, values_callable=enum_values, length=16),
        nullable=False
    )
    table_name = Column(String(200), nullable=True)  # NULL for batch-level phases
    file_path = Column(String(1024), nullable=True)
    status = Column(
        Enum(AuditStatus, name="load_log_status", native_enum=False,
             create_constraint=True, values_callable=enum_values, length=8),
        nullable=False
    )
    rows_loaded = Column(BigInteger, nullable=True)  # successful LOAD only
    
    # Timestamps
    started_at = Column(DateTime(timezone=True), nullable=False)
    finished_at = Column(DateTime(timezone=True), nullable=True)
    duration_seconds = Column(Integer, nullable=True)
    
    message = Column(Text, nullable=True)  # informational note or captured error
    
    __table_args__ = (
        Index("idx_load_log_run_id", "run_id"),
        Index("idx_load_log_phase", "phase"),
        Index("idx_load_log_table_name", "table_name"),
        Index("idx_load_log_status", "status"),
        Index("idx_load_log_started_at", "started_at"),
        {"schema": BRONZE_SCHEMA},
    )
