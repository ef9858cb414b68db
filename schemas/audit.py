"""
Pydantic schemas for reading the load log
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from models.base import AuditPhase, AuditStatus


class AuditEntryRead(BaseModel):
    """One load log row"""
    id: int
    run_id: UUID
    phase: AuditPhase
    table_name: Optional[str] = None
    file_path: Optional[str] = None
    status: AuditStatus
    rows_loaded: Optional[int] = None
    started_at: datetime
    finished_at: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    message: Optional[str] = None
    
    class Config:
        from_attributes = True


class RunSummary(BaseModel):
    """Aggregated view of one batch run"""
    run_id: UUID
    status: AuditStatus = Field(..., description="FINISH status; ERROR when the run never finished")
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    duration_seconds: Optional[int] = None
    total_rows_loaded: int = 0
    had_errors: bool = False
    tables_loaded: List[str] = Field(default_factory=list)
    tables_failed: List[str] = Field(default_factory=list)
    message: Optional[str] = None
