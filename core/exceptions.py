"""
Custom exceptions for the bronze loader with structured error context.

This module provides the exception hierarchy used by the configuration
store, the job registry, the audit log and the batch loader. Each
exception carries context information for debugging and for the
messages written to the audit log.

Exception Hierarchy:
    WarehouseError (base)
    ├── ConfigurationError
    ├── PrerequisiteError
    ├── InvalidIdentifierError
    ├── RegistryError
    ├── AuditLogError
    ├── LoadError
    │   ├── TruncateError
    │   └── BulkLoadError
    └── BatchLoadError

Per-job failures are LoadError subclasses: the batch loader records them
and moves on to the next job. Every other error is fatal to the batch.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class WarehouseError(Exception):
    """
    Base exception for all warehouse loading errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (table, file, run, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        # Add timestamp to context
        self.context["error_timestamp"] = self.timestamp.isoformat()

        # Chain original exception if provided
        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Precondition Errors
# ============================================================================

class ConfigurationError(WarehouseError):
    """
    Raised when required configuration entries are missing or empty.

    Context should include:
        - missing_keys: Configuration keys that are absent or empty
    """
    pass


class PrerequisiteError(WarehouseError):
    """
    Raised when required schemas or tables do not exist yet.

    Context should include:
        - missing: The schema or table that was not found
    """
    pass


class InvalidIdentifierError(WarehouseError):
    """
    Raised when a table identifier fails validation.

    Context should include:
        - identifier: The rejected identifier
    """
    pass


class RegistryError(WarehouseError):
    """Raised when the job registry cannot be read or written."""
    pass


class AuditLogError(WarehouseError):
    """
    Raised when an audit log row cannot be written.

    Always fatal: a run that cannot record its own history is aborted.

    Context should include:
        - run_id: The batch run identifier
        - phase: The phase being recorded
    """
    pass


# ============================================================================
# Per-Job Load Errors
# ============================================================================

class LoadError(WarehouseError):
    """Base exception for per-job failures; never fatal to the batch."""
    pass


class TruncateError(LoadError):
    """
    Raised when a destination table cannot be emptied.

    Context should include:
        - table_name: Destination table
    """
    pass


class BulkLoadError(LoadError):
    """
    Raised when a source file cannot be bulk-loaded.

    Context should include:
        - table_name: Destination table
        - file_path: Source CSV file
        - line_number: File line where the error occurred (if applicable)
        - column_name: Destination column that rejected a value (if applicable)
    """
    pass


# ============================================================================
# Batch Errors
# ============================================================================

class BatchLoadError(WarehouseError):
    """
    Raised when a batch run fails outside the per-job isolation boundary.

    Context should include:
        - run_id: The batch run identifier
    """
    pass
