"""
Core utilities and configuration for the bronze loader.

This package provides foundational components used throughout the loader:

Modules:
    config: Application configuration and environment variable management
    database: Database engine, session management and upsert helpers
    exceptions: Custom exception hierarchy for error handling
    identifiers: Validated schema-qualified table names
    logging: Logging configuration and utilities

Usage:
    from core.config import settings
    from core.database import engine, make_session_maker
    from core.exceptions import LoadError, BatchLoadError
    from core.identifiers import QualifiedTableName
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Get database session
    async with make_session_maker(engine)() as session:
        # Perform database operations
        pass
"""

__all__ = [
    "settings",
    "setup_logging",
    "QualifiedTableName",
    # Exceptions
    "WarehouseError",
    "ConfigurationError",
    "PrerequisiteError",
    "InvalidIdentifierError",
    "RegistryError",
    "AuditLogError",
    "LoadError",
    "TruncateError",
    "BulkLoadError",
    "BatchLoadError",
]
