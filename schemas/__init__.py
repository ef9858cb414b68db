"""
Pydantic schemas for data validation and serialization.

Schemas:
    jobs: LoadJobSpec, the validated shape of a registry row
    audit: AuditEntryRead and RunSummary for load log queries

Usage:
    from schemas.jobs import LoadJobSpec
    from schemas.audit import AuditEntryRead, RunSummary

Example:
    job = LoadJobSpec(
        table_name="bronze.erp_location_hierarchy",
        file_path="/data/source_erp/location_hierarchy.csv",
        load_order=1002,
    )

    # Unqualified or malformed names are rejected
    LoadJobSpec(table_name="erp_location_hierarchy; DROP", file_path="x.csv")
    # -> pydantic.ValidationError
"""

__all__ = [
    "LoadJobSpec",
    "AuditEntryRead",
    "RunSummary",
]
