"""
Pydantic schemas for loader jobs with validation
"""

from pydantic import BaseModel, Field, validator
from core.identifiers import QualifiedTableName
from core.exceptions import InvalidIdentifierError


class LoadJobSpec(BaseModel):
    """
    Schema for registering a loader job.
    
    Ensures:
    - table_name is a valid schema-qualified identifier
    - enabled jobs carry a non-empty file_path
    """
    
    table_name: str = Field(..., min_length=3, max_length=200)
    is_enabled: bool = True
    file_path: str = Field("", max_length=1024)
    load_order: int = 100
    
    @validator("table_name")
    def validate_table_name(cls, v):
        """Reject anything that is not schema.table"""
        try:
            return str(QualifiedTableName.parse(v))
        except InvalidIdentifierError as e:
            raise ValueError(e.message)
    
    @validator("file_path", always=True)
    def require_path_when_enabled(cls, v, values):
        """Enabled jobs must point at a file"""
        v = (v or "").strip()
        if values.get("is_enabled", True) and not v:
            raise ValueError("file_path cannot be empty for an enabled job")
        return v
    
    class Config:
        from_attributes = True
