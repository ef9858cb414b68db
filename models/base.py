from sqlalchemy import BigInteger, Integer
from sqlalchemy.orm import declarative_base
import enum

Base = declarative_base()

# Surrogate keys: BIGINT on PostgreSQL, rowid alias on SQLite
SurrogateKey = BigInteger().with_variant(Integer(), "sqlite")

BRONZE_SCHEMA = "bronze"
CONFIG_SCHEMA = "public"


# ============================================================================
# ENUMS
# ============================================================================

class AuditPhase(str, enum.Enum):
    """Load log phases"""
    BATCH_START = "START"
    VALIDATION = "VALIDATION"
    TRUNCATE = "TRUNCATE"
    LOAD = "LOAD"
    SEPARATOR = "SEPARATOR"
    BATCH_FINISH = "FINISH"
    ERROR = "ERROR"


class AuditStatus(str, enum.Enum):
    """Load log step status"""
    OK = "OK"
    ERROR = "ERROR"


def enum_values(enum_cls):
    """Persist enum values ("START") rather than member names ("BATCH_START")"""
    return [member.value for member in enum_cls]
