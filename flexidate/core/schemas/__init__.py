"""
Pydantic schemas for flexidate.

**Organization by Domain**:
- common.py: Error records (ErrorKind, DateError, ErrorCollector) and per-call DateSettings

**Design Notes**:
- All models use Pydantic v2 with strict validation (extra="forbid")
- Error records are frozen so they can be de-duplicated by value
"""
from flexidate.core.schemas.common import (
    DateError,
    DateSettings,
    ErrorCollector,
    ErrorKind,
    )

__all__ = [
    "DateError",
    "DateSettings",
    "ErrorCollector",
    "ErrorKind",
    ]
