"""
Storage Package

Embedded, versioned question store with secondary indexes over year and
keyword membership.
"""

from .errors import (
    StoreError,
    InitializationError,
    ReadError,
    WriteError,
    TransactionError,
)
from .store import QuestionStore, SCHEMA_VERSION

__all__ = [
    "QuestionStore",
    "SCHEMA_VERSION",
    "StoreError",
    "InitializationError",
    "ReadError",
    "WriteError",
    "TransactionError",
]
