"""
Schemas Package

JSON schema definition for stored/exported questions and validation
utilities.
"""

from .validator import (
    validate_question,
    ValidationError,
    QUESTION_SCHEMA_VERSION,
)

__all__ = [
    "validate_question",
    "ValidationError",
    "QUESTION_SCHEMA_VERSION",
]
