"""
Core Utilities Package

Serialization helpers for questions: dict/JSON conversion and the
one-way JSON export of a filtered view.
"""

from .serialization import (
    serialize_question,
    deserialize_question,
    dumps_question,
    loads_question,
    export_questions,
    default_export_filename,
)

__all__ = [
    "serialize_question",
    "deserialize_question",
    "dumps_question",
    "loads_question",
    "export_questions",
    "default_export_filename",
]
