"""
Question Bank Core Package

Shared data models, schema validation and serialization used by the
store, the query engine and the library service.
"""

from .models import (
    UNKNOWN_YEAR,
    AnswerType,
    Difficulty,
    ExamMonth,
    PaperType,
    Question,
    QuestionPart,
)

__all__ = [
    "UNKNOWN_YEAR",
    "AnswerType",
    "Difficulty",
    "ExamMonth",
    "PaperType",
    "Question",
    "QuestionPart",
]
