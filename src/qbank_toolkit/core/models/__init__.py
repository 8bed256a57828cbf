"""
Core Models Package

Immutable, validated data models that serve as the single source of truth
for stored questions.

All records are frozen dataclasses. Edits produce new instances that are
upserted whole; nothing patches a stored record in place.
"""

from .metadata import (
    UNKNOWN_YEAR,
    AnswerType,
    Difficulty,
    ExamMonth,
    PaperType,
    Year,
    parse_year,
)
from .parts import QuestionPart, next_part_label
from .questions import Question, new_question_id, now_ms

__all__ = [
    "UNKNOWN_YEAR",
    "AnswerType",
    "Difficulty",
    "ExamMonth",
    "PaperType",
    "Year",
    "parse_year",
    "QuestionPart",
    "next_part_label",
    "Question",
    "new_question_id",
    "now_ms",
]
