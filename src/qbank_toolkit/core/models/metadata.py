"""
Module: metadata

Purpose:
    Enumerations and sentinels shared by every question record: paper type,
    difficulty, exam month, Paper 1 answer kind, and the explicit "Unknown"
    year sentinel.

Key Functions:
    - parse_year(): Coerce raw year input to int or UNKNOWN_YEAR
    - is_valid_year(): Check the int-or-sentinel invariant

Dependencies:
    - enum (std)

Used By:
    - core.models.questions.Question
    - query.filter_spec.FilterSpec
    - storage.store.QuestionStore (year index column)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Union


UNKNOWN_YEAR = "Unknown"

Year = Union[int, str]


class PaperType(str, Enum):
    """Which paper a question comes from (selects the payload variant)."""
    PAPER_1 = "Paper 1"        # Multiple choice, single image payload
    PAPER_2 = "Paper 2/1-b"    # Structured, ordered parts payload

    def __str__(self) -> str:
        return self.value


class Difficulty(str, Enum):
    """Self-assessed difficulty of a question."""
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    def __str__(self) -> str:
        return self.value


class ExamMonth(str, Enum):
    """Exam session month."""
    MAY = "May"
    NOVEMBER = "November"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


class AnswerType(str, Enum):
    """How a Paper 1 answer is recorded."""
    SELECTION = "Selection"  # One of the choice tokens A-D
    IMAGE = "Image"          # Mark scheme screenshot

    def __str__(self) -> str:
        return self.value


ANSWER_CHOICES = ("A", "B", "C", "D")


def is_valid_year(value: Any) -> bool:
    """
    Check the year invariant: an int (bools excluded) or UNKNOWN_YEAR.

    Args:
        value: Candidate year value

    Returns:
        True if value is a usable year
    """
    if isinstance(value, bool):
        return False
    return isinstance(value, int) or value == UNKNOWN_YEAR


def parse_year(value: Any) -> Year:
    """
    Coerce raw year input into an int or the UNKNOWN_YEAR sentinel.

    Accepts ints, digit strings ("2021") and the literal "Unknown".

    Args:
        value: Raw year (from JSON, a form field, or the year index column)

    Returns:
        int year or UNKNOWN_YEAR

    Raises:
        ValueError: If value cannot be interpreted as a year

    Example:
        >>> parse_year("2021")
        2021
        >>> parse_year("Unknown")
        'Unknown'
    """
    if isinstance(value, bool):
        raise ValueError(f"year must be an integer or {UNKNOWN_YEAR!r}: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text == UNKNOWN_YEAR:
            return UNKNOWN_YEAR
        if text.lstrip("-").isdigit():
            return int(text)
    raise ValueError(f"year must be an integer or {UNKNOWN_YEAR!r}: {value!r}")
