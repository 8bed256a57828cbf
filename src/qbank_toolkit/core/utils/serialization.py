"""
Serialization Utilities

Provides to/from JSON utilities for Question records.

- ``serialize_*`` / ``deserialize_*`` convert between Question and dict
- ``dumps_question`` / ``loads_question`` produce the compact payload kept
  in the store's ``payload`` column
- ``export_questions`` writes a human-readable JSON array for backup.
  Export is one-way; nothing in the toolkit re-imports it.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Optional

from ..models.questions import Question
from ..schemas.validator import ValidationError, validate_question

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Question Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_question(question: Question) -> dict[str, Any]:
    """
    Serialize a Question to a dictionary.

    The output can be written to JSON and will pass schema validation.

    Args:
        question: Question instance to serialize

    Returns:
        Dictionary suitable for JSON serialization
    """
    return question.to_dict()


def deserialize_question(
    data: dict[str, Any],
    *,
    validate: bool = True,
) -> Question:
    """
    Deserialize a Question from a dictionary.

    Args:
        data: Dictionary from JSON
        validate: Whether to run basic schema checks first

    Returns:
        Question instance

    Raises:
        ValidationError: If validate=True and data is invalid
        ValueError: If data cannot be parsed
    """
    if validate:
        validate_question(data, strict=False)
    try:
        return Question.from_dict(data)
    except KeyError as e:
        raise ValueError(f"Missing field {e} in question {data.get('id')!r}") from e


def dumps_question(question: Question) -> str:
    """Compact JSON payload for a single question."""
    return json.dumps(serialize_question(question), ensure_ascii=False, separators=(",", ":"))


def loads_question(payload: str) -> Question:
    """
    Parse a payload produced by dumps_question.

    Raises:
        ValidationError: If the payload is not valid JSON or fails validation
        ValueError: If the payload cannot be turned into a Question
    """
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Corrupt question payload: {e}", errors=[str(e)]) from e
    return deserialize_question(data)


# ─────────────────────────────────────────────────────────────────────────────
# Export
# ─────────────────────────────────────────────────────────────────────────────

def default_export_filename(today: Optional[date] = None) -> str:
    """
    Dated default filename for an export.

    Example:
        >>> default_export_filename(date(2024, 5, 1))
        'ib_qbank_export_2024-05-01.json'
    """
    today = today or date.today()
    return f"ib_qbank_export_{today.isoformat()}.json"


def export_questions(questions: Iterable[Question], path: Path) -> Path:
    """
    Write questions to a JSON array file (indent 2, UTF-8).

    If ``path`` is an existing directory, the default dated filename is
    used inside it.

    Args:
        questions: Records to export, typically the current filtered view
        path: Output file or directory

    Returns:
        Path of the written file
    """
    if path.is_dir():
        path = path / default_export_filename()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = [serialize_question(q) for q in questions]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    logger.info(f"Exported {len(data)} questions to {path}")
    return path
