"""
Schema Validation Utilities

Validates serialized question dictionaries before they are turned into
Question objects or written out.

Two levels:
- Basic checks (always): required fields, enum values, year invariant,
  duplicate tags, payload variant consistency
- Strict checks (strict=True): full JSON Schema validation via jsonschema
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema


# Schema version of the persisted keyspace (mirrored in PRAGMA user_version)
QUESTION_SCHEMA_VERSION = 1

_PAPER_TYPES = ("Paper 1", "Paper 2/1-b")
_P1_FIELDS = ("p1QuestionImage", "p1AnswerType", "p1AnswerSelection", "p1AnswerImage")

# Load schemas lazily
_SCHEMAS: dict[str, dict] = {}


def _load_schema(name: str) -> dict:
    """Load a schema from the schemas directory."""
    if name not in _SCHEMAS:
        schema_path = Path(__file__).parent / f"{name}.schema.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")
        with open(schema_path, "r", encoding="utf-8") as f:
            _SCHEMAS[name] = json.load(f)
    return _SCHEMAS[name]


class ValidationError(Exception):
    """Raised when data fails schema validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_question(data: dict[str, Any], *, strict: bool = False) -> None:
    """
    Validate a serialized question.

    Args:
        data: Question dictionary (camelCase field names)
        strict: If True, also run full JSON Schema validation

    Raises:
        ValidationError: If data is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Question must be an object, got {type(data).__name__}")

    required = ["id", "createdAt", "year", "paperType"]
    missing = [f for f in required if f not in data]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing]
        )

    if not isinstance(data["id"], str) or not data["id"]:
        raise ValidationError(f"Invalid id: {data['id']!r}", path="id")

    paper_type = data["paperType"]
    if paper_type not in _PAPER_TYPES:
        raise ValidationError(
            f"Invalid paperType: {paper_type!r} (expected one of {_PAPER_TYPES})",
            path="paperType"
        )

    # Year is an integer or the literal "Unknown" - never missing or null
    year = data["year"]
    if isinstance(year, bool) or not (isinstance(year, int) or year == "Unknown"):
        raise ValidationError(
            f"Invalid year: {year!r} (must be an integer or 'Unknown')",
            path="year"
        )

    for name in ("keywords", "topics"):
        values = data.get(name, [])
        if not isinstance(values, list):
            raise ValidationError(f"{name} must be a list", path=name)
        if len(set(values)) != len(values):
            raise ValidationError(f"Duplicate entries in {name}: {values}", path=name)

    if paper_type == "Paper 1":
        if "parts" in data:
            raise ValidationError("Paper 1 question cannot have parts", path="parts")
    else:
        present = [f for f in _P1_FIELDS if f in data]
        if present:
            raise ValidationError(
                f"Paper 2 question carries Paper 1 fields: {present}",
                path=present[0]
            )
        _validate_parts(data.get("parts"))

    if strict:
        schema = _load_schema("question")
        try:
            jsonschema.validate(data, schema)
        except jsonschema.ValidationError as e:
            raise ValidationError(
                f"Schema validation failed: {e.message}",
                path=".".join(str(p) for p in e.absolute_path),
                errors=[e.message]
            ) from e


def _validate_parts(parts: Any) -> None:
    """Validate the Paper 2 parts list."""
    if not isinstance(parts, list) or not parts:
        raise ValidationError("Paper 2 question requires a non-empty parts list", path="parts")
    for i, part in enumerate(parts):
        path = f"parts[{i}]"
        if not isinstance(part, dict):
            raise ValidationError("part must be an object", path=path)
        missing = [f for f in ("id", "label") if f not in part]
        if missing:
            raise ValidationError(
                f"Part missing required fields: {missing}",
                path=path,
                errors=[f"Missing field: {f}" for f in missing]
            )
