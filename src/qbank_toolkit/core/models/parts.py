"""
Module: parts

Purpose:
    Provides the QuestionPart dataclass - one labelled sub-question of a
    Paper 2 record, with its own question and answer image references.

Key Functions:
    - next_part_label(): Label for a newly appended part (a -> b -> c ...)
    - QuestionPart.to_dict() / QuestionPart.from_dict(): Serialization

Dependencies:
    - dataclasses (std)

Used By:
    - core.models.questions.Question
    - core.utils.serialization

Labels are free text once created. Two parts of the same question may end
up sharing a label after editing; parts are addressed by ``id``, never by
label.
"""

from __future__ import annotations

import string
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Sequence


@dataclass(frozen=True, slots=True)
class QuestionPart:
    """
    Labelled sub-question of a Paper 2 record (immutable).

    Attributes:
        id: Opaque identifier, unique within the owning question
        label: Short display label like "a" (user-editable, not unique)
        question_image: Image reference (data URI) for the part prompt
        answer_image: Image reference (data URI) for the mark scheme

    Example:
        >>> part = QuestionPart(id="1700000000000", label="a")
        >>> part.has_answer
        False
    """

    id: str
    label: str
    question_image: Optional[str] = None
    answer_image: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("part id must be non-empty")

    @property
    def has_answer(self) -> bool:
        """True when an answer image has been captured."""
        return bool(self.answer_image)

    def relabel(self, label: str) -> QuestionPart:
        """Return a copy with a new label."""
        return replace(self, label=label)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "label": self.label,
            "questionImage": self.question_image,
            "answerImage": self.answer_image,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> QuestionPart:
        return cls(
            id=str(data["id"]),
            label=str(data.get("label", "")),
            question_image=data.get("questionImage"),
            answer_image=data.get("answerImage"),
        )


def next_part_label(parts: Sequence[QuestionPart]) -> str:
    """
    Compute the label for a part appended after ``parts``.

    Follows the last part's label alphabetically, so an edited label
    steers the sequence ("c" after a part relabelled "b"). An empty
    sequence, or a last label not starting with a letter, starts at "a";
    the sequence stops at "z".

    Args:
        parts: Existing parts in display order

    Returns:
        Single-character label for the new part

    Example:
        >>> next_part_label([QuestionPart("1", "a"), QuestionPart("2", "b")])
        'c'
    """
    if not parts:
        return "a"
    first = parts[-1].label[:1].lower()
    if not first or first not in string.ascii_lowercase:
        return "a"
    if first == "z":
        return "z"
    return chr(ord(first) + 1)
