"""
Module: questions

Purpose:
    Provides the Question dataclass - the unit of storage in the question
    bank. Holds tag metadata (keywords, topics), exam metadata (year,
    month, difficulty, question number) and exactly one payload variant
    selected by ``paper_type``.

Key Functions:
    - Question.paper1() / Question.paper2(): Variant-specific constructors
    - Question.with_topic(): Append a topic (auto-tag path)
    - Question.to_dict() / Question.from_dict(): Serialization
    - new_question_id() / now_ms(): Identity and timestamp for new records

Dependencies:
    - dataclasses (std)
    - time, uuid (std)
    - .parts.QuestionPart
    - .metadata: enums and the year sentinel

Used By:
    - storage.store.QuestionStore
    - query.engine.filter_questions
    - tagging.auto_tag
    - library.service.QuestionLibrary

Invariants enforced on construction:
    - keywords and topics hold no duplicates (exact, case-sensitive)
    - year is an int or UNKNOWN_YEAR, never missing
    - Paper 1 records carry only p1_* payload, Paper 2 only parts
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Optional, Tuple

from .metadata import (
    ANSWER_CHOICES,
    AnswerType,
    Difficulty,
    ExamMonth,
    PaperType,
    UNKNOWN_YEAR,
    Year,
    is_valid_year,
    parse_year,
)
from .parts import QuestionPart


def new_question_id() -> str:
    """Generate a fresh opaque record identifier."""
    return uuid.uuid4().hex


def now_ms() -> int:
    """Current time in milliseconds since the epoch (creation timestamps)."""
    return int(time.time() * 1000)


def _duplicates(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    dupes: list[str] = []
    for value in values:
        if value in seen and value not in dupes:
            dupes.append(value)
        seen.add(value)
    return dupes


@dataclass(frozen=True)
class Question:
    """
    Stored question record (immutable).

    Changes are made by building a new instance (``dataclasses.replace`` or
    the helpers below) and upserting it; the store never patches fields.

    Attributes:
        id: Opaque unique identifier, assigned at creation
        created_at: Creation time in epoch milliseconds (ordering only)
        paper_type: Discriminant selecting the payload variant
        keywords: Free-form keyword tags (ordered, no duplicates)
        topics: Syllabus topic tags like "D.1" (ordered, no duplicates)
        difficulty: Easy / Medium / Hard
        year: Exam year or UNKNOWN_YEAR
        month: Exam session month
        question_number: Free-text question number label
        p1_question_image: Paper 1 question image reference
        p1_answer_type: Paper 1 answer kind (selection or image)
        p1_answer_selection: Paper 1 answer token "A".."D"
        p1_answer_image: Paper 1 answer image reference
        parts: Paper 2 ordered sub-questions

    Example:
        >>> q = Question.paper1(
        ...     id="q1",
        ...     created_at=1700000000000,
        ...     year=2020,
        ...     keywords=("calculus",),
        ...     p1_answer_selection="B",
        ... )
        >>> q.paper_type
        <PaperType.PAPER_1: 'Paper 1'>
    """

    id: str
    created_at: int
    paper_type: PaperType
    keywords: Tuple[str, ...] = ()
    topics: Tuple[str, ...] = ()
    difficulty: Difficulty = Difficulty.MEDIUM
    year: Year = UNKNOWN_YEAR
    month: ExamMonth = ExamMonth.UNKNOWN
    question_number: str = ""

    # Paper 1 payload
    p1_question_image: Optional[str] = None
    p1_answer_type: Optional[AnswerType] = None
    p1_answer_selection: Optional[str] = None
    p1_answer_image: Optional[str] = None

    # Paper 2 payload
    parts: Tuple[QuestionPart, ...] = field(default=())

    def __post_init__(self) -> None:
        """Validate record invariants on construction."""
        for name in ("keywords", "topics", "parts"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        if not self.id or not isinstance(self.id, str):
            raise ValueError(f"id must be a non-empty string: {self.id!r}")
        if not isinstance(self.paper_type, PaperType):
            raise ValueError(f"paper_type must be a PaperType: {self.paper_type!r}")
        if not is_valid_year(self.year):
            raise ValueError(f"year must be an integer or {UNKNOWN_YEAR!r}: {self.year!r}")

        dupes = _duplicates(self.keywords)
        if dupes:
            raise ValueError(f"duplicate keywords: {dupes}")
        dupes = _duplicates(self.topics)
        if dupes:
            raise ValueError(f"duplicate topics: {dupes}")

        if self.paper_type is PaperType.PAPER_1:
            if self.parts:
                raise ValueError("Paper 1 question cannot have parts")
            if self.p1_answer_type is None:
                raise ValueError("Paper 1 question requires p1_answer_type")
            if (
                self.p1_answer_selection is not None
                and self.p1_answer_selection not in ANSWER_CHOICES
            ):
                raise ValueError(
                    f"p1_answer_selection must be one of {ANSWER_CHOICES}: "
                    f"{self.p1_answer_selection!r}"
                )
        else:
            if self.has_paper1_payload:
                raise ValueError("Paper 2 question cannot carry Paper 1 payload")
            if not self.parts:
                raise ValueError("Paper 2 question requires at least one part")

    # ─────────────────────────────────────────────────────────────────────────
    # Constructors
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def paper1(
        cls,
        *,
        id: Optional[str] = None,
        created_at: Optional[int] = None,
        p1_answer_type: AnswerType = AnswerType.SELECTION,
        **kwargs: Any,
    ) -> Question:
        """Build a Paper 1 record, generating id/timestamp when omitted."""
        return cls(
            id=id or new_question_id(),
            created_at=created_at if created_at is not None else now_ms(),
            paper_type=PaperType.PAPER_1,
            p1_answer_type=p1_answer_type,
            **kwargs,
        )

    @classmethod
    def paper2(
        cls,
        *,
        id: Optional[str] = None,
        created_at: Optional[int] = None,
        parts: Optional[Tuple[QuestionPart, ...]] = None,
        **kwargs: Any,
    ) -> Question:
        """
        Build a Paper 2 record, generating id/timestamp when omitted.

        Without explicit parts the record starts with a single empty part
        labelled "a".
        """
        if parts is None:
            parts = (QuestionPart(id=new_question_id(), label="a"),)
        return cls(
            id=id or new_question_id(),
            created_at=created_at if created_at is not None else now_ms(),
            paper_type=PaperType.PAPER_2,
            parts=tuple(parts),
            **kwargs,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def has_paper1_payload(self) -> bool:
        return any(
            value is not None
            for value in (
                self.p1_question_image,
                self.p1_answer_type,
                self.p1_answer_selection,
                self.p1_answer_image,
            )
        )

    @property
    def year_unknown(self) -> bool:
        return self.year == UNKNOWN_YEAR

    def has_topic(self, topic: str) -> bool:
        return topic in self.topics

    def has_any_keyword(self, keywords: Iterable[str]) -> bool:
        """True if at least one of ``keywords`` is tagged on this record."""
        own = set(self.keywords)
        return any(k in own for k in keywords)

    def get_part(self, part_id: str) -> Optional[QuestionPart]:
        """Find a part by id (labels are not unique)."""
        for part in self.parts:
            if part.id == part_id:
                return part
        return None

    @property
    def date_label(self) -> str:
        """Human readable session, e.g. "2021 May", "November" or "Unknown Date"."""
        year_unknown = self.year_unknown
        month_unknown = self.month is ExamMonth.UNKNOWN
        if year_unknown and month_unknown:
            return "Unknown Date"
        if year_unknown:
            return self.month.value
        if month_unknown:
            return str(self.year)
        return f"{self.year} {self.month.value}"

    # ─────────────────────────────────────────────────────────────────────────
    # Derived copies
    # ─────────────────────────────────────────────────────────────────────────

    def with_topic(self, topic: str) -> Question:
        """
        Return a copy with ``topic`` appended to the topic set.

        Returns self unchanged if the topic is already present.
        """
        if topic in self.topics:
            return self
        return replace(self, topics=self.topics + (topic,))

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize to dictionary with the stable export field names.

        Paper 1 records omit ``parts``; Paper 2 records omit the ``p1*``
        fields.
        """
        d: Dict[str, Any] = {
            "id": self.id,
            "createdAt": self.created_at,
            "keywords": list(self.keywords),
            "topics": list(self.topics),
            "difficulty": self.difficulty.value,
            "year": self.year,
            "month": self.month.value,
            "questionNumber": self.question_number,
            "paperType": self.paper_type.value,
        }
        if self.paper_type is PaperType.PAPER_1:
            d["p1QuestionImage"] = self.p1_question_image
            d["p1AnswerType"] = self.p1_answer_type.value if self.p1_answer_type else None
            d["p1AnswerSelection"] = self.p1_answer_selection
            d["p1AnswerImage"] = self.p1_answer_image
        else:
            d["parts"] = [part.to_dict() for part in self.parts]
        return d

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Question:
        """
        Deserialize from dictionary.

        Records written before topics existed have no ``topics`` key and
        load with an empty topic set.

        Raises:
            KeyError: If a required field is missing
            ValueError: If a field holds an invalid value
        """
        paper_type = PaperType(data["paperType"])
        common: Dict[str, Any] = dict(
            id=data["id"],
            created_at=int(data["createdAt"]),
            paper_type=paper_type,
            keywords=tuple(data.get("keywords") or ()),
            topics=tuple(data.get("topics") or ()),
            difficulty=Difficulty(data.get("difficulty", Difficulty.MEDIUM.value)),
            year=parse_year(data.get("year", UNKNOWN_YEAR)),
            month=ExamMonth(data.get("month", ExamMonth.UNKNOWN.value)),
            question_number=data.get("questionNumber") or "",
        )
        if paper_type is PaperType.PAPER_1:
            answer_type = data.get("p1AnswerType") or AnswerType.SELECTION.value
            return cls(
                **common,
                p1_question_image=data.get("p1QuestionImage"),
                p1_answer_type=AnswerType(answer_type),
                p1_answer_selection=data.get("p1AnswerSelection"),
                p1_answer_image=data.get("p1AnswerImage"),
            )
        return cls(
            **common,
            parts=tuple(QuestionPart.from_dict(p) for p in data.get("parts") or ()),
        )

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return (
            f"Question({self.id!r}, {self.paper_type.value}, year={self.year!r}, "
            f"keywords={list(self.keywords)}, topics={list(self.topics)})"
        )
