"""
Question library service for UI callers.

Owns the in-memory snapshot of the store (a read-through cache keyed by
record id), keeps it in sync after every write, and derives the lists a
library view needs: the filtered view, tag catalogues and years.

The store itself exposes no cache. Staleness between this snapshot and
the file on disk (e.g. another process writing) is reconciled by calling
``invalidate()`` or ``load(force=True)``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from qbank_toolkit.common.images import ImageDecodeError, is_image_reference
from qbank_toolkit.config import LibraryConfig
from qbank_toolkit.core.models.metadata import (
    Difficulty,
    ExamMonth,
    PaperType,
    UNKNOWN_YEAR,
    Year,
)
from qbank_toolkit.core.models.questions import Question
from qbank_toolkit.core.utils.serialization import export_questions
from qbank_toolkit.query.engine import filter_questions, sort_newest_first
from qbank_toolkit.query.filter_spec import FilterSpec
from qbank_toolkit.storage.store import QuestionStore
from qbank_toolkit.tagging.auto_tag import AutoTagRule, run_auto_tag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetadataDefaults:
    """
    Metadata used to pre-fill the form for a new question.

    With keep_metadata on, this holds the metadata of the last saved
    question; otherwise the fixed defaults below.
    """
    year: Year = field(default_factory=lambda: date.today().year)
    month: ExamMonth = ExamMonth.MAY
    paper_type: PaperType = PaperType.PAPER_1
    difficulty: Difficulty = Difficulty.MEDIUM
    keywords: Tuple[str, ...] = ()
    topics: Tuple[str, ...] = ()

    @classmethod
    def from_question(cls, question: Question) -> MetadataDefaults:
        return cls(
            year=question.year,
            month=question.month,
            paper_type=question.paper_type,
            difficulty=question.difficulty,
            keywords=question.keywords,
            topics=question.topics,
        )

    def as_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for Question.paper1() / Question.paper2()."""
        return {
            "year": self.year,
            "month": self.month,
            "difficulty": self.difficulty,
            "keywords": self.keywords,
            "topics": self.topics,
        }

    def new_question(self, **payload: Any) -> Question:
        """
        Build a new question from these defaults.

        ``payload`` supplies the variant fields (images, answer, parts) and
        may override any default, including ``paper_type``.
        """
        paper_type = PaperType(payload.pop("paper_type", self.paper_type))
        kwargs = {**self.as_kwargs(), **payload}
        if paper_type is PaperType.PAPER_1:
            return Question.paper1(**kwargs)
        return Question.paper2(**kwargs)


class QuestionLibrary:
    """
    Stateful question library for the UI layer.

    Manages:
    - QuestionStore lifecycle
    - Cached snapshot of all questions, newest first
    - Optimistic merge of writes into the snapshot
    - Sticky metadata for new questions

    Example:
        >>> library = QuestionLibrary(LibraryConfig(db_path=path))
        >>> library.save(question)
        >>> spec = FilterSpec().toggle_keyword("waves")
        >>> library.filtered(spec)
        [Question('q1', ...)]
    """

    def __init__(
        self,
        config: LibraryConfig,
        store: Optional[QuestionStore] = None,
    ):
        """
        Initialize library.

        Args:
            config: Library configuration
            store: Store to use; built from config.db_path when omitted
        """
        self.config = config
        self.store = store or QuestionStore(config.db_path, timeout_s=config.timeout_s)
        self.keep_metadata = config.keep_metadata

        self._cache: Optional[Dict[str, Question]] = None
        self._last_metadata: Optional[MetadataDefaults] = None

    # ─────────────────────────────────────────────────────────────────────────
    # Snapshot
    # ─────────────────────────────────────────────────────────────────────────

    def load(self, *, force: bool = False) -> List[Question]:
        """
        Load all questions from the store into the cache.

        Args:
            force: Re-read even if a snapshot is cached

        Returns:
            All questions, newest first

        Raises:
            InitializationError: If the store cannot be opened
            ReadError: If the fetch fails
        """
        if self._cache is None or force:
            questions = self.store.get_all()
            self._cache = {q.id: q for q in questions}
            logger.info(f"Loaded {len(questions)} questions into library cache")
        return self.questions

    @property
    def questions(self) -> List[Question]:
        """All cached questions, newest first (loads on first access)."""
        if self._cache is None:
            self.load()
        assert self._cache is not None
        return sort_newest_first(self._cache.values())

    def invalidate(self) -> None:
        """Drop the cached snapshot; the next access re-reads the store."""
        self._cache = None
        logger.debug("Library cache invalidated")

    def get(self, question_id: str) -> Optional[Question]:
        if self._cache is None:
            self.load()
        assert self._cache is not None
        return self._cache.get(question_id)

    def _merge(self, questions: Iterable[Question]) -> None:
        if self._cache is None:
            return
        for question in questions:
            self._cache[question.id] = question

    # ─────────────────────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────────────────────

    def _check_images(self, question: Question) -> None:
        references = [question.p1_question_image, question.p1_answer_image]
        for part in question.parts:
            references.extend([part.question_image, part.answer_image])
        for ref in references:
            if ref and not is_image_reference(ref):
                raise ImageDecodeError(
                    f"Question {question.id} has an image reference that is not an image"
                )

    def save(self, question: Question) -> Question:
        """
        Create or update a question (full upsert) and refresh the cache.

        Raises:
            ImageDecodeError: If validate_images is on and an image is bad
            WriteError: If the store rejects the write
        """
        if self.config.validate_images:
            self._check_images(question)
        self.store.put(question)
        self._merge([question])
        if self.keep_metadata:
            self._last_metadata = MetadataDefaults.from_question(question)
        return question

    def delete(self, question_id: str) -> None:
        """Delete a question; a missing id is ignored."""
        self.store.delete(question_id)
        if self._cache is not None:
            self._cache.pop(question_id, None)

    def clear(self, *, confirmed: bool = False) -> None:
        """
        Delete every question.

        Args:
            confirmed: Must be True; the caller confirms destructive
                intent with the user before passing it

        Raises:
            ValueError: If not confirmed
        """
        if not confirmed:
            raise ValueError("clear() requires confirmed=True")
        self.store.clear()
        self._cache = {}

    def auto_tag(self, rule: AutoTagRule) -> List[Question]:
        """
        Apply an auto-tag rule to the whole library.

        Returns:
            Questions that gained the target topic (empty if none)

        Raises:
            TransactionError: If the batch write aborted (cache unchanged)
        """
        updated = run_auto_tag(self.store, self.questions, rule)
        self._merge(updated)
        return updated

    # ─────────────────────────────────────────────────────────────────────────
    # Derived views
    # ─────────────────────────────────────────────────────────────────────────

    def filtered(self, spec: FilterSpec) -> List[Question]:
        """Questions matching ``spec``, newest first."""
        return filter_questions(self.questions, spec)

    def available_keywords(self) -> List[str]:
        """Every keyword in the library, sorted."""
        return sorted({k for q in self.questions for k in q.keywords})

    def available_topics(self) -> List[str]:
        """Every topic in the library, sorted."""
        return sorted({t for q in self.questions for t in q.topics})

    def available_years(self) -> List[Year]:
        """Distinct years, numeric descending, "Unknown" last."""
        years = {q.year for q in self.questions}
        numeric = sorted((y for y in years if y != UNKNOWN_YEAR), reverse=True)
        if UNKNOWN_YEAR in years:
            numeric.append(UNKNOWN_YEAR)
        return numeric

    def export(self, spec: Optional[FilterSpec] = None, path: Optional[Path] = None) -> Path:
        """
        Export the filtered view (not the whole store) to JSON.

        Args:
            spec: Filter to apply; None exports everything
            path: Output file or directory (defaults to the export dir)

        Returns:
            Path of the written file
        """
        questions = self.filtered(spec) if spec else self.questions
        target = path or self.config.resolved_export_dir
        if path is None:
            target.mkdir(parents=True, exist_ok=True)
        return export_questions(questions, target)

    # ─────────────────────────────────────────────────────────────────────────
    # Sticky metadata
    # ─────────────────────────────────────────────────────────────────────────

    def set_keep_metadata(self, enabled: bool) -> None:
        self.keep_metadata = enabled
        if not enabled:
            self._last_metadata = None

    def new_question_defaults(self) -> MetadataDefaults:
        """Metadata to pre-fill a new question with."""
        if self.keep_metadata and self._last_metadata is not None:
            return self._last_metadata
        return MetadataDefaults()

    def close(self) -> None:
        self.store.close()
