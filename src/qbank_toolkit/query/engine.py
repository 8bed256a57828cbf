"""
Module: query.engine

Purpose:
    Pure, deterministic filtering of an in-memory question snapshot against
    a FilterSpec. No storage access and no side effects.

Key Functions:
    - matches(): Single-record predicate
    - filter_questions(): Filtered view, input order preserved
    - sort_newest_first(): Default presentation order (caller helper)

Filter semantics:
    - Free text matches any keyword, any topic or the question number
      (case-insensitive substring); an empty query matches everything
    - paper_type / year / difficulty: ALL or exact equality. "Unknown" is
      never equal to a numeric year
    - Included tags are conjunctive: every included tag must be present
    - Excluded tags are disjunctive-negative: any excluded tag present
      rejects the record

Used By:
    - library.service.QuestionLibrary
"""

from __future__ import annotations

from typing import Iterable, List

from qbank_toolkit.core.models.questions import Question

from .filter_spec import ALL, FilterSpec
from .tag_state import TagFilter


def _matches_text(question: Question, query: str) -> bool:
    if not query:
        return True
    needle = query.lower()
    if any(needle in k.lower() for k in question.keywords):
        return True
    if any(needle in t.lower() for t in question.topics):
        return True
    return needle in question.question_number.lower()


def _matches_tags(tags: Iterable[str], tag_filter: TagFilter) -> bool:
    own = set(tags)
    if tag_filter.included and not own.issuperset(tag_filter.included):
        return False
    if tag_filter.excluded and not own.isdisjoint(tag_filter.excluded):
        return False
    return True


def _matches_year(question: Question, selector) -> bool:
    if selector == ALL:
        return True
    # "Unknown" never equals a numeric year
    if type(question.year) is not type(selector):
        return False
    return question.year == selector


def matches(question: Question, spec: FilterSpec) -> bool:
    """
    Check whether one question passes every constraint of ``spec``.

    Args:
        question: Record to test
        spec: Filter specification

    Returns:
        True if the record belongs in the filtered view
    """
    if spec.paper_type != ALL and question.paper_type is not spec.paper_type:
        return False
    if spec.difficulty != ALL and question.difficulty is not spec.difficulty:
        return False
    if not _matches_year(question, spec.year):
        return False
    if not _matches_tags(question.keywords, spec.keywords):
        return False
    if not _matches_tags(question.topics, spec.topics):
        return False
    return _matches_text(question, spec.query)


def filter_questions(questions: Iterable[Question], spec: FilterSpec) -> List[Question]:
    """
    Narrow ``questions`` to those matching ``spec``.

    Input order is preserved; ordering is the caller's concern.

    Example:
        >>> spec = FilterSpec().toggle_keyword("A").toggle_keyword("B")
        >>> [q.id for q in filter_questions(questions, spec)]
        ['has_a_and_b']
    """
    return [q for q in questions if matches(q, spec)]


def sort_newest_first(questions: Iterable[Question]) -> List[Question]:
    """Stable sort by creation timestamp, newest first."""
    return sorted(questions, key=lambda q: q.created_at, reverse=True)
