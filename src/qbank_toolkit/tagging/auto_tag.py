"""
Module: tagging.auto_tag

Purpose:
    Rule-based bulk topic tagging. A rule names a target topic and a set of
    trigger keywords; every record carrying at least one trigger keyword
    and missing the target topic gets the topic appended.

Key Classes:
    - AutoTagRule: Target topic + trigger keywords (normalised on build)

Key Functions:
    - find_candidates(): Records the rule would change
    - apply_rule(): Updated copies of those records (pure)
    - run_auto_tag(): Apply and persist in one all-or-nothing batch
    - suggest_tags(): Autocomplete for the tagger form

Dependencies:
    - qbank_toolkit.core.models.questions: Question
    - qbank_toolkit.storage: QuestionStore.bulk_put (atomic batch write)

Used By:
    - library.service.QuestionLibrary.auto_tag

Applying the same rule twice is a no-op the second time: records that
already carry the target topic are never candidates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence

from qbank_toolkit.core.models.questions import Question
from qbank_toolkit.storage.store import QuestionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AutoTagRule:
    """
    Auto-tag rule (immutable).

    Attributes:
        target_topic: Topic to append, e.g. "B.4"
        trigger_keywords: Keywords that qualify a record (any one suffices)

    Example:
        >>> rule = AutoTagRule.create("B.4", ["waves", " waves ", "optics"])
        >>> rule.trigger_keywords
        ('waves', 'optics')
    """

    target_topic: str
    trigger_keywords: tuple[str, ...] = ()

    @classmethod
    def create(cls, target_topic: str, trigger_keywords: Iterable[str]) -> AutoTagRule:
        """Build a rule, trimming whitespace and dropping blank/duplicate triggers."""
        triggers: list[str] = []
        for keyword in trigger_keywords:
            keyword = keyword.strip()
            if keyword and keyword not in triggers:
                triggers.append(keyword)
        return cls(target_topic=target_topic.strip(), trigger_keywords=tuple(triggers))

    @property
    def is_empty(self) -> bool:
        """An empty target or no triggers matches nothing."""
        return not self.target_topic or not self.trigger_keywords


def find_candidates(questions: Iterable[Question], rule: AutoTagRule) -> List[Question]:
    """
    Records with at least one trigger keyword and without the target topic.

    An empty rule yields no candidates (not an error).
    """
    if rule.is_empty:
        return []
    triggers = set(rule.trigger_keywords)
    return [
        q for q in questions
        if q.has_any_keyword(triggers) and not q.has_topic(rule.target_topic)
    ]


def apply_rule(questions: Iterable[Question], rule: AutoTagRule) -> List[Question]:
    """
    Compute updated records for ``rule`` without persisting anything.

    Each result is the original record with the target topic appended;
    every other field is unchanged.

    Returns:
        Updated records, in input order
    """
    return [q.with_topic(rule.target_topic) for q in find_candidates(questions, rule)]


def run_auto_tag(
    store: QuestionStore,
    questions: Iterable[Question],
    rule: AutoTagRule,
) -> List[Question]:
    """
    Apply ``rule`` to a snapshot and persist the result in one transaction.

    Relies on ``QuestionStore.bulk_put`` being all-or-nothing: either every
    qualifying record gains the topic, or none does.

    Args:
        store: Store to write through
        questions: Snapshot to evaluate (usually the caller's cached list)
        rule: Rule to apply

    Returns:
        The updated records that were written

    Raises:
        TransactionError: If the batch write aborted
    """
    updated = apply_rule(questions, rule)
    if not updated:
        logger.info(f"Auto-tag {rule.target_topic!r}: no matching questions")
        return []
    store.bulk_put(updated)
    logger.info(
        f"Auto-tag {rule.target_topic!r} via {list(rule.trigger_keywords)}: "
        f"tagged {len(updated)} questions"
    )
    return updated


def suggest_tags(
    existing: Iterable[str],
    typed: str,
    *,
    exclude: Sequence[str] = (),
    limit: int = 5,
) -> List[str]:
    """
    Autocomplete suggestions for a tag input.

    Args:
        existing: Known tag values (in display order)
        typed: Current input text (case-insensitive substring match)
        exclude: Values already chosen, never suggested
        limit: Maximum number of suggestions

    Returns:
        Up to ``limit`` matching tags
    """
    needle = typed.lower()
    suggestions: List[str] = []
    for tag in existing:
        if tag in exclude or needle not in tag.lower():
            continue
        suggestions.append(tag)
        if len(suggestions) >= limit:
            break
    return suggestions
