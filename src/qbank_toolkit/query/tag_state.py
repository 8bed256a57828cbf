"""
Module: query.tag_state

Purpose:
    Tri-state tag classification (include / exclude / neutral) for one tag
    namespace, and the single-click transition between states:

        neutral -> include -> exclude -> neutral

Key Classes:
    - TagState: The three states
    - TagNamespace: Keyword or topic namespace
    - TagFilter: Immutable (included, excluded) pair, disjoint by construction

Key Functions:
    - toggle(): Pure transition (tag_filter, tag) -> new tag_filter
    - state_of(): Classify a tag against a TagFilter

Used By:
    - query.filter_spec.FilterSpec
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple


class TagState(str, Enum):
    """Classification of a single tag value."""
    NEUTRAL = "neutral"
    INCLUDE = "include"
    EXCLUDE = "exclude"

    def __str__(self) -> str:
        return self.value


class TagNamespace(str, Enum):
    """Which tag set a filter applies to."""
    KEYWORD = "keyword"
    TOPIC = "topic"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TagFilter:
    """
    Included and excluded tags of one namespace (immutable).

    Attributes:
        included: Tags a record must all carry (in toggle order)
        excluded: Tags a record must carry none of (in toggle order)

    Invariants:
        - included and excluded are disjoint
        - neither holds duplicates

    Example:
        >>> f = TagFilter()
        >>> f = toggle(f, "waves")
        >>> f.included
        ('waves',)
        >>> toggle(f, "waves").excluded
        ('waves',)
    """

    included: Tuple[str, ...] = ()
    excluded: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "included", tuple(self.included))
        object.__setattr__(self, "excluded", tuple(self.excluded))
        if len(set(self.included)) != len(self.included):
            raise ValueError(f"duplicate included tags: {self.included}")
        if len(set(self.excluded)) != len(self.excluded):
            raise ValueError(f"duplicate excluded tags: {self.excluded}")
        overlap = set(self.included) & set(self.excluded)
        if overlap:
            raise ValueError(f"tags both included and excluded: {sorted(overlap)}")

    @classmethod
    def of(cls, included: Iterable[str] = (), excluded: Iterable[str] = ()) -> TagFilter:
        """Build from any iterables (validated like the constructor)."""
        return cls(tuple(included), tuple(excluded))

    @property
    def is_active(self) -> bool:
        return bool(self.included or self.excluded)


def state_of(tag_filter: TagFilter, tag: str) -> TagState:
    """Classify ``tag`` against ``tag_filter``."""
    if tag in tag_filter.included:
        return TagState.INCLUDE
    if tag in tag_filter.excluded:
        return TagState.EXCLUDE
    return TagState.NEUTRAL


def toggle(tag_filter: TagFilter, tag: str) -> TagFilter:
    """
    Advance ``tag`` one step through neutral -> include -> exclude -> neutral.

    Pure: returns a new TagFilter, the input is untouched. Every result
    keeps included and excluded disjoint.

    Args:
        tag_filter: Current state of the namespace
        tag: Tag value that was clicked

    Returns:
        New TagFilter with the tag moved to its next state
    """
    state = state_of(tag_filter, tag)
    if state is TagState.INCLUDE:
        return TagFilter(
            included=tuple(t for t in tag_filter.included if t != tag),
            excluded=tag_filter.excluded + (tag,),
        )
    if state is TagState.EXCLUDE:
        return TagFilter(
            included=tag_filter.included,
            excluded=tuple(t for t in tag_filter.excluded if t != tag),
        )
    return TagFilter(
        included=tag_filter.included + (tag,),
        excluded=tag_filter.excluded,
    )


def classify(tag_filter: TagFilter, tags: Iterable[str]) -> dict[str, TagState]:
    """Map each of ``tags`` to its current state (for rendering tag chips)."""
    return {tag: state_of(tag_filter, tag) for tag in tags}
