"""
Query Package

Pure filtering of question snapshots: tri-state tag filters, the filter
specification, and the predicate engine.
"""

from .tag_state import TagState, TagNamespace, TagFilter, toggle, state_of, classify
from .filter_spec import ALL, FilterSpec
from .engine import matches, filter_questions, sort_newest_first

__all__ = [
    "ALL",
    "FilterSpec",
    "TagState",
    "TagNamespace",
    "TagFilter",
    "toggle",
    "state_of",
    "classify",
    "matches",
    "filter_questions",
    "sort_newest_first",
]
