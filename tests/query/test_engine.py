"""
Tests for the filter engine.
"""

import pytest

from qbank_toolkit.core.models import UNKNOWN_YEAR, Difficulty, PaperType
from qbank_toolkit.query import (
    FilterSpec,
    TagFilter,
    filter_questions,
    matches,
    sort_newest_first,
)


@pytest.fixture
def library(make_question, paper2_question):
    """Small mixed snapshot."""
    return [
        make_question("ab", keywords=("A", "B"), topics=("D.1",), question_number="12"),
        make_question("a", keywords=("A",), difficulty=Difficulty.EASY, year=2021),
        make_question("b", keywords=("B",), year=UNKNOWN_YEAR),
        make_question("none", created_at=1_600_000_000_000),
        paper2_question,
    ]


def _ids(questions):
    return [q.id for q in questions]


class TestTagFilters:

    def test_include_when_two_keywords_then_requires_both(self, library):
        spec = FilterSpec().toggle_keyword("A").toggle_keyword("B")
        assert _ids(filter_questions(library, spec)) == ["ab"]

    def test_exclude_when_any_present_then_rejected(self, library):
        spec = FilterSpec(keywords=TagFilter.of(excluded=["A", "B"]))
        assert _ids(filter_questions(library, spec)) == ["none", "p2"]

    def test_include_and_exclude_combined(self, library):
        spec = FilterSpec(keywords=TagFilter.of(included=["A"], excluded=["B"]))
        assert _ids(filter_questions(library, spec)) == ["a"]

    def test_topic_include(self, library):
        spec = FilterSpec().toggle_topic("A.2")
        assert _ids(filter_questions(library, spec)) == ["p2"]

    @pytest.mark.parametrize(
        "included,excluded",
        [((), ()), (("A",), ()), (("A", "B"), ()), ((), ("B",)), (("B",), ("A",))],
    )
    def test_tag_filter_law_holds_for_every_record(self, library, included, excluded):
        spec = FilterSpec(keywords=TagFilter.of(included, excluded))
        for q in library:
            own = set(q.keywords)
            expected = set(included) <= own and not (own & set(excluded))
            assert matches(q, spec) is expected


class TestSelectors:

    def test_year_unknown_matches_only_unknown(self, library):
        spec = FilterSpec().with_year(UNKNOWN_YEAR)
        assert _ids(filter_questions(library, spec)) == ["b"]

    def test_numeric_year_never_matches_unknown(self, library):
        spec = FilterSpec().with_year(2021)
        assert _ids(filter_questions(library, spec)) == ["a"]

    def test_paper_type_selector(self, library):
        spec = FilterSpec().with_paper_type(PaperType.PAPER_2)
        assert _ids(filter_questions(library, spec)) == ["p2"]

    def test_difficulty_selector(self, library):
        spec = FilterSpec().with_difficulty(Difficulty.EASY)
        assert _ids(filter_questions(library, spec)) == ["a"]


class TestFreeText:

    def test_empty_query_matches_all(self, library):
        assert len(filter_questions(library, FilterSpec())) == len(library)

    def test_query_is_case_insensitive_substring_of_keyword(self, library):
        spec = FilterSpec().with_query("MOMENT")
        assert _ids(filter_questions(library, spec)) == ["p2"]

    def test_query_matches_topic(self, library):
        assert _ids(filter_questions(library, FilterSpec().with_query("d.1"))) == ["ab"]

    def test_query_matches_question_number(self, library):
        assert _ids(filter_questions(library, FilterSpec().with_query("12"))) == ["ab"]

    def test_query_when_no_match_then_empty(self, library):
        assert filter_questions(library, FilterSpec().with_query("zzz")) == []


class TestOrdering:

    def test_filter_preserves_input_order(self, library):
        reversed_input = list(reversed(library))
        assert _ids(filter_questions(reversed_input, FilterSpec())) == _ids(reversed_input)

    def test_sort_newest_first(self, library):
        ordered = sort_newest_first(library)
        assert ordered[0].id == "p2"
        assert ordered[-1].id == "none"
        # equal timestamps keep input order
        assert _ids(ordered[1:4]) == ["ab", "a", "b"]
