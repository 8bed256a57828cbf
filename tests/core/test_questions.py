"""
Unit Tests for Question Model

Tests for the Question dataclass: invariants, constructors and
serialization field names.
"""

import pytest

from qbank_toolkit.core.models import (
    UNKNOWN_YEAR,
    AnswerType,
    Difficulty,
    ExamMonth,
    PaperType,
    Question,
    QuestionPart,
    parse_year,
)


class TestQuestion:
    """Tests for Question dataclass."""

    def test_init_when_valid_paper1_then_creates_question(self, make_question):
        """Valid Paper 1 data should be created successfully."""
        q = make_question("q1", keywords=("calculus",), p1_answer_selection="B")
        assert q.id == "q1"
        assert q.paper_type is PaperType.PAPER_1
        assert q.p1_answer_type is AnswerType.SELECTION
        assert q.parts == ()

    def test_init_when_duplicate_keywords_then_raises_error(self, make_question):
        """Keyword set rejects exact duplicates."""
        with pytest.raises(ValueError, match="duplicate keywords"):
            make_question(keywords=("waves", "waves"))

    def test_init_when_duplicate_topics_then_raises_error(self, make_question):
        """Topic set rejects exact duplicates."""
        with pytest.raises(ValueError, match="duplicate topics"):
            make_question(topics=("B.4", "B.4"))

    def test_init_when_keywords_differ_by_case_then_accepted(self, make_question):
        """Dedup is case-sensitive."""
        q = make_question(keywords=("Waves", "waves"))
        assert q.keywords == ("Waves", "waves")

    def test_init_when_year_none_then_raises_error(self, make_question):
        """Year may not be absent."""
        with pytest.raises(ValueError, match="year must be"):
            make_question(year=None)

    def test_init_when_year_bool_then_raises_error(self, make_question):
        with pytest.raises(ValueError, match="year must be"):
            make_question(year=True)

    def test_init_when_year_unknown_then_accepted(self, make_question):
        q = make_question(year=UNKNOWN_YEAR)
        assert q.year_unknown

    def test_init_when_empty_id_then_raises_error(self):
        with pytest.raises(ValueError, match="id must be"):
            Question(id="", created_at=0, paper_type=PaperType.PAPER_1,
                     p1_answer_type=AnswerType.SELECTION)

    def test_init_when_paper1_has_parts_then_raises_error(self):
        """Paper 1 records cannot carry the Paper 2 payload."""
        with pytest.raises(ValueError, match="cannot have parts"):
            Question(
                id="x", created_at=0, paper_type=PaperType.PAPER_1,
                p1_answer_type=AnswerType.SELECTION,
                parts=(QuestionPart(id="a1", label="a"),),
            )

    def test_init_when_paper2_has_p1_payload_then_raises_error(self):
        """Paper 2 records cannot carry the Paper 1 payload."""
        with pytest.raises(ValueError, match="Paper 1 payload"):
            Question(
                id="x", created_at=0, paper_type=PaperType.PAPER_2,
                p1_answer_selection="A",
                parts=(QuestionPart(id="a1", label="a"),),
            )

    def test_init_when_paper2_without_parts_then_raises_error(self):
        with pytest.raises(ValueError, match="at least one part"):
            Question(id="x", created_at=0, paper_type=PaperType.PAPER_2)

    def test_init_when_bad_answer_token_then_raises_error(self, make_question):
        with pytest.raises(ValueError, match="p1_answer_selection"):
            make_question(p1_answer_selection="E")

    def test_paper2_when_no_parts_given_then_starts_with_part_a(self):
        q = Question.paper2(year=2021)
        assert len(q.parts) == 1
        assert q.parts[0].label == "a"
        assert q.id and q.created_at > 0

    def test_paper2_when_duplicate_part_labels_then_accepted(self):
        """Edited part labels are not required to be unique."""
        q = Question.paper2(parts=(QuestionPart("1", "a"), QuestionPart("2", "a")))
        assert [p.label for p in q.parts] == ["a", "a"]
        assert q.get_part("2").id == "2"

    def test_with_topic_when_missing_then_appends(self, make_question):
        q = make_question(keywords=("waves",), topics=("A.1",), question_number="7")
        tagged = q.with_topic("B.4")
        assert tagged.topics == ("A.1", "B.4")
        assert tagged.keywords == q.keywords
        assert tagged.question_number == "7"
        assert q.topics == ("A.1",)

    def test_init_when_tags_given_as_lists_then_stored_as_tuples(self):
        q = Question.paper1(id="w", created_at=0, keywords=["waves"], topics=[])
        assert q.keywords == ("waves",)
        assert q.topics == ()
        assert q.with_topic("B.4").topics == ("B.4",)
        assert hash(q) == hash(Question.from_dict(q.to_dict()))

    def test_init_when_parts_given_as_list_then_stored_as_tuple(self):
        q = Question.paper2(parts=[QuestionPart("1", "a")])
        assert q.parts == (QuestionPart("1", "a"),)

    def test_with_topic_when_present_then_returns_same(self, make_question):
        q = make_question(topics=("B.4",))
        assert q.with_topic("B.4") is q

    def test_has_any_keyword(self, make_question):
        q = make_question(keywords=("waves", "optics"))
        assert q.has_any_keyword({"optics", "forces"})
        assert not q.has_any_keyword({"forces"})
        assert not q.has_any_keyword(set())

    @pytest.mark.parametrize(
        "year,month,expected",
        [
            (2021, ExamMonth.MAY, "2021 May"),
            (UNKNOWN_YEAR, ExamMonth.NOVEMBER, "November"),
            (2019, ExamMonth.UNKNOWN, "2019"),
            (UNKNOWN_YEAR, ExamMonth.UNKNOWN, "Unknown Date"),
        ],
    )
    def test_date_label(self, make_question, year, month, expected):
        assert make_question(year=year, month=month).date_label == expected


class TestQuestionSerialization:
    """Tests for Question.to_dict / from_dict."""

    def test_to_dict_when_paper1_then_uses_export_field_names(self, make_question):
        q = make_question("q1", keywords=("calculus",), p1_answer_selection="C")
        d = q.to_dict()
        assert d["id"] == "q1"
        assert d["createdAt"] == 1_700_000_000_000
        assert d["paperType"] == "Paper 1"
        assert d["questionNumber"] == ""
        assert d["p1AnswerType"] == "Selection"
        assert d["p1AnswerSelection"] == "C"
        assert "parts" not in d

    def test_to_dict_when_paper2_then_omits_p1_fields(self, paper2_question):
        d = paper2_question.to_dict()
        assert d["paperType"] == "Paper 2/1-b"
        assert [p["label"] for p in d["parts"]] == ["a", "b"]
        assert not any(key.startswith("p1") for key in d)

    def test_to_dict_when_year_unknown_then_keeps_sentinel(self, make_question):
        assert make_question(year=UNKNOWN_YEAR).to_dict()["year"] == "Unknown"

    def test_from_dict_when_topics_missing_then_empty(self, make_question):
        d = make_question(topics=("A.1",)).to_dict()
        del d["topics"]
        assert Question.from_dict(d).topics == ()

    def test_from_dict_restores_paper2(self, paper2_question):
        restored = Question.from_dict(paper2_question.to_dict())
        assert restored == paper2_question
        assert restored.difficulty is Difficulty.HARD


class TestParseYear:
    """Tests for year coercion."""

    def test_parse_year_digit_string(self):
        assert parse_year("2021") == 2021

    def test_parse_year_unknown(self):
        assert parse_year("Unknown") == UNKNOWN_YEAR

    @pytest.mark.parametrize("bad", [None, "", "twenty", True, 20.5])
    def test_parse_year_invalid_then_raises(self, bad):
        with pytest.raises(ValueError):
            parse_year(bad)
