"""
Tests for rule-based topic tagging.
"""

import pytest

from qbank_toolkit.core.models import Question
from qbank_toolkit.storage import TransactionError
from qbank_toolkit.tagging import (
    AutoTagRule,
    apply_rule,
    find_candidates,
    run_auto_tag,
    suggest_tags,
)


@pytest.fixture
def snapshot(make_question):
    return [
        make_question("w1", keywords=("waves",), topics=()),
        make_question("w2", keywords=("waves",), topics=("B.4",)),
        make_question("f1", keywords=("forces",), topics=()),
    ]


class TestAutoTagRule:

    def test_create_trims_and_dedups(self):
        rule = AutoTagRule.create(" B.4 ", ["waves", " waves ", "", "optics"])
        assert rule.target_topic == "B.4"
        assert rule.trigger_keywords == ("waves", "optics")

    @pytest.mark.parametrize(
        "topic,triggers",
        [("", ["waves"]), ("B.4", []), ("  ", ["waves"]), ("B.4", ["  "])],
    )
    def test_is_empty(self, topic, triggers):
        assert AutoTagRule.create(topic, triggers).is_empty


class TestApplyRule:

    def test_only_untagged_matching_records_change(self, snapshot):
        rule = AutoTagRule.create("B.4", ["waves"])
        assert [q.id for q in find_candidates(snapshot, rule)] == ["w1"]

        updated = apply_rule(snapshot, rule)
        assert len(updated) == 1
        assert updated[0].id == "w1"
        assert updated[0].topics == ("B.4",)
        assert updated[0].keywords == ("waves",)

    def test_any_trigger_suffices(self, snapshot):
        rule = AutoTagRule.create("X.1", ["waves", "forces"])
        assert [q.id for q in apply_rule(snapshot, rule)] == ["w1", "w2", "f1"]

    def test_record_built_with_lists_is_tagged(self):
        q = Question.paper1(id="w", created_at=0, keywords=["waves"], topics=[])
        updated = apply_rule([q], AutoTagRule.create("B.4", ["waves"]))
        assert updated[0].topics == ("B.4",)

    def test_empty_rule_matches_nothing(self, snapshot):
        assert apply_rule(snapshot, AutoTagRule.create("B.4", [])) == []
        assert apply_rule(snapshot, AutoTagRule.create("", ["waves"])) == []


class TestRunAutoTag:

    def test_run_persists_updates(self, store, snapshot):
        store.bulk_put(snapshot)
        rule = AutoTagRule.create("B.4", ["waves"])

        updated = run_auto_tag(store, store.get_all(), rule)

        assert [q.id for q in updated] == ["w1"]
        assert store.get("w1").topics == ("B.4",)
        assert store.get("w2").topics == ("B.4",)
        assert store.get("f1").topics == ()

    def test_second_run_is_noop(self, store, snapshot):
        store.bulk_put(snapshot)
        rule = AutoTagRule.create("B.4", ["waves"])
        run_auto_tag(store, store.get_all(), rule)

        before = sorted(store.get_all(), key=lambda q: q.id)
        assert run_auto_tag(store, store.get_all(), rule) == []
        assert sorted(store.get_all(), key=lambda q: q.id) == before

    def test_run_when_batch_fails_then_no_record_tagged(self, store, snapshot, monkeypatch):
        store.bulk_put(snapshot)
        rule = AutoTagRule.create("Z.9", ["waves", "forces"])

        original = store._write_record
        calls = []

        def failing_write(conn, question):
            calls.append(question.id)
            if len(calls) == 2:
                raise ValueError("rejected")
            original(conn, question)

        monkeypatch.setattr(store, "_write_record", failing_write)
        with pytest.raises(TransactionError):
            run_auto_tag(store, store.get_all(), rule)
        monkeypatch.undo()

        assert all("Z.9" not in q.topics for q in store.get_all())


class TestSuggestTags:

    def test_case_insensitive_substring(self):
        assert suggest_tags(["Waves", "wavelength", "forces"], "WAV") == ["Waves", "wavelength"]

    def test_excludes_already_chosen(self):
        assert suggest_tags(["waves", "wavelength"], "wave", exclude=["waves"]) == ["wavelength"]

    def test_respects_limit(self):
        tags = [f"tag{i}" for i in range(10)]
        assert suggest_tags(tags, "tag", limit=3) == ["tag0", "tag1", "tag2"]
