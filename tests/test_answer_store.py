"""Tests for the answer store."""

import pytest

from eligibility.answer_store import Answer, AnswerStore


class TestUpsert:
    """Replace-by-id semantics."""

    def test_upsert_adds_new_answer(self):
        store = AnswerStore()
        store.upsert("q1", True)

        assert store.get("q1") is True
        assert store.count() == 1

    def test_upsert_same_id_keeps_one_entry(self):
        """Upserting the same id twice leaves a single entry with the last value."""
        store = AnswerStore()
        store.upsert("q1", "first")
        once = store.count()
        store.upsert("q1", "second")

        assert store.count() == once == 1
        assert store.get("q1") == "second"

    @pytest.mark.parametrize("first,second", [
        (True, False),
        (0, 5),
        ("", "text"),
        (["A"], []),
    ])
    def test_last_value_wins(self, first, second):
        store = AnswerStore()
        store.upsert("q", first)
        store.upsert("q", second)

        assert [a.answer for a in store] == [second]

    def test_replaced_answer_moves_to_end(self):
        store = AnswerStore()
        store.upsert("q1", True)
        store.upsert("q2", True)
        store.upsert("q1", False)

        assert [a.question_id for a in store] == ["q2", "q1"]

    def test_list_answers_are_copied(self):
        values = ["A"]
        store = AnswerStore()
        store.upsert("q", values)
        values.append("B")

        assert store.get("q") == ["A"]


class TestLookup:

    def test_get_missing_returns_none(self):
        assert AnswerStore().get("missing") is None

    def test_false_and_zero_are_stored(self):
        store = AnswerStore()
        store.upsert("bool", False)
        store.upsert("num", 0)

        assert store.has("bool")
        assert "num" in store
        assert store.get("bool") is False
        assert store.get("num") == 0

    def test_as_dict(self):
        store = AnswerStore([Answer("a", 1), Answer("b", "x")])
        assert store.as_dict() == {"a": 1, "b": "x"}


class TestCopyAndPayload:

    def test_copy_is_independent(self):
        store = AnswerStore()
        store.upsert("q1", True)
        clone = store.copy()
        clone.upsert("q2", False)

        assert len(store) == 1
        assert len(clone) == 2
        assert store != clone

    def test_equality(self):
        a = AnswerStore([Answer("q1", True)])
        b = AnswerStore([Answer("q1", True)])
        assert a == b

    def test_to_payload_uses_camel_case(self):
        store = AnswerStore()
        store.upsert("q1", ["A", "B"])
        store.upsert("q2", 3)

        assert store.to_payload() == [
            {"questionId": "q1", "answer": ["A", "B"]},
            {"questionId": "q2", "answer": 3},
        ]

    def test_from_payload_collapses_duplicates(self):
        store = AnswerStore.from_payload([
            {"questionId": "q1", "answer": True},
            {"questionId": "q1", "answer": False},
        ])
        assert store.count() == 1
        assert store.get("q1") is False
