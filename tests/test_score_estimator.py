"""Tests for the heuristic score estimator."""

import itertools

import pytest

from eligibility.answer_store import AnswerStore
from eligibility.catalog import EndorsingBody
from eligibility.score_estimator import (
    BASE_SCORE,
    EstimatedScore,
    answer_points,
    estimate_score,
    milestone_title,
)
from tests.helpers.builders import boolean_question, choice_question


class TestAnswerPoints:

    @pytest.mark.parametrize("answer,expected", [
        (True, 50),
        (False, 0),
        ("yes", 40),
        ("", 0),
        (["A", "B"], 60),
        ([], 0),
        (3, 40),
        (2.5, 40),
        (0, 0),
        (-1, 0),
        (None, 0),
    ])
    def test_points_for_weight_ten(self, answer, expected):
        assert answer_points(10, answer) == expected

    def test_booleans_are_not_numbers(self):
        """True must score as a boolean, not as the number 1."""
        assert answer_points(3, True) == 15


class TestEstimateScore:

    def test_three_booleans_clamped_to_100(self, three_question_route):
        """50 + 10*5 + 0 + 8*5 = 140, clamped to 100."""
        answers = AnswerStore()
        answers.upsert("q1", True)
        answers.upsert("q2", False)
        answers.upsert("q3", True)

        score = estimate_score(three_question_route.questions, answers)

        assert score.value == 100
        assert score.label == "Estimated"

    def test_no_answers_gives_base_score(self, three_question_route):
        assert estimate_score(three_question_route.questions, AnswerStore()).value == BASE_SCORE

    def test_answers_outside_active_list_are_ignored(self, three_question_route):
        answers = AnswerStore()
        answers.upsert("hidden", True)
        answers.upsert("q2", True)

        assert estimate_score(three_question_route.questions, answers).value == 50 + 5 * 5

    def test_hidden_branch_answers_do_not_score(self, global_talent):
        from eligibility.question_filter import filter_questions

        answers = AnswerStore()
        answers.upsert("tech-cutting-edge-work", True)
        active = filter_questions(global_talent, answers)

        assert estimate_score(active, answers).value == BASE_SCORE

    def test_bounds_over_every_boolean_combination(self, three_question_route):
        for values in itertools.product([True, False, None], repeat=3):
            answers = AnswerStore()
            for qid, value in zip(("q1", "q2", "q3"), values):
                if value is not None:
                    answers.upsert(qid, value)
            value = estimate_score(three_question_route.questions, answers).value
            assert 0 <= value <= 100

    def test_lower_bound_never_negative(self):
        questions = [boolean_question("q", weight=1)]
        answers = AnswerStore()
        answers.upsert("q", False)
        assert estimate_score(questions, answers).value >= 0

    def test_deterministic(self):
        questions = [
            boolean_question("b", weight=2),
            choice_question("m", ["A", "B", "C"], multiple=True, weight=3),
        ]
        answers = AnswerStore()
        answers.upsert("b", True)
        answers.upsert("m", ["A", "C"])

        first = estimate_score(questions, answers)
        second = estimate_score(questions, answers)

        assert first == second
        assert first.value == 50 + 2 * 5 + 3 * 2 * 3


class TestScoreBands:

    @pytest.mark.parametrize("value,band", [
        (100, "strong"),
        (80, "strong"),
        (79, "good"),
        (60, "good"),
        (59, "fair"),
        (40, "fair"),
        (39, "weak"),
        (0, "weak"),
    ])
    def test_band(self, value, band):
        assert EstimatedScore(value).band == band

    def test_to_dict(self):
        assert EstimatedScore(72).to_dict() == {"value": 72, "label": "Estimated", "band": "good"}


class TestMilestones:

    @pytest.mark.parametrize("progress,title", [
        (0, "Getting Started!"),
        (24.9, "Getting Started!"),
        (25, "Good Progress!"),
        (50, "Halfway Done!"),
        (75, "Almost There!"),
        (100, "Assessment Complete!"),
    ])
    def test_generic_titles(self, progress, title):
        assert milestone_title(progress) == title

    def test_body_specific_halfway_title(self):
        assert milestone_title(60, EndorsingBody.TECH_NATION) == "Tech Criteria Assessment!"
        assert milestone_title(60, EndorsingBody.UKRI) == "Research Impact Analysis!"

    def test_body_title_only_at_halfway(self):
        assert milestone_title(80, EndorsingBody.ROYAL_SOCIETY) == "Almost There!"
