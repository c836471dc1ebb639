"""Heuristic Score Estimator.

A quick, client-side estimate shown while the user is still answering.
It is not the eligibility result: the authoritative score comes back from
the assessment service and is expected to differ.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence

from eligibility.answer_store import AnswerStore
from eligibility.catalog import EndorsingBody, Question

BASE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100

TRUE_MULTIPLIER = 5
TEXT_MULTIPLIER = 4
PER_OPTION_MULTIPLIER = 3
NUMBER_MULTIPLIER = 4


@dataclass(frozen=True)
class EstimatedScore:
    """Live score estimate, always labelled as an estimate."""
    value: int
    label: str = "Estimated"

    @property
    def band(self) -> str:
        if self.value >= 80:
            return "strong"
        if self.value >= 60:
            return "good"
        if self.value >= 40:
            return "fair"
        return "weak"

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "label": self.label, "band": self.band}


def answer_points(weight: int, answer: Any) -> int:
    """Points one answer contributes. Booleans are tested before numbers."""
    if isinstance(answer, bool):
        return weight * TRUE_MULTIPLIER if answer else 0
    if isinstance(answer, str):
        return weight * TEXT_MULTIPLIER if answer else 0
    if isinstance(answer, (list, tuple)):
        return weight * (len(answer) * PER_OPTION_MULTIPLIER) if answer else 0
    if isinstance(answer, (int, float)):
        return weight * NUMBER_MULTIPLIER if answer > 0 else 0
    return 0


def estimate_score(active_questions: Sequence[Question], answers: AnswerStore) -> EstimatedScore:
    """Score the answers to the active questions, clamped to 0-100.

    Answers to questions outside ``active_questions`` are ignored.
    """
    weights = {q.id: q.weight for q in active_questions}

    score = BASE_SCORE
    for answer in answers:
        weight = weights.get(answer.question_id)
        if weight is None:
            continue
        score += answer_points(weight, answer.answer)

    return EstimatedScore(min(MAX_SCORE, max(MIN_SCORE, score)))


_BODY_MILESTONES = {
    EndorsingBody.TECH_NATION: "Tech Criteria Assessment!",
    EndorsingBody.ARTS_COUNCIL: "Arts Excellence Review!",
    EndorsingBody.BRITISH_ACADEMY: "Academic Merit Evaluation!",
    EndorsingBody.ROYAL_SOCIETY: "Scientific Achievement Review!",
    EndorsingBody.ROYAL_ACADEMY_OF_ENGINEERING: "Engineering Innovation Assessment!",
    EndorsingBody.UKRI: "Research Impact Analysis!",
}


def milestone_title(progress_percent: float, body: EndorsingBody = EndorsingBody.NONE) -> str:
    """Encouragement shown above the progress bar."""
    if progress_percent >= 100:
        return "Assessment Complete!"
    if progress_percent >= 75:
        return "Almost There!"
    if progress_percent >= 50:
        return _BODY_MILESTONES.get(body, "Halfway Done!")
    if progress_percent >= 25:
        return "Good Progress!"
    return "Getting Started!"
