"""Answer Store.

Holds the answers collected by one wizard, one entry per question id.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional

from eligibility.catalog import AnswerValue


@dataclass(frozen=True)
class Answer:
    question_id: str
    answer: AnswerValue

    def to_payload(self) -> Dict[str, Any]:
        value = list(self.answer) if isinstance(self.answer, list) else self.answer
        return {"questionId": self.question_id, "answer": value}


class AnswerStore:
    """Ordered answers with replace-by-id semantics.

    An upsert drops the previous entry for the id and appends the new one,
    so the most recently changed answer is always last.
    """

    def __init__(self, answers: Optional[Iterable[Answer]] = None):
        self._answers: List[Answer] = []
        for answer in answers or ():
            self.upsert(answer.question_id, answer.answer)

    def upsert(self, question_id: str, answer: AnswerValue) -> None:
        if isinstance(answer, list):
            answer = list(answer)
        self._answers = [a for a in self._answers if a.question_id != question_id]
        self._answers.append(Answer(question_id, answer))

    def get(self, question_id: str) -> Optional[AnswerValue]:
        """Return the stored answer, or None when the question is unanswered."""
        for answer in self._answers:
            if answer.question_id == question_id:
                return answer.answer
        return None

    def has(self, question_id: str) -> bool:
        return any(a.question_id == question_id for a in self._answers)

    def count(self) -> int:
        return len(self._answers)

    def copy(self) -> "AnswerStore":
        return AnswerStore(self._answers)

    def as_dict(self) -> Dict[str, AnswerValue]:
        return {a.question_id: a.answer for a in self._answers}

    def to_payload(self) -> List[Dict[str, Any]]:
        return [a.to_payload() for a in self._answers]

    @classmethod
    def from_payload(cls, items: Iterable[Dict[str, Any]]) -> "AnswerStore":
        return cls(Answer(item["questionId"], item["answer"]) for item in items)

    def __iter__(self) -> Iterator[Answer]:
        return iter(list(self._answers))

    def __len__(self) -> int:
        return len(self._answers)

    def __contains__(self, question_id: object) -> bool:
        return any(a.question_id == question_id for a in self._answers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AnswerStore):
            return NotImplemented
        return self._answers == other._answers

    def __repr__(self) -> str:
        return f"AnswerStore({self._answers!r})"
