"""Visa Route Catalog.

Reference data describing each UK visa route and its eligibility
questions. Routes are built once from the YAML files under
``config/visa_routes`` and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from eligibility.errors import CatalogError, InvalidAnswerError, UnknownQuestionError, UnknownRouteError

AnswerValue = Union[str, int, float, bool, List[str]]


class QuestionType(Enum):
    """Input widget / answer shape of a question."""
    SINGLE = "single"
    MULTIPLE = "multiple"
    BOOLEAN = "boolean"
    NUMBER = "number"
    TEXT = "text"

    @property
    def has_options(self) -> bool:
        return self in (QuestionType.SINGLE, QuestionType.MULTIPLE)


class VisaCategory(Enum):
    WORK = "Work"
    EDUCATION = "Education"
    FAMILY = "Family"
    VISIT = "Visit"
    SETTLEMENT = "Settlement"


class Difficulty(Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class EndorsingBody(Enum):
    """Global Talent endorsing bodies.

    Declaration order is the match order used when resolving a free-text
    selector value, and must not be changed.
    """
    TECH_NATION = "tech_nation"
    ARTS_COUNCIL = "arts_council"
    BRITISH_ACADEMY = "british_academy"
    ROYAL_SOCIETY = "royal_society"
    ROYAL_ACADEMY_OF_ENGINEERING = "royal_academy_of_engineering"
    UKRI = "ukri"
    NONE = "none"

    @property
    def id_prefix(self) -> str:
        return _BODY_PREFIXES.get(self, "")

    @property
    def display_name(self) -> str:
        return _BODY_NAMES.get(self, "")

    @classmethod
    def matching(cls, value: Optional[str]) -> List["EndorsingBody"]:
        """All bodies whose name occurs in ``value``, in match order."""
        if not value:
            return []
        return [body for body, name in _BODY_NAMES.items() if name in value]

    @classmethod
    def resolve(cls, value: Optional[str]) -> "EndorsingBody":
        """Resolve a selector answer to a body; unknown text gives NONE."""
        matches = cls.matching(value)
        return matches[0] if matches else cls.NONE

    @classmethod
    def for_question_id(cls, question_id: str) -> "EndorsingBody":
        for body, prefix in _BODY_PREFIXES.items():
            if question_id.startswith(prefix):
                return body
        return cls.NONE


_BODY_NAMES: Dict[EndorsingBody, str] = {
    EndorsingBody.TECH_NATION: "Tech Nation",
    EndorsingBody.ARTS_COUNCIL: "Arts Council",
    EndorsingBody.BRITISH_ACADEMY: "British Academy",
    EndorsingBody.ROYAL_SOCIETY: "Royal Society",
    EndorsingBody.ROYAL_ACADEMY_OF_ENGINEERING: "Royal Academy of Engineering",
    EndorsingBody.UKRI: "UK Research and Innovation",
}

_BODY_PREFIXES: Dict[EndorsingBody, str] = {
    EndorsingBody.TECH_NATION: "tech-",
    EndorsingBody.ARTS_COUNCIL: "arts-",
    EndorsingBody.BRITISH_ACADEMY: "ba-",
    EndorsingBody.ROYAL_SOCIETY: "rs-",
    EndorsingBody.ROYAL_ACADEMY_OF_ENGINEERING: "rae-",
    EndorsingBody.UKRI: "ukri-",
}


def is_answer_present(answer: Any) -> bool:
    """None, empty strings and empty lists count as unanswered.

    ``False`` and ``0`` are real answers.
    """
    if answer is None:
        return False
    if isinstance(answer, str) and answer == "":
        return False
    if isinstance(answer, (list, tuple)) and len(answer) == 0:
        return False
    return True


@dataclass(frozen=True)
class Question:
    """A single eligibility question."""
    id: str
    text: str
    question_type: QuestionType
    weight: int
    required: bool = True
    options: Tuple[str, ...] = ()
    ukvi_reference: Optional[str] = None
    endorsing_body: EndorsingBody = EndorsingBody.NONE

    @property
    def importance(self) -> str:
        if self.weight >= 8:
            return "high"
        if self.weight >= 5:
            return "medium"
        return "standard"

    def check_answer(self, answer: Any) -> None:
        """Raise InvalidAnswerError if ``answer`` has the wrong shape."""
        qtype = self.question_type

        if qtype is QuestionType.BOOLEAN:
            if not isinstance(answer, bool):
                raise InvalidAnswerError(self.id, "expected true or false")

        elif qtype is QuestionType.NUMBER:
            if isinstance(answer, bool) or not isinstance(answer, (int, float)):
                raise InvalidAnswerError(self.id, "expected a number")

        elif qtype is QuestionType.TEXT:
            if not isinstance(answer, str):
                raise InvalidAnswerError(self.id, "expected text")

        elif qtype is QuestionType.SINGLE:
            if not isinstance(answer, str):
                raise InvalidAnswerError(self.id, "expected one option")
            if answer and answer not in self.options:
                raise InvalidAnswerError(self.id, f"invalid option: {answer}")

        elif qtype is QuestionType.MULTIPLE:
            if not isinstance(answer, list) or not all(isinstance(a, str) for a in answer):
                raise InvalidAnswerError(self.id, "expected a list of options")
            for a in answer:
                if a not in self.options:
                    raise InvalidAnswerError(self.id, f"invalid option: {a}")

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "type": self.question_type.value,
            "required": self.required,
            "weight": self.weight,
        }
        if self.options:
            payload["options"] = list(self.options)
        if self.ukvi_reference:
            payload["ukviReference"] = self.ukvi_reference
        if self.endorsing_body is not EndorsingBody.NONE:
            payload["endorsingBody"] = self.endorsing_body.display_name
        return payload


@dataclass(frozen=True)
class Requirements:
    essential: Tuple[str, ...] = ()
    desirable: Tuple[str, ...] = ()
    disqualifying: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EligibilityCriterion:
    category: str
    criteria: Tuple[str, ...]
    ukvi_reference: str


@dataclass(frozen=True)
class VisaRoute:
    """A visa route with its metadata and ordered questions."""
    id: str
    name: str
    description: str
    category: VisaCategory
    difficulty: Difficulty
    processing_time: str
    cost: int
    ukvi_url: str
    ukvi_guidance_url: str
    last_updated: str
    questions: Tuple[Question, ...]
    requirements: Requirements = field(default_factory=Requirements)
    eligibility_criteria: Tuple[EligibilityCriterion, ...] = ()
    min_salary: Optional[int] = None
    selector_question_id: Optional[str] = None

    @property
    def has_branching(self) -> bool:
        return self.selector_question_id is not None

    def get_question(self, question_id: str) -> Question:
        for question in self.questions:
            if question.id == question_id:
                return question
        raise UnknownQuestionError(question_id, self.id)

    def has_question(self, question_id: str) -> bool:
        return any(q.id == question_id for q in self.questions)

    def validate(self) -> None:
        """Check catalog invariants, raising CatalogError on the first breach."""
        seen = set()
        for question in self.questions:
            if question.id in seen:
                raise CatalogError(f"duplicate question id '{question.id}'", self.id)
            seen.add(question.id)

            if question.weight <= 0:
                raise CatalogError(f"question '{question.id}' weight must be positive", self.id)

            if question.question_type.has_options and not question.options:
                raise CatalogError(f"question '{question.id}' needs options", self.id)
            if not question.question_type.has_options and question.options:
                raise CatalogError(
                    f"question '{question.id}' of type {question.question_type.value} "
                    "cannot have options",
                    self.id,
                )

            if question.endorsing_body is not EndorsingBody.for_question_id(question.id):
                raise CatalogError(
                    f"question '{question.id}' is tagged {question.endorsing_body.value} "
                    "but its id prefix says otherwise",
                    self.id,
                )

        if self.selector_question_id is None:
            return

        if self.selector_question_id not in seen:
            raise CatalogError(f"selector '{self.selector_question_id}' is not a question", self.id)

        selector = self.get_question(self.selector_question_id)
        if selector.question_type is not QuestionType.SINGLE:
            raise CatalogError("selector question must be single choice", self.id)
        if selector.endorsing_body is not EndorsingBody.NONE:
            raise CatalogError("selector question cannot be body-specific", self.id)
        for option in selector.options:
            matches = EndorsingBody.matching(option)
            if len(matches) != 1:
                raise CatalogError(
                    f"selector option '{option}' matches {len(matches)} endorsing bodies",
                    self.id,
                )

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "difficulty": self.difficulty.value,
            "processingTime": self.processing_time,
            "cost": self.cost,
            "ukviUrl": self.ukvi_url,
            "questionCount": len(self.questions),
        }

    def to_payload(self) -> Dict[str, Any]:
        """Full route definition in the shape the assessment service reads."""
        payload = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category.value,
            "difficulty": self.difficulty.value,
            "processingTime": self.processing_time,
            "cost": self.cost,
            "ukviUrl": self.ukvi_url,
            "ukviGuidanceUrl": self.ukvi_guidance_url,
            "lastUpdated": self.last_updated,
            "questions": [q.to_payload() for q in self.questions],
            "requirements": {
                "essential": list(self.requirements.essential),
                "desirable": list(self.requirements.desirable),
                "disqualifying": list(self.requirements.disqualifying),
            },
            "eligibilityCriteria": [
                {
                    "category": c.category,
                    "criteria": list(c.criteria),
                    "ukviReference": c.ukvi_reference,
                }
                for c in self.eligibility_criteria
            ],
        }
        if self.min_salary is not None:
            payload["minSalary"] = self.min_salary
        return payload


class RouteCatalog:
    """Ordered, read-only collection of visa routes."""

    def __init__(self, routes: Sequence[VisaRoute]):
        self._routes: Dict[str, VisaRoute] = {}
        for route in routes:
            if route.id in self._routes:
                raise CatalogError(f"duplicate route id '{route.id}'")
            route.validate()
            self._routes[route.id] = route

    def get(self, route_id: str) -> VisaRoute:
        try:
            return self._routes[route_id]
        except KeyError:
            raise UnknownRouteError(route_id) from None

    def all(self) -> List[VisaRoute]:
        return list(self._routes.values())

    def by_category(self, category: VisaCategory) -> List[VisaRoute]:
        return [r for r in self._routes.values() if r.category is category]

    def __contains__(self, route_id: object) -> bool:
        return route_id in self._routes

    def __len__(self) -> int:
        return len(self._routes)
