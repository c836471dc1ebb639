"""
Endorsement Checker.

Self-assessment against a Global Talent endorsing body's criteria. The user
picks a field (which selects the body), a pathway, ticks the criteria they
meet and fills in a short profile; the checker turns that into a readiness
score and a recommendation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple


class Pathway(Enum):
    TALENT = "talent"
    PROMISE = "promise"


TALENT_PROFILE_BONUS = 10
PROMISE_PROFILE_BONUS = 5

PROFILE_FIELDS = ("experience", "achievements", "recognition", "leadership")


@dataclass(frozen=True)
class EndorsementBodyProfile:
    """An endorsing body and the criteria it assesses."""
    id: str
    name: str
    field: str
    description: str
    pathways: Tuple[str, ...]
    talent_criteria: Tuple[str, ...]
    promise_criteria: Tuple[str, ...]
    website: str
    email: Optional[str] = None
    phone: Optional[str] = None

    def criteria_for(self, pathway: Pathway) -> Tuple[str, ...]:
        if pathway is Pathway.TALENT:
            return self.talent_criteria
        return self.promise_criteria

    def to_dict(self) -> Dict[str, Any]:
        contact = {"website": self.website}
        if self.email:
            contact["email"] = self.email
        if self.phone:
            contact["phone"] = self.phone
        return {
            "id": self.id,
            "name": self.name,
            "field": self.field,
            "description": self.description,
            "pathways": list(self.pathways),
            "criteria": {
                "exceptionalTalent": list(self.talent_criteria),
                "exceptionalPromise": list(self.promise_criteria),
            },
            "contactInfo": contact,
        }


@dataclass
class ApplicantProfile:
    experience: str = ""
    achievements: str = ""
    recognition: str = ""
    leadership: str = ""


@dataclass(frozen=True)
class Recommendation:
    status: str
    message: str


@dataclass
class EndorsementChecker:
    """Tracks one user's endorsement self-assessment."""

    bodies: Sequence[EndorsementBodyProfile]
    selected_field: Optional[str] = None
    selected_body: Optional[EndorsementBodyProfile] = None
    pathway: Optional[Pathway] = None
    checklist: Dict[str, bool] = field(default_factory=dict)
    profile: ApplicantProfile = field(default_factory=ApplicantProfile)

    @property
    def fields(self) -> List[str]:
        """Distinct fields in catalog order."""
        seen: List[str] = []
        for body in self.bodies:
            if body.field not in seen:
                seen.append(body.field)
        return seen

    def select_field(self, field_name: str) -> EndorsementBodyProfile:
        for body in self.bodies:
            if body.field == field_name:
                self.selected_field = field_name
                self.selected_body = body
                return body
        raise ValueError(f"Unknown endorsement field: {field_name}")

    def select_pathway(self, pathway: Pathway) -> None:
        """Choose a pathway and reset the checklist to its criteria, all unticked."""
        if self.selected_body is None:
            raise ValueError("Select a field before choosing a pathway")
        self.pathway = pathway
        criteria = self.selected_body.criteria_for(pathway)
        self.checklist = {f"{pathway.value}-{i}": False for i in range(len(criteria))}

    def set_criterion(self, key: str, checked: bool) -> None:
        if key not in self.checklist:
            raise KeyError(key)
        self.checklist[key] = checked

    def update_profile(self, **values: str) -> None:
        for name, value in values.items():
            if name not in PROFILE_FIELDS:
                raise ValueError(f"Unknown profile field: {name}")
            setattr(self.profile, name, value)

    def score(self) -> int:
        score = 0
        if self.checklist:
            ticked = sum(1 for checked in self.checklist.values() if checked)
            score = round(ticked / len(self.checklist) * 100)

        p = self.profile
        if self.pathway is Pathway.TALENT:
            if p.experience and p.achievements and p.recognition:
                score += TALENT_PROFILE_BONUS
        elif self.pathway is Pathway.PROMISE:
            if p.experience and p.achievements:
                score += PROMISE_PROFILE_BONUS

        return min(100, score)

    def recommendation(self) -> Recommendation:
        score = self.score()
        if score >= 80:
            return Recommendation("excellent", "You have an excellent chance of endorsement approval")
        if score >= 60:
            return Recommendation("good", "You have a good chance with some improvements")
        return Recommendation("needs-work", "Significant improvements needed before applying")

    def to_dict(self) -> Dict[str, Any]:
        recommendation = self.recommendation()
        return {
            "field": self.selected_field,
            "body": self.selected_body.to_dict() if self.selected_body else None,
            "pathway": self.pathway.value if self.pathway else None,
            "checklist": dict(self.checklist),
            "score": self.score(),
            "recommendation": {
                "status": recommendation.status,
                "message": recommendation.message,
            },
        }
