"""UK Visa Eligibility Engine.

Provides the questionnaire core behind the eligibility checker:
- Visa route catalog with Global Talent endorsing-body branching
- Answer store with replace-by-id semantics
- Question filtering and a live heuristic score estimate
- Wizard state machine driving submission to the AI assessment service
- Endorsement readiness self-check
"""

from eligibility.answer_store import Answer, AnswerStore
from eligibility.assessment_client import (
    AssessmentResult,
    AssessmentSubmitter,
    SubmissionFailure,
    fallback_eligibility_status,
)
from eligibility.catalog import (
    EndorsingBody,
    Question,
    QuestionType,
    RouteCatalog,
    VisaCategory,
    VisaRoute,
)
from eligibility.endorsement_checker import EndorsementChecker, Pathway
from eligibility.errors import FailureKind
from eligibility.question_filter import filter_questions
from eligibility.score_estimator import EstimatedScore, estimate_score
from eligibility.wizard import WizardController, WizardPhase, WizardState, reduce

__all__ = [
    "Answer",
    "AnswerStore",
    "AssessmentResult",
    "AssessmentSubmitter",
    "SubmissionFailure",
    "fallback_eligibility_status",
    "EndorsingBody",
    "Question",
    "QuestionType",
    "RouteCatalog",
    "VisaCategory",
    "VisaRoute",
    "EndorsementChecker",
    "Pathway",
    "FailureKind",
    "filter_questions",
    "EstimatedScore",
    "estimate_score",
    "WizardController",
    "WizardPhase",
    "WizardState",
    "reduce",
]
