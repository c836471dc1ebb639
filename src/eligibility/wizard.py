"""Wizard Controller.

Walks a user through a route's active questions and hands the finished
answers to the assessment submitter.

The flow is a finite state machine. ``reduce(state, event)`` is a pure
function that computes the next ``WizardState``; ``WizardController`` owns
the current state and runs the one side effect (the submission call).

    ANSWERING --Next on last question--> SUBMITTING
    SUBMITTING --success--> COMPLETED
    SUBMITTING --failure--> FAILED --retry--> SUBMITTING
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from eligibility.answer_store import AnswerStore
from eligibility.assessment_client import (
    AssessmentResult,
    AssessmentSubmitter,
    SubmissionFailure,
)
from eligibility.catalog import (
    AnswerValue,
    EndorsingBody,
    Question,
    VisaRoute,
    is_answer_present,
)
from eligibility.errors import FailureKind
from eligibility.question_filter import filter_questions, selected_endorsing_body
from eligibility.score_estimator import EstimatedScore, estimate_score, milestone_title
from services.logging_config import wizard_id_var

logger = logging.getLogger(__name__)

REQUIRED_ANSWER_MESSAGE = "Please answer this question before continuing."
UNEXPECTED_FAILURE_MESSAGE = "The assessment could not be completed. Please try again."
CANCELLED_MESSAGE = "The assessment request was interrupted. Please try again."


class WizardPhase(Enum):
    ANSWERING = "answering"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    FAILED = "failed"


# =============================================================================
# EVENTS
# =============================================================================

@dataclass(frozen=True)
class AnswerQuestion:
    question_id: str
    answer: AnswerValue


@dataclass(frozen=True)
class NextRequested:
    pass


@dataclass(frozen=True)
class PreviousRequested:
    pass


@dataclass(frozen=True)
class JumpTo:
    index: int


@dataclass(frozen=True)
class SubmissionSucceeded:
    result: AssessmentResult


@dataclass(frozen=True)
class SubmissionFailed:
    failure: SubmissionFailure


@dataclass(frozen=True)
class RetryRequested:
    pass


WizardEvent = Union[
    AnswerQuestion,
    NextRequested,
    PreviousRequested,
    JumpTo,
    SubmissionSucceeded,
    SubmissionFailed,
    RetryRequested,
]


# =============================================================================
# STATE
# =============================================================================

@dataclass(frozen=True)
class WizardState:
    """Snapshot of one wizard. Never mutated; the reducer returns a new one."""
    route: VisaRoute
    answers: AnswerStore = field(default_factory=AnswerStore)
    index: int = 0
    phase: WizardPhase = WizardPhase.ANSWERING
    validation_error: Optional[str] = None
    result: Optional[AssessmentResult] = None
    failure: Optional[SubmissionFailure] = None

    @property
    def active_questions(self) -> List[Question]:
        return filter_questions(self.route, self.answers)

    @property
    def current_question(self) -> Optional[Question]:
        active = self.active_questions
        if 0 <= self.index < len(active):
            return active[self.index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.index >= len(self.active_questions) - 1

    @property
    def progress_percent(self) -> float:
        total = len(self.active_questions)
        if total == 0:
            return 0.0
        return (self.index + 1) / total * 100

    @property
    def estimated_score(self) -> EstimatedScore:
        return estimate_score(self.active_questions, self.answers)

    @property
    def endorsing_body(self) -> EndorsingBody:
        return selected_endorsing_body(self.route, self.answers)

    @property
    def milestone(self) -> str:
        return milestone_title(self.progress_percent, self.endorsing_body)

    def overview(self) -> List[Dict[str, Any]]:
        """Active questions with answered/current flags, for jump navigation."""
        return [
            {
                "index": i,
                "id": q.id,
                "text": q.text,
                "weight": q.weight,
                "importance": q.importance,
                "required": q.required,
                "answered": is_answer_present(self.answers.get(q.id)),
                "current": i == self.index,
            }
            for i, q in enumerate(self.active_questions)
        ]

    def to_dict(self) -> Dict[str, Any]:
        active = self.active_questions
        current = self.current_question
        body = self.endorsing_body
        return {
            "routeId": self.route.id,
            "phase": self.phase.value,
            "index": self.index,
            "totalQuestions": len(active),
            "currentQuestion": current.to_payload() if current else None,
            "currentAnswer": self.answers.get(current.id) if current else None,
            "isLastQuestion": self.is_last_question,
            "progress": round(self.progress_percent, 1),
            "milestone": self.milestone,
            "answeredCount": self.answers.count(),
            "estimatedScore": self.estimated_score.to_dict(),
            "endorsingBody": body.display_name if body is not EndorsingBody.NONE else None,
            "validationError": self.validation_error,
            "answers": self.answers.to_payload(),
            "overview": self.overview(),
            "result": self.result.to_dict() if self.result else None,
            "error": self.failure.to_dict() if self.failure else None,
        }


def _clamp(index: int, active_count: int) -> int:
    if active_count == 0:
        return 0
    return max(0, min(index, active_count - 1))


# =============================================================================
# REDUCER
# =============================================================================

def _on_answer(state: WizardState, event: AnswerQuestion) -> WizardState:
    if state.phase in (WizardPhase.SUBMITTING, WizardPhase.COMPLETED):
        return state

    question = state.route.get_question(event.question_id)
    question.check_answer(event.answer)

    previous_current = state.current_question
    answers = state.answers.copy()
    answers.upsert(event.question_id, event.answer)
    active = filter_questions(state.route, answers)
    index = _clamp(state.index, len(active))

    # Answering the selector on its own page moves straight to the first
    # question of the newly revealed branch.
    if (
        event.question_id == state.route.selector_question_id
        and previous_current is not None
        and previous_current.id == event.question_id
        and is_answer_present(event.answer)
    ):
        position = next(i for i, q in enumerate(active) if q.id == event.question_id)
        index = _clamp(position + 1, len(active))

    return replace(
        state,
        answers=answers,
        index=index,
        phase=WizardPhase.ANSWERING,
        validation_error=None,
        failure=None,
    )


def _on_next(state: WizardState) -> WizardState:
    if state.phase is not WizardPhase.ANSWERING:
        return state

    question = state.current_question
    if question is not None and question.required and not is_answer_present(state.answers.get(question.id)):
        return replace(state, validation_error=REQUIRED_ANSWER_MESSAGE)

    if state.index + 1 < len(state.active_questions):
        return replace(state, index=state.index + 1, validation_error=None)
    return replace(state, phase=WizardPhase.SUBMITTING, validation_error=None)


def _on_previous(state: WizardState) -> WizardState:
    if state.phase not in (WizardPhase.ANSWERING, WizardPhase.FAILED):
        return state
    return replace(
        state,
        index=max(0, state.index - 1),
        phase=WizardPhase.ANSWERING,
        validation_error=None,
        failure=None,
    )


def _on_jump(state: WizardState, event: JumpTo) -> WizardState:
    if state.phase not in (WizardPhase.ANSWERING, WizardPhase.FAILED):
        return state
    if not 0 <= event.index < len(state.active_questions):
        return state
    return replace(
        state,
        index=event.index,
        phase=WizardPhase.ANSWERING,
        validation_error=None,
        failure=None,
    )


def reduce(state: WizardState, event: WizardEvent) -> WizardState:
    """Compute the state that follows ``event``.

    Events that do not apply in the current phase return ``state`` unchanged.
    Raises UnknownQuestionError / InvalidAnswerError for answers the route
    cannot accept.
    """
    if isinstance(event, AnswerQuestion):
        return _on_answer(state, event)
    if isinstance(event, NextRequested):
        return _on_next(state)
    if isinstance(event, PreviousRequested):
        return _on_previous(state)
    if isinstance(event, JumpTo):
        return _on_jump(state, event)

    if isinstance(event, SubmissionSucceeded):
        if state.phase is not WizardPhase.SUBMITTING:
            return state
        return replace(state, phase=WizardPhase.COMPLETED, result=event.result, failure=None)

    if isinstance(event, SubmissionFailed):
        if state.phase is not WizardPhase.SUBMITTING:
            return state
        return replace(state, phase=WizardPhase.FAILED, failure=event.failure)

    if isinstance(event, RetryRequested):
        if state.phase is not WizardPhase.FAILED:
            return state
        return replace(state, phase=WizardPhase.SUBMITTING, failure=None)

    raise TypeError(f"Unsupported wizard event: {event!r}")


# =============================================================================
# CONTROLLER
# =============================================================================

class WizardController:
    """
    Stateful wrapper around ``reduce`` for one user's questionnaire.

    The SUBMITTING phase is entered synchronously, before the submission is
    awaited, so a second ``next()`` issued while a call is in flight is a
    no-op and never sends a duplicate request.
    """

    def __init__(
        self,
        route: VisaRoute,
        submitter: AssessmentSubmitter,
        user_profile: Optional[Dict[str, Any]] = None,
        answers: Optional[AnswerStore] = None,
        wizard_id: Optional[str] = None,
    ):
        self.wizard_id = wizard_id or uuid.uuid4().hex
        self.state = WizardState(route=route, answers=answers.copy() if answers else AnswerStore())
        self.user_profile = user_profile
        self.submitter = submitter
        self._closed = False

    @property
    def route(self) -> VisaRoute:
        return self.state.route

    @property
    def phase(self) -> WizardPhase:
        return self.state.phase

    @property
    def closed(self) -> bool:
        return self._closed

    def dispatch(self, event: WizardEvent) -> WizardState:
        if self._closed:
            return self.state
        self.state = reduce(self.state, event)
        return self.state

    async def load_profile(self) -> None:
        """Fetch the user's saved profile to send with the submission."""
        self.user_profile = await self.submitter.load_user_profile()

    def answer(self, question_id: str, value: AnswerValue) -> WizardState:
        return self.dispatch(AnswerQuestion(question_id, value))

    def previous(self) -> WizardState:
        return self.dispatch(PreviousRequested())

    def jump_to(self, index: int) -> WizardState:
        return self.dispatch(JumpTo(index))

    async def next(self) -> WizardState:
        before = self.state.phase
        self.dispatch(NextRequested())
        if before is WizardPhase.ANSWERING and self.state.phase is WizardPhase.SUBMITTING:
            await self._submit()
        return self.state

    async def retry(self) -> WizardState:
        before = self.state.phase
        self.dispatch(RetryRequested())
        if before is WizardPhase.FAILED and self.state.phase is WizardPhase.SUBMITTING:
            await self._submit()
        return self.state

    def close(self) -> None:
        """Discard the wizard; a submission still in flight is ignored when it returns."""
        self._closed = True

    async def _submit(self) -> None:
        """Run the submission and always leave SUBMITTING, even on a crash or cancellation."""
        token = wizard_id_var.set(self.wizard_id)
        outcome: Optional[Union[AssessmentResult, SubmissionFailure]] = None
        try:
            outcome = await self.submitter.submit(self.state.route, self.state.answers, self.user_profile)
        except Exception:
            logger.exception(f"Assessment submission crashed for wizard {self.wizard_id}")
            outcome = SubmissionFailure(FailureKind.SERVICE, UNEXPECTED_FAILURE_MESSAGE)
        finally:
            wizard_id_var.reset(token)
            if outcome is None:
                logger.warning(f"Assessment submission cancelled for wizard {self.wizard_id}")
                outcome = SubmissionFailure(FailureKind.NETWORK, CANCELLED_MESSAGE)
            self._apply_outcome(outcome)

    def _apply_outcome(self, outcome: Union[AssessmentResult, SubmissionFailure]) -> None:
        if self._closed:
            logger.info(f"Discarding assessment outcome for closed wizard {self.wizard_id}")
            return

        if isinstance(outcome, AssessmentResult):
            self.dispatch(SubmissionSucceeded(outcome))
        else:
            self.dispatch(SubmissionFailed(outcome))
