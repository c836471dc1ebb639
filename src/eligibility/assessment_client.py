"""Assessment Submitter.

Sends a completed questionnaire to the AI assessment edge function and
turns whatever comes back into either an ``AssessmentResult`` or a
classified ``SubmissionFailure``. Nothing network-related escapes
``submit()`` as an exception.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from auth.supabase_auth import SessionProvider
from config.settings import SupabaseSettings, get_supabase_settings
from eligibility.answer_store import AnswerStore
from eligibility.catalog import VisaRoute
from eligibility.errors import (
    AssessmentSubmissionError,
    AuthenticationError,
    FailureKind,
    MalformedResponseError,
    NetworkError,
    ServiceError,
)
from services.logging_config import AssessmentLogger

logger = logging.getLogger(__name__)

READY_TO_APPLY_SCORE = 60


def fallback_eligibility_status(score: float) -> str:
    """Status label for a score when the service did not provide one."""
    if score >= 85:
        return "Highly Likely"
    if score >= 70:
        return "Likely"
    if score >= 50:
        return "Possible"
    return "Unlikely"


class _AssessmentBody(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    overall_score: float = Field(alias="overallScore")
    eligibility_status: Optional[str] = Field(default=None, alias="eligibilityStatus")


class _AssessmentResponse(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    success: bool
    assessment: _AssessmentBody
    action_plan: Any = Field(default=None, alias="actionPlan")
    assessment_id: Optional[str] = Field(default=None, alias="assessmentId")
    ukvi_application_url: Optional[str] = Field(default=None, alias="ukviApplicationUrl")
    timestamp: Optional[str] = None


@dataclass(frozen=True)
class AssessmentResult:
    """Authoritative assessment returned by the service."""
    overall_score: float
    eligibility_status: str
    assessment: Dict[str, Any]
    action_plan: Any = None
    assessment_id: Optional[str] = None
    ukvi_application_url: Optional[str] = None
    timestamp: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def ready_to_apply(self) -> bool:
        return self.overall_score >= READY_TO_APPLY_SCORE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallScore": self.overall_score,
            "eligibilityStatus": self.eligibility_status,
            "assessment": self.assessment,
            "actionPlan": self.action_plan,
            "assessmentId": self.assessment_id,
            "ukviApplicationUrl": self.ukvi_application_url,
            "timestamp": self.timestamp,
            "readyToApply": self.ready_to_apply,
        }


@dataclass(frozen=True)
class SubmissionFailure:
    """Why a submission did not produce an assessment."""
    kind: FailureKind
    message: str
    status_code: Optional[int] = None

    @property
    def requires_reauthentication(self) -> bool:
        return self.kind.requires_reauthentication

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    @classmethod
    def from_error(cls, error: AssessmentSubmissionError) -> "SubmissionFailure":
        return cls(error.kind, error.message, error.status_code)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "statusCode": self.status_code,
            "retryable": self.retryable,
            "requiresReauthentication": self.requires_reauthentication,
        }


SubmissionOutcome = Union[AssessmentResult, SubmissionFailure]


def parse_assessment(body: Any) -> AssessmentResult:
    """Validate a response body, raising MalformedResponseError if unusable."""
    if not isinstance(body, dict) or body.get("success") is not True:
        raise MalformedResponseError("Invalid assessment response from AI")
    if not body.get("assessment"):
        raise MalformedResponseError("Invalid assessment response from AI")

    try:
        parsed = _AssessmentResponse.model_validate(body)
    except ValidationError as exc:
        logger.warning("Assessment response failed validation: %s", exc.errors())
        raise MalformedResponseError("Assessment response is missing required fields") from exc

    score = parsed.assessment.overall_score
    status = parsed.assessment.eligibility_status or fallback_eligibility_status(score)
    return AssessmentResult(
        overall_score=score,
        eligibility_status=status,
        assessment=dict(body["assessment"]),
        action_plan=parsed.action_plan,
        assessment_id=parsed.assessment_id,
        ukvi_application_url=parsed.ukvi_application_url,
        timestamp=parsed.timestamp,
        raw=body,
    )


class AssessmentSubmitter:
    """
    Client for the assessment edge function.

    Args:
        session_provider: Supplies the bearer token for the current user.
        settings: Supabase project settings. Defaults to the environment.
        client: Optional shared ``httpx.AsyncClient``; a short-lived client is
            opened per call when omitted.
    """

    def __init__(
        self,
        session_provider: SessionProvider,
        settings: Optional[SupabaseSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._session_provider = session_provider
        self._settings = settings or get_supabase_settings()
        self._client = client

    @property
    def assess_url(self) -> str:
        return f"{self._settings.functions_url}/assess-eligibility"

    @property
    def profile_url(self) -> str:
        return f"{self._settings.functions_url}/profile"

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(method, url, **kwargs)
        async with httpx.AsyncClient(timeout=self._settings.request_timeout) as client:
            return await client.request(method, url, **kwargs)

    @staticmethod
    def _headers(token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def load_user_profile(self) -> Optional[Dict[str, Any]]:
        """Fetch the user's saved profile; None if it cannot be loaded."""
        token = await self._session_provider.get_access_token()
        if not token:
            logger.debug("No valid session found, skipping profile load")
            return None

        try:
            response = await self._request("GET", self.profile_url, headers=self._headers(token))
        except httpx.RequestError as exc:
            logger.warning("Error loading user profile: %s", exc)
            return None

        if response.status_code >= 300:
            logger.warning("Failed to load user profile: %s", response.status_code)
            return None

        try:
            profile = response.json().get("profile")
        except (ValueError, AttributeError):
            logger.warning("User profile response was not valid JSON")
            return None
        return profile if isinstance(profile, dict) else None

    async def submit(
        self,
        route: VisaRoute,
        answers: AnswerStore,
        user_profile: Optional[Dict[str, Any]] = None,
    ) -> SubmissionOutcome:
        """Submit answers for assessment. Never raises for transport or service errors."""
        audit = AssessmentLogger(route.id)
        audit.start(answer_count=answers.count(), has_profile=bool(user_profile))

        try:
            result = await self._submit(route, answers, user_profile)
        except AssessmentSubmissionError as exc:
            audit.log_failure(exc.kind.value, exc.message, exc.status_code)
            return SubmissionFailure.from_error(exc)

        audit.log_success(result.assessment_id, result.overall_score, result.eligibility_status)
        return result

    async def _submit(
        self,
        route: VisaRoute,
        answers: AnswerStore,
        user_profile: Optional[Dict[str, Any]],
    ) -> AssessmentResult:
        token = await self._session_provider.get_access_token()
        if not token:
            raise AuthenticationError("Please sign in to continue with the assessment")

        payload = {
            "visaRoute": route.to_payload(),
            "answers": answers.to_payload(),
            "userProfile": user_profile or {},
        }

        try:
            response = await self._request(
                "POST", self.assess_url, json=payload, headers=self._headers(token)
            )
        except httpx.TimeoutException as exc:
            raise NetworkError("The assessment request timed out. Please try again.") from exc
        except httpx.RequestError as exc:
            raise NetworkError("Network error. Please check your connection and try again.") from exc

        if response.status_code == 401:
            raise AuthenticationError("Authentication failed. Please sign in again.", 401)

        if not response.is_success:
            raise ServiceError(self._service_message(response), response.status_code)

        try:
            body = response.json()
        except ValueError as exc:
            raise MalformedResponseError("Assessment response was not valid JSON") from exc

        return parse_assessment(body)

    @staticmethod
    def _service_message(response: httpx.Response) -> str:
        message = None
        try:
            body = response.json()
            if isinstance(body, dict):
                message = body.get("error") or body.get("message")
        except ValueError:
            pass
        if message:
            return str(message)
        return f"Assessment failed ({response.status_code}): {response.reason_phrase}"
