"""Eligibility engine exceptions.

Lookup and catalog problems are raised to the caller. Submission problems are
raised inside the assessment submitter and converted into a
``SubmissionFailure`` value before they reach the wizard.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class FailureKind(Enum):
    """Why an assessment submission failed."""
    AUTHENTICATION = "authentication"
    NETWORK = "network"
    SERVICE = "service"
    MALFORMED_RESPONSE = "malformed_response"

    @property
    def requires_reauthentication(self) -> bool:
        return self is FailureKind.AUTHENTICATION

    @property
    def retryable(self) -> bool:
        return self is not FailureKind.AUTHENTICATION


class EligibilityError(Exception):
    """Base class for eligibility engine errors."""
    pass


class CatalogError(EligibilityError):
    """Raised when visa route data fails validation at load time."""

    def __init__(self, message: str, route_id: Optional[str] = None):
        if route_id:
            message = f"[{route_id}] {message}"
        super().__init__(message)
        self.route_id = route_id


class UnknownRouteError(EligibilityError, KeyError):
    """Raised when a visa route id is not in the catalog."""

    def __init__(self, route_id: str):
        super().__init__(f"Unknown visa route: {route_id}")
        self.route_id = route_id

    def __str__(self) -> str:
        return self.args[0]


class UnknownQuestionError(EligibilityError, KeyError):
    """Raised when a question id does not belong to the route."""

    def __init__(self, question_id: str, route_id: Optional[str] = None):
        where = f" in route {route_id}" if route_id else ""
        super().__init__(f"Unknown question{where}: {question_id}")
        self.question_id = question_id
        self.route_id = route_id

    def __str__(self) -> str:
        return self.args[0]


class SessionNotFoundError(EligibilityError, KeyError):
    """Raised when a wizard session id is unknown or has been evicted."""

    def __init__(self, session_id: str):
        super().__init__(f"Wizard session not found: {session_id}")
        self.session_id = session_id

    def __str__(self) -> str:
        return self.args[0]


class InvalidAnswerError(EligibilityError, ValueError):
    """Raised when an answer does not have the shape its question expects."""

    def __init__(self, question_id: str, message: str):
        super().__init__(f"{question_id}: {message}")
        self.question_id = question_id


class AssessmentSubmissionError(EligibilityError):
    """Base class for failures talking to the assessment service."""

    kind: FailureKind = FailureKind.SERVICE

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationError(AssessmentSubmissionError):
    """Session missing, invalid or expired."""
    kind = FailureKind.AUTHENTICATION


class NetworkError(AssessmentSubmissionError):
    """The request never produced an HTTP response."""
    kind = FailureKind.NETWORK


class ServiceError(AssessmentSubmissionError):
    """The assessment service answered with a non-2xx status."""
    kind = FailureKind.SERVICE


class MalformedResponseError(AssessmentSubmissionError):
    """A 2xx response whose body is not a usable assessment."""
    kind = FailureKind.MALFORMED_RESPONSE
