"""
Eligibility Router - Questionnaire wizard API.

Provides endpoints for:
- Starting a wizard session for a visa route
- Answering questions and navigating (next / previous / jump)
- Submitting to the AI assessment service and retrying failures

Each session is a ``WizardController`` held in memory. The caller's bearer
token is forwarded to the assessment service on every submitting request.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from eligibility.assessment_client import AssessmentSubmitter
from eligibility.catalog import RouteCatalog
from eligibility.errors import (
    InvalidAnswerError,
    SessionNotFoundError,
    UnknownQuestionError,
    UnknownRouteError,
)
from eligibility.sessions import WizardSessionRegistry
from eligibility.wizard import WizardController
from web.dependencies import get_catalog, get_session_registry, get_submitter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/eligibility", tags=["Eligibility"])


# =============================================================================
# REQUEST MODELS
# =============================================================================


class CreateSessionRequest(BaseModel):
    """Request to start a questionnaire."""
    route_id: str = Field(..., description="Visa route id, e.g. 'global-talent'")
    user_profile: Optional[Dict[str, Any]] = Field(
        None, description="Profile sent with the assessment; fetched from the profile service if omitted"
    )
    load_profile: bool = Field(True, description="Fetch the saved profile when none is given")


class AnswerRequest(BaseModel):
    """Answer to one question."""
    answer: Any = Field(..., description="true/false, a number, text, an option, or a list of options")


class JumpRequest(BaseModel):
    index: int = Field(..., description="Position in the active question list")


# =============================================================================
# HELPERS
# =============================================================================


def _session_response(controller: WizardController) -> Dict[str, Any]:
    return {"sessionId": controller.wizard_id, **controller.state.to_dict()}


def _get_controller(registry: WizardSessionRegistry, session_id: str) -> WizardController:
    try:
        return registry.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


# =============================================================================
# ENDPOINTS
# =============================================================================


@router.post("/sessions", status_code=201)
async def create_session(
    request: CreateSessionRequest,
    catalog: RouteCatalog = Depends(get_catalog),
    registry: WizardSessionRegistry = Depends(get_session_registry),
    submitter: AssessmentSubmitter = Depends(get_submitter),
):
    """Start a wizard for a visa route."""
    try:
        route = catalog.get(request.route_id)
    except UnknownRouteError as e:
        raise HTTPException(status_code=404, detail=str(e))

    controller = WizardController(route, submitter, user_profile=request.user_profile)
    if request.user_profile is None and request.load_profile:
        await controller.load_profile()

    registry.add(controller)
    logger.info(f"Started wizard {controller.wizard_id} for route {route.id}")
    return _session_response(controller)


@router.get("/sessions/{session_id}")
async def get_session(
    session_id: str,
    registry: WizardSessionRegistry = Depends(get_session_registry),
):
    return _session_response(_get_controller(registry, session_id))


@router.put("/sessions/{session_id}/answers/{question_id}")
async def answer_question(
    session_id: str,
    question_id: str,
    request: AnswerRequest,
    registry: WizardSessionRegistry = Depends(get_session_registry),
):
    """Record (or replace) the answer to a question."""
    controller = _get_controller(registry, session_id)
    try:
        controller.answer(question_id, request.answer)
    except UnknownQuestionError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidAnswerError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return _session_response(controller)


@router.post("/sessions/{session_id}/next")
async def next_question(
    session_id: str,
    registry: WizardSessionRegistry = Depends(get_session_registry),
    submitter: AssessmentSubmitter = Depends(get_submitter),
):
    """Advance; on the last question this submits for assessment."""
    controller = _get_controller(registry, session_id)
    controller.submitter = submitter
    await controller.next()
    return _session_response(controller)


@router.post("/sessions/{session_id}/previous")
async def previous_question(
    session_id: str,
    registry: WizardSessionRegistry = Depends(get_session_registry),
):
    controller = _get_controller(registry, session_id)
    controller.previous()
    return _session_response(controller)


@router.post("/sessions/{session_id}/jump")
async def jump_to_question(
    session_id: str,
    request: JumpRequest,
    registry: WizardSessionRegistry = Depends(get_session_registry),
):
    """Go to any active question. Out-of-range indexes are ignored."""
    controller = _get_controller(registry, session_id)
    controller.jump_to(request.index)
    return _session_response(controller)


@router.post("/sessions/{session_id}/retry")
async def retry_submission(
    session_id: str,
    registry: WizardSessionRegistry = Depends(get_session_registry),
    submitter: AssessmentSubmitter = Depends(get_submitter),
):
    """Resubmit after a failed assessment."""
    controller = _get_controller(registry, session_id)
    controller.submitter = submitter
    await controller.retry()
    return _session_response(controller)


@router.delete("/sessions/{session_id}")
async def delete_session(
    session_id: str,
    registry: WizardSessionRegistry = Depends(get_session_registry),
):
    try:
        registry.remove(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"deleted": True, "sessionId": session_id}
