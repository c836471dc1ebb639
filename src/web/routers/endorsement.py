"""
Endorsement Router - Global Talent endorsement readiness check.

Stateless: each check request carries the full self-assessment.
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from eligibility.endorsement_checker import (
    EndorsementBodyProfile,
    EndorsementChecker,
    Pathway,
)
from web.dependencies import get_bodies

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/endorsement", tags=["Endorsement"])


class ProfileFields(BaseModel):
    experience: str = ""
    achievements: str = ""
    recognition: str = ""
    leadership: str = ""


class EndorsementCheckRequest(BaseModel):
    """A completed endorsement self-assessment."""
    field: str = Field(..., description="Field of expertise, e.g. 'Digital Technology'")
    pathway: Pathway = Field(..., description="'talent' or 'promise'")
    criteria_met: List[int] = Field(default_factory=list, description="Indexes of the criteria the applicant meets")
    profile: ProfileFields = Field(default_factory=ProfileFields)


@router.get("/bodies")
async def list_endorsing_bodies(bodies: List[EndorsementBodyProfile] = Depends(get_bodies)):
    checker = EndorsementChecker(bodies)
    return {
        "fields": checker.fields,
        "bodies": [body.to_dict() for body in bodies],
    }


@router.post("/check")
async def check_endorsement(
    request: EndorsementCheckRequest,
    bodies: List[EndorsementBodyProfile] = Depends(get_bodies),
):
    """Score an endorsement self-assessment and recommend next steps."""
    checker = EndorsementChecker(bodies)
    try:
        checker.select_field(request.field)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    checker.select_pathway(request.pathway)
    for index in request.criteria_met:
        try:
            checker.set_criterion(f"{request.pathway.value}-{index}", True)
        except KeyError:
            raise HTTPException(status_code=422, detail=f"No criterion at index {index}")

    checker.update_profile(**request.profile.model_dump())
    return checker.to_dict()
