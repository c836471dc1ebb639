"""
FastAPI dependencies for the eligibility API.

Provides dependency injection for:
- Application settings
- Route catalog and endorsing-body profiles
- The wizard session registry
- Assessment submitter bound to the caller's bearer token

Usage in endpoints:
    @router.get("/api/visa-routes")
    async def list_routes(catalog: RouteCatalog = Depends(get_catalog)):
        ...
"""

from typing import List, Optional

from fastapi import Depends, Header

from auth.supabase_auth import StaticTokenProvider
from config.route_catalog_loader import get_endorsing_bodies, get_route_catalog
from config.settings import Settings, get_settings
from core.service_registry import services
from eligibility.assessment_client import AssessmentSubmitter
from eligibility.catalog import RouteCatalog
from eligibility.endorsement_checker import EndorsementBodyProfile
from eligibility.sessions import WizardSessionRegistry

ROUTE_CATALOG = "route_catalog"
ENDORSING_BODIES = "endorsing_bodies"
WIZARD_SESSIONS = "wizard_sessions"
HTTP_CLIENT = "assessment_http_client"


def register_default_services(settings: Settings) -> None:
    """Register lazy factories for the services the routers use."""
    if not services.has(ROUTE_CATALOG):
        services.register_factory(ROUTE_CATALOG, get_route_catalog)
    if not services.has(ENDORSING_BODIES):
        services.register_factory(ENDORSING_BODIES, get_endorsing_bodies)
    if not services.has(WIZARD_SESSIONS):
        services.register_factory(
            WIZARD_SESSIONS,
            lambda: WizardSessionRegistry(max_sessions=settings.max_wizard_sessions),
        )


def get_app_settings() -> Settings:
    return get_settings()


def get_catalog() -> RouteCatalog:
    return services.get(ROUTE_CATALOG) or get_route_catalog()


def get_bodies() -> List[EndorsementBodyProfile]:
    return services.get(ENDORSING_BODIES) or get_endorsing_bodies()


def get_session_registry(settings: Settings = Depends(get_app_settings)) -> WizardSessionRegistry:
    registry = services.get(WIZARD_SESSIONS)
    if registry is None:
        registry = WizardSessionRegistry(max_sessions=settings.max_wizard_sessions)
        services.register(WIZARD_SESSIONS, registry)
    return registry


def get_bearer_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Extract the bearer token; None when the header is missing or not Bearer."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_submitter(token: Optional[str] = Depends(get_bearer_token)) -> AssessmentSubmitter:
    """Submitter that forwards the caller's own token to the assessment service."""
    return AssessmentSubmitter(StaticTokenProvider(token), client=services.get(HTTP_CLIENT))
