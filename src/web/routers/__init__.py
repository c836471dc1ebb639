"""
FastAPI Routers - Modular endpoint organization.

Router modules:
- visa_routes: Visa route catalog
- eligibility: Questionnaire wizard sessions and assessment submission
- endorsement: Global Talent endorsement readiness check
- health: Health and liveness probes
"""

from .visa_routes import router as visa_routes_router
from .eligibility import router as eligibility_router
from .endorsement import router as endorsement_router
from .health import router as health_router

__all__ = [
    "visa_routes_router",
    "eligibility_router",
    "endorsement_router",
    "health_router",
]
