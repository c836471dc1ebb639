"""
FastAPI application for the UK visa eligibility checker.

Routes:
- GET    /api/visa-routes                         : list visa routes
- GET    /api/visa-routes/{id}                    : full route definition
- POST   /api/eligibility/sessions                : start a questionnaire
- GET    /api/eligibility/sessions/{sid}          : current wizard state
- PUT    /api/eligibility/sessions/{sid}/answers/{qid} : answer a question
- POST   /api/eligibility/sessions/{sid}/next     : advance / submit
- POST   /api/eligibility/sessions/{sid}/previous : go back
- POST   /api/eligibility/sessions/{sid}/jump     : jump to a question
- POST   /api/eligibility/sessions/{sid}/retry    : retry a failed submission
- DELETE /api/eligibility/sessions/{sid}          : discard a session
- GET    /api/endorsement/bodies                  : endorsing bodies
- POST   /api/endorsement/check                   : endorsement readiness
- GET    /health, /health/live                    : health probes
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from config.settings import Settings, get_settings, validate_startup
from eligibility.errors import CatalogError
from services.logging_config import configure_logging
from web.dependencies import register_default_services
from web.middleware import RequestIDMiddleware, setup_cors
from web.routers import (
    eligibility_router,
    endorsement_router,
    health_router,
    visa_routes_router,
)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application. Fails fast on bad production configuration."""
    settings = settings or get_settings()

    configure_logging(level=settings.log_level, json_output=settings.log_json)
    validate_startup(settings)

    app = FastAPI(title=settings.name, version=settings.version, debug=settings.debug)

    # Last added = first executed
    setup_cors(app, settings.cors_origins)
    app.add_middleware(RequestIDMiddleware)

    register_default_services(settings)

    app.include_router(visa_routes_router)
    app.include_router(eligibility_router)
    app.include_router(endorsement_router)
    app.include_router(health_router)

    @app.exception_handler(CatalogError)
    async def catalog_error_handler(request: Request, exc: CatalogError):
        logger.error(f"Route catalog error: {exc}")
        return JSONResponse(
            status_code=500,
            content={
                "error": True,
                "code": "CATALOG_ERROR",
                "message": "Visa route data is unavailable",
                "timestamp": datetime.utcnow().isoformat(),
            },
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        """Handle Pydantic validation errors with user-friendly messages."""
        errors = []
        for error in exc.errors():
            field = " -> ".join(str(loc) for loc in error["loc"])
            errors.append(f"{field}: {error['msg']}")

        return JSONResponse(
            status_code=422,
            content={
                "error": True,
                "code": "VALIDATION_ERROR",
                "message": "Please check your input. Some values appear to be invalid.",
                "details": {"validation_errors": errors},
                "timestamp": datetime.utcnow().isoformat(),
            },
        )

    logger.info(f"{settings.name} {settings.version} ready ({settings.environment})")
    return app


app = create_app()
