"""
Middleware for the eligibility API.

Provides:
- Request ID injection (header and log context)
- CORS setup
"""

import logging
import time
import uuid

from fastapi import Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from services.logging_config import request_id_var

logger = logging.getLogger(__name__)

# Requests slower than this are logged at WARNING (assessment calls can be slow)
SLOW_REQUEST_SECONDS = 10.0


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag every request with an ID for tracing.

    Honours an incoming ``X-Request-ID`` header, exposes the ID on
    ``request.state`` and in the log context, and echoes it in the response.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or f"REQ-{uuid.uuid4().hex[:16]}"
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        start = time.time()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        elapsed = time.time() - start
        if elapsed > SLOW_REQUEST_SECONDS:
            logger.warning(f"Slow request: {request.method} {request.url.path} took {elapsed:.2f}s")

        response.headers["X-Request-ID"] = request_id
        return response


def setup_cors(app, origins: list = None):
    """
    Setup CORS middleware.

    Args:
        app: FastAPI application
        origins: List of allowed origins (default: localhost only)
    """
    if origins is None:
        origins = [
            "http://localhost",
            "http://localhost:8000",
            "http://localhost:3000",
        ]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
