"""
Services Module - Infrastructure services for the visa eligibility platform.

- Logging and observability
"""

from .logging_config import AssessmentLogger, configure_logging, get_logger

__all__ = [
    "AssessmentLogger",
    "configure_logging",
    "get_logger",
]
