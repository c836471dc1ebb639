"""Core Module - Shared infrastructure for cross-cutting concerns."""

from .service_registry import ServiceRegistry, services

__all__ = ["ServiceRegistry", "services"]
