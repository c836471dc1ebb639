"""
Shared collaborators for the web layer.

``web.dependencies`` registers the route catalog, the endorsing-body
reference data and the wizard session registry here as lazy factories.
Tests register fakes under the same names (for instance an ``httpx``
client backed by a mock transport) and the root conftest calls
``services.reset_all()`` after each test so cached instances never leak.
"""

import logging
import threading
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """Named instances plus factories whose result is built on first lookup."""

    def __init__(self):
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._lock = threading.RLock()

    def register(self, name: str, instance: Any) -> None:
        with self._lock:
            self._services[name] = instance
        logger.debug(f"Service registered: {name}")

    def register_factory(self, name: str, factory: Callable[[], Any]) -> None:
        # A fresh factory invalidates whatever the old one built
        with self._lock:
            self._factories[name] = factory
            self._services.pop(name, None)
        logger.debug(f"Service factory registered: {name}")

    def get(self, name: str, default: Any = None) -> Any:
        with self._lock:
            if name in self._services:
                return self._services[name]
            factory = self._factories.get(name)
            if factory is None:
                return default
            instance = factory()
            self._services[name] = instance
            return instance

    def has(self, name: str) -> bool:
        return name in self._services or name in self._factories

    def reset_all(self) -> None:
        """Forget built instances; factories stay and rebuild on demand."""
        with self._lock:
            self._services.clear()
        logger.debug("All services reset")


services = ServiceRegistry()
