"""In-memory registry of live wizard sessions."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import Dict

from eligibility.errors import SessionNotFoundError
from eligibility.wizard import WizardController

logger = logging.getLogger(__name__)


class WizardSessionRegistry:
    """
    Bounded store of ``WizardController`` instances keyed by wizard id.

    Once ``max_sessions`` is reached the least recently used session is
    closed and dropped. Nothing is persisted; a restart loses every session.
    """

    def __init__(self, max_sessions: int = 1000):
        self.max_sessions = max_sessions
        self._sessions: "OrderedDict[str, WizardController]" = OrderedDict()
        self._lock = threading.Lock()

    def add(self, controller: WizardController) -> WizardController:
        with self._lock:
            self._sessions[controller.wizard_id] = controller
            self._sessions.move_to_end(controller.wizard_id)
            while len(self._sessions) > self.max_sessions:
                evicted_id, evicted = self._sessions.popitem(last=False)
                evicted.close()
                logger.info(f"Evicted wizard session {evicted_id}")
        return controller

    def get(self, wizard_id: str) -> WizardController:
        with self._lock:
            controller = self._sessions.get(wizard_id)
            if controller is None:
                raise SessionNotFoundError(wizard_id)
            self._sessions.move_to_end(wizard_id)
            return controller

    def remove(self, wizard_id: str) -> None:
        with self._lock:
            controller = self._sessions.pop(wizard_id, None)
        if controller is None:
            raise SessionNotFoundError(wizard_id)
        controller.close()

    def clear(self) -> None:
        with self._lock:
            sessions: Dict[str, WizardController] = dict(self._sessions)
            self._sessions.clear()
        for controller in sessions.values():
            controller.close()

    def __contains__(self, wizard_id: object) -> bool:
        return wizard_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
