"""
In-process registry of participant sessions.

Creating a session stands in for a page load (fresh vote budget); closing it
stands in for unmounting (pending debounce cancelled, in-flight searches
discarded). Sessions live in memory only and vanish on restart. A tab that
closes without saying goodbye is evicted once it has been idle for
*idle_ttl* seconds.
"""
import logging
import time
import uuid
from collections.abc import Callable

from movie_night.services.voting_controller import NominationController

logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    """Raised when a session id is unknown, closed or expired."""


class SessionRegistry:
    def __init__(
        self,
        controller_factory: Callable[[], NominationController],
        idle_ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._controller_factory = controller_factory
        self._idle_ttl = idle_ttl
        self._clock = clock
        self._sessions: dict[str, NominationController] = {}
        self._last_seen: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> tuple[str, NominationController]:
        self.evict_idle()
        session_id = str(uuid.uuid4())
        controller = self._controller_factory()
        self._sessions[session_id] = controller
        self._last_seen[session_id] = self._clock()
        logger.info("Opened session %s", session_id)
        return session_id, controller

    def get(self, session_id: str) -> NominationController:
        self.evict_idle()
        controller = self._sessions.get(session_id)
        if controller is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        self._last_seen[session_id] = self._clock()
        return controller

    def close(self, session_id: str) -> bool:
        controller = self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if controller is None:
            return False
        controller.close()
        logger.info("Closed session %s", session_id)
        return True

    def evict_idle(self) -> int:
        """Close every session idle for longer than the TTL; return how many."""
        if not self._idle_ttl:
            return 0
        cutoff = self._clock() - self._idle_ttl
        expired = [sid for sid, seen in self._last_seen.items() if seen < cutoff]
        for session_id in expired:
            logger.info("Evicting idle session %s", session_id)
            self.close(session_id)
        return len(expired)

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)
