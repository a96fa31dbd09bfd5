"""Thread-safe registry of open stream sessions."""

import logging
import threading
from typing import Protocol

from binance_gateway.types import SessionId

log = logging.getLogger(__name__)


class StreamHandle(Protocol):
    """What the registry needs from a registered session."""

    def close(self) -> None: ...

    def restart(self) -> None: ...


class SessionRegistry:
    """Map of session id to live handle, guarded by a mutex.

    Handles are registered when their connection opens and removed when it
    closes or fails. ``close`` and ``restart`` only initiate the change: the
    entry disappears when the handle reports its own close.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handles: dict[SessionId, StreamHandle] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._handles

    def ids(self) -> list[SessionId]:
        """Snapshot of the registered ids."""
        with self._lock:
            return list(self._handles)

    def register(self, session_id: SessionId, handle: StreamHandle) -> None:
        """Insert ``handle`` under ``session_id``, replacing any previous entry."""
        with self._lock:
            self._handles[session_id] = handle
        log.debug("Registered stream %s", session_id)

    def lookup(self, session_id: SessionId) -> StreamHandle | None:
        with self._lock:
            return self._handles.get(session_id)

    def remove(self, session_id: SessionId) -> None:
        """Remove ``session_id``. Unknown ids are ignored."""
        with self._lock:
            handle = self._handles.pop(session_id, None)
        if handle is not None:
            log.debug("Removed stream %s", session_id)

    def close(self, session_id: SessionId) -> bool:
        """Initiate closing of a registered session.

        Returns:
            False if ``session_id`` is not registered, True otherwise.

        """
        handle = self.lookup(session_id)
        if handle is None:
            return False
        handle.close()
        return True

    def restart(self, session_id: SessionId) -> bool:
        """Initiate a reconnect of a registered session under the same id.

        Returns:
            False if ``session_id`` is not registered, True otherwise.

        """
        handle = self.lookup(session_id)
        if handle is None:
            return False
        handle.restart()
        return True
