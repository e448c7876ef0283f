"""In-memory registry of live edit sessions keyed by browser session id."""

from __future__ import annotations

import logging
import time
from typing import Callable

from .ai.base import ImageEditor
from .edit_session import EditSession

logger = logging.getLogger(__name__)


class EditSessionRegistry:
    def __init__(
        self,
        editor: ImageEditor,
        idle_minutes: int = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._editor = editor
        self._idle_seconds = max(0, int(idle_minutes)) * 60
        self._clock = clock
        self._sessions: dict[str, EditSession] = {}
        self._last_used: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> EditSession:
        self.prune()
        session = self._sessions.get(session_id)
        if session is None:
            session = EditSession(self._editor)
            self._sessions[session_id] = session
        self._last_used[session_id] = self._clock()
        return session

    def discard(self, session_id: str) -> bool:
        self._last_used.pop(session_id, None)
        return self._sessions.pop(session_id, None) is not None

    def prune(self) -> int:
        """Drops sessions idle for longer than the configured window."""
        if not self._idle_seconds:
            return 0
        cutoff = self._clock() - self._idle_seconds
        stale = [
            session_id
            for session_id, last_used in self._last_used.items()
            if last_used < cutoff and not self._sessions[session_id].is_loading
        ]
        for session_id in stale:
            self.discard(session_id)
        if stale:
            logger.info("Pruned %d idle edit sessions", len(stale))
        return len(stale)
