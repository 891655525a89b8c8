"""po_agent.storage.state_store

In-memory session state: chat transcript and workflow memory keyed by session id.

The store itself is process-wide; each session's data is copied on the way in and
out so concurrent requests never share mutable lists.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Optional

from po_agent.contracts.tool_base import StateStore
from po_agent.errors import SessionError

_HISTORY_PREFIX = "ChatHistory_"
_MEMORY_PREFIX = "Memory_"


def _check(session_id: str) -> str:
    if not session_id or not session_id.strip():
        raise SessionError("Session id is required")
    return session_id.strip()


class InMemoryStateStore(StateStore):
    """Dict-backed StateStore guarded by a lock (FastAPI runs sync routes in a thread pool)."""

    def __init__(self, logger):
        self.logger = logger
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get_chat_history(self, session_id: str) -> Optional[list[dict[str, Any]]]:
        key = _HISTORY_PREFIX + _check(session_id)
        with self._lock:
            history = self._data.get(key)
            return copy.deepcopy(history) if history is not None else None

    def save_chat_history(self, session_id: str, history: list[dict[str, Any]]) -> None:
        key = _HISTORY_PREFIX + _check(session_id)
        with self._lock:
            self._data[key] = copy.deepcopy(history)
        self.logger.info("Saved chat history for session %s (%d messages)", session_id, len(history))

    def delete_chat_history(self, session_id: str) -> None:
        sid = _check(session_id)
        with self._lock:
            self._data.pop(_HISTORY_PREFIX + sid, None)
            self._data.pop(_MEMORY_PREFIX + sid, None)
        self.logger.info("Deleted session state for %s", session_id)

    def get_memory(self, session_id: str) -> dict[str, Any]:
        key = _MEMORY_PREFIX + _check(session_id)
        with self._lock:
            return copy.deepcopy(self._data.get(key, {}))

    def save_memory(self, session_id: str, memory: dict[str, Any]) -> None:
        key = _MEMORY_PREFIX + _check(session_id)
        with self._lock:
            self._data[key] = copy.deepcopy(memory)
