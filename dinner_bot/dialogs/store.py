"""
Session stores for dialog state.

The dispatcher only needs "restore exactly what was last saved" keyed by
session id. MemorySessionStore serves tests and embedding; the database
store delegates to the write-through cache in services.session.
"""

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..services.session import get_session, save_session
from .state import DialogState

logger = logging.getLogger(__name__)


def restore_dialog_state(raw: Optional[Dict[str, Any]], session_id: str) -> DialogState:
    """
    Rebuild a DialogState from a stored blob.

    Missing or unreadable state is treated as idle; unreadable state is
    logged at WARNING.
    """
    if not raw:
        return DialogState()
    try:
        return DialogState.model_validate(raw)
    except ValidationError as e:
        logger.warning("Discarding unreadable dialog state for session %s: %s", session_id, e)
        return DialogState()


class SessionStore(ABC):
    """Read-modify-write storage for one opaque state blob per session."""

    @abstractmethod
    def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Return the last saved state for the session, or None if never saved."""

    @abstractmethod
    def save(self, session_id: str, state: Dict[str, Any]) -> None:
        """Persist the state for the session, replacing what was there."""


class MemorySessionStore(SessionStore):
    """Keeps state in a dict. Values are deep-copied on the way in and out."""

    def __init__(self):
        self._data: Dict[str, Dict[str, Any]] = {}
        self.save_count = 0

    def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        state = self._data.get(session_id)
        return copy.deepcopy(state) if state is not None else None

    def save(self, session_id: str, state: Dict[str, Any]) -> None:
        self._data[session_id] = copy.deepcopy(state)
        self.save_count += 1

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._data


class DatabaseSessionStore(SessionStore):
    """
    Stores dialog state in the chat_sessions table via the session cache.

    Args:
        db: SQLAlchemy session used for this request
        locale: Menu locale recorded alongside the state
    """

    def __init__(self, db: Session, locale: Optional[str] = None):
        self.db = db
        self.locale = locale

    def load(self, session_id: str) -> Optional[Dict[str, Any]]:
        session_data = get_session(self.db, session_id)
        if session_data is None:
            return None
        return copy.deepcopy(session_data.get("dialog_state") or {})

    def save(self, session_id: str, state: Dict[str, Any]) -> None:
        save_session(self.db, session_id, {
            "dialog_state": copy.deepcopy(state),
            "locale": self.locale,
        })
