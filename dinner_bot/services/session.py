"""
Session Management Service for Dinner Bot
=========================================

This module stores per-conversation dialog state with a two-tier strategy:
1. **In-Memory Cache**: Fast access for active sessions
2. **Database Persistence**: Durable storage for session recovery

Architecture Overview:
----------------------
The session system uses a write-through cache pattern:
- Reads check the cache first, then fall back to the database
- Writes update both the cache and database simultaneously
- Cache entries have TTL and LRU eviction to bound memory usage

Session Data Structure:
-----------------------
Each session contains:
- dialog_state: Serialized DialogState (active dialog, suspended step, cart)
- locale: Menu locale the session is served with

Cache Eviction Strategy:
------------------------
1. **TTL-based**: Sessions not accessed within SESSION_TTL_SECONDS are eligible
   for eviction. Checked probabilistically (~1% of requests).

2. **LRU-based**: When cache reaches SESSION_MAX_CACHE_SIZE, the oldest 10% of
   sessions (by last access time) are evicted to make room.

Evicted sessions stay in the database and are restored on next access.

Usage:
------
    from dinner_bot.services.session import get_session, save_session

    session = get_session(db, session_id)   # None if unknown
    save_session(db, session_id, {"dialog_state": {...}, "locale": "en"})
"""

import logging
import random
import threading
import time
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import flag_modified

from .. import config
from ..models import ChatSession


logger = logging.getLogger(__name__)


# =============================================================================
# Session Cache
# =============================================================================
# {session_id: {"data": {...session_data...}, "last_access": timestamp}}

SESSION_CACHE: Dict[str, Dict[str, Any]] = {}
_cache_lock = threading.Lock()


# =============================================================================
# Cache Maintenance Functions
# =============================================================================

def _cleanup_expired_sessions() -> int:
    """
    Remove expired sessions from the cache.

    Returns:
        int: Number of sessions removed from cache
    """
    now = time.time()
    expired = []

    with _cache_lock:
        for sid, entry in SESSION_CACHE.items():
            if now - entry.get("last_access", 0) > config.SESSION_TTL_SECONDS:
                expired.append(sid)

        for sid in expired:
            del SESSION_CACHE[sid]

    if expired:
        logger.debug("Cleaned up %d expired sessions from cache", len(expired))

    return len(expired)


def _evict_oldest_sessions_locked(count: int) -> None:
    """
    Evict the least recently used sessions. Caller must hold _cache_lock.

    Args:
        count: Number of sessions to evict (at least one is always evicted)
    """
    sorted_sessions = sorted(
        SESSION_CACHE.items(),
        key=lambda x: x[1].get("last_access", 0)
    )

    to_remove = sorted_sessions[:max(1, count)]
    for sid, _ in to_remove:
        del SESSION_CACHE[sid]

    logger.debug("Evicted %d oldest sessions from cache", len(to_remove))


def _cache_put_locked(session_id: str, session_data: Dict[str, Any]) -> None:
    if session_id not in SESSION_CACHE and len(SESSION_CACHE) >= config.SESSION_MAX_CACHE_SIZE:
        _evict_oldest_sessions_locked(config.SESSION_MAX_CACHE_SIZE // 10)

    SESSION_CACHE[session_id] = {
        "data": session_data,
        "last_access": time.time(),
    }


# =============================================================================
# Public Session Management Functions
# =============================================================================

def get_session(db: Session, session_id: str) -> Optional[Dict[str, Any]]:
    """
    Get session data from cache or database.

    Args:
        db: SQLAlchemy database session for queries
        session_id: Identifier of the conversation

    Returns:
        Dict with "dialog_state" and "locale" if found, None otherwise.
    """
    # Runs roughly once per 100 calls
    if random.randint(1, 100) == 1:
        _cleanup_expired_sessions()

    with _cache_lock:
        if session_id in SESSION_CACHE:
            entry = SESSION_CACHE[session_id]
            entry["last_access"] = time.time()
            return entry["data"]

    db_session = db.query(ChatSession).filter(
        ChatSession.session_id == session_id
    ).first()

    if db_session is None:
        return None

    session_data = {
        "dialog_state": db_session.dialog_state or {},
        "locale": db_session.locale,
    }

    with _cache_lock:
        _cache_put_locked(session_id, session_data)

    return session_data


def save_session(db: Session, session_id: str, session_data: Dict[str, Any]) -> None:
    """
    Save session data to both cache and database.

    Args:
        db: SQLAlchemy database session for persistence
        session_id: Identifier of the conversation
        session_data: Dict with "dialog_state" and optionally "locale"

    Note:
        Database errors propagate to the caller; the cache is only updated
        after the commit succeeds so it never runs ahead of the database.
    """
    db_session = db.query(ChatSession).filter(
        ChatSession.session_id == session_id
    ).first()

    if db_session:
        db_session.dialog_state = session_data.get("dialog_state", {})
        db_session.locale = session_data.get("locale")

        # Force SQLAlchemy to detect changes to the mutable JSON column
        flag_modified(db_session, "dialog_state")
    else:
        db_session = ChatSession(
            session_id=session_id,
            dialog_state=session_data.get("dialog_state", {}),
            locale=session_data.get("locale"),
        )
        db.add(db_session)

    db.commit()

    with _cache_lock:
        _cache_put_locked(session_id, session_data)


def clear_cache() -> int:
    """
    Clear all sessions from the in-memory cache.

    Does NOT affect database storage.

    Returns:
        int: Number of sessions that were in cache before clearing
    """
    with _cache_lock:
        count = len(SESSION_CACHE)
        SESSION_CACHE.clear()
        logger.info("Cleared %d sessions from cache", count)
        return count


def get_cache_stats() -> Dict[str, Any]:
    """
    Get statistics about the session cache.

    Returns:
        Dict with size, max_size, ttl_seconds, oldest_access and newest_access
    """
    with _cache_lock:
        if not SESSION_CACHE:
            return {
                "size": 0,
                "max_size": config.SESSION_MAX_CACHE_SIZE,
                "ttl_seconds": config.SESSION_TTL_SECONDS,
                "oldest_access": None,
                "newest_access": None,
            }

        access_times = [entry["last_access"] for entry in SESSION_CACHE.values()]
        return {
            "size": len(SESSION_CACHE),
            "max_size": config.SESSION_MAX_CACHE_SIZE,
            "ttl_seconds": config.SESSION_TTL_SECONDS,
            "oldest_access": min(access_times),
            "newest_access": max(access_times),
        }
