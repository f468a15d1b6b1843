"""
Configuration Module for Dinner Bot
===================================

This module centralizes all configuration settings, environment variables, and
constants used throughout the Dinner Bot application. Everything is parsed and
typed at module load time so configuration errors surface early.

Configuration Categories:
-------------------------
- **Database**: Connection URL for the session store.

- **Menu**: Which built-in menu locale the bot serves.

- **Session Management**: TTL and cache size settings for the in-memory session
  cache that sits in front of the database.

- **Turn Handling**: Whether non-message activities get a passthrough notice.

- **Rate Limiting / Input Validation / CORS**: HTTP transport settings.

Environment Variables:
----------------------
- DATABASE_URL: SQLAlchemy URL (default: "sqlite:///./dinner_bot.db")
- MENU_LOCALE: Menu locale, "en" or "es" (default: "en")
- SESSION_TTL_SECONDS: Session cache TTL (default: 3600)
- SESSION_MAX_CACHE_SIZE: Max cached sessions (default: 1000)
- ECHO_NON_MESSAGE_ACTIVITIES: Reply to non-message activities (default: "false")
- RATE_LIMIT_CHAT: Chat endpoint rate limit (default: "30 per minute")
- RATE_LIMIT_ENABLED: Enable/disable rate limiting (default: "true")
- MAX_MESSAGE_LENGTH: Max user message length (default: 2000)
- CORS_ORIGINS: Comma-separated allowed origins (default: "*")

Usage:
------
    from dinner_bot.config import (
        DATABASE_URL,
        MENU_LOCALE,
        SESSION_TTL_SECONDS,
        MAX_MESSAGE_LENGTH,
    )
"""

import os
from typing import List


# =============================================================================
# Database Configuration
# =============================================================================

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./dinner_bot.db")


# =============================================================================
# Menu Configuration
# =============================================================================
# The menu is static data. Swapping the locale swaps every label, price table
# entry and user-facing string without touching the ordering flow.

MENU_LOCALE: str = os.getenv("MENU_LOCALE", "en").strip().lower()


def get_menu_locale() -> str:
    """
    Return the configured menu locale.

    This function allows dynamic override in tests without modifying
    the module-level constant.
    """
    return MENU_LOCALE


# =============================================================================
# Session Management Configuration
# =============================================================================
# Sessions are persisted to the database and cached in memory with TTL/LRU
# eviction. Evicted sessions are restored from the database on next access.

# How long sessions stay in the cache before being evicted (seconds)
SESSION_TTL_SECONDS: int = int(os.getenv("SESSION_TTL_SECONDS", "3600"))  # 1 hour

# Maximum number of sessions to keep in memory
SESSION_MAX_CACHE_SIZE: int = int(os.getenv("SESSION_MAX_CACHE_SIZE", "1000"))


# =============================================================================
# Turn Handling Configuration
# =============================================================================

# When true, activities other than user messages (typing, conversation
# updates, ...) get a short "[<type> event detected]" reply.
ECHO_NON_MESSAGE_ACTIVITIES: bool = (
    os.getenv("ECHO_NON_MESSAGE_ACTIVITIES", "false").lower() == "true"
)


# =============================================================================
# Rate Limiting Configuration
# =============================================================================
# Uses slowapi with in-memory storage (use Redis for multi-worker prod).

RATE_LIMIT_CHAT: str = os.getenv("RATE_LIMIT_CHAT", "30 per minute")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"


def get_rate_limit_chat() -> str:
    """
    Return the current chat rate limit.

    Returns:
        Rate limit string in "X per Y" format
    """
    return RATE_LIMIT_CHAT


# =============================================================================
# Input Validation Configuration
# =============================================================================

# Maximum allowed message length in characters
MAX_MESSAGE_LENGTH: int = int(os.getenv("MAX_MESSAGE_LENGTH", "2000"))


# =============================================================================
# CORS Configuration
# =============================================================================
# Format: comma-separated list of origins, e.g. "https://myshop.com,https://admin.myshop.com"
# Default "*" allows all origins (suitable for development only)

_cors_origins_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in _cors_origins_env.split(",")
    if origin.strip()
] or ["*"]
