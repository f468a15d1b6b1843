"""
Routes Package for Dinner Bot
=============================

API route definitions.

- **chat.py**: Customer-facing chat endpoints (start, message, cart) and menu
"""

from .chat import chat_router, limiter, menu_router

__all__ = ["chat_router", "menu_router", "limiter"]
