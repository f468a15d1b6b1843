"""
Schemas Package for Dinner Bot
==============================

Pydantic models used for API request validation and response serialization.

Schema Organization:
--------------------
- **chat.py**: Chat session, turn and menu schemas
"""
