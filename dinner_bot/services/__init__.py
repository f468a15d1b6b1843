"""
Services Package for Dinner Bot
===============================

Service modules that encapsulate infrastructure concerns.

Available Services:
-------------------
- **session**: Session cache management with database persistence
"""
