"""Utility modules for API-specific functionality.

- **responses**: orjson response classes
- **params**: lenient query-string integer parsing
"""
