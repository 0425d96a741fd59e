"""Pydantic models for request validation and response serialization.

- **errors**: the error envelope shared by every failure
- **users**: registration, admin update and public user bodies
"""
