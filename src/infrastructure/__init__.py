"""Infrastructure layer: integrations the API and domain layers depend on.

- **database**: Async PostgreSQL access with SQLAlchemy 2 and repositories
- **upstream**: httpx client for the proxied Rick and Morty REST API
- **security**: Argon2 password hashing
"""
