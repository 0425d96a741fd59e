"""Rick and Morty API Gateway.

A thin HTTP gateway built on FastAPI that proxies the public Rick and Morty
REST API (characters, locations, episodes) and manages a local user store
with role-based administration.

Architecture Overview:
- **API Layer**: FastAPI routers, middleware and global exception handlers
- **Core Layer**: Configuration, logging, tracing and the error taxonomy
- **Domain Layer**: User management rules
- **Infrastructure Layer**: Upstream HTTP client and database persistence
"""
