"""HTTP API layer built on FastAPI.

Key components:
- **main**: Application factory and lifecycle management
- **routes**: Resource proxies, registration and user administration
- **dependencies**: Upstream client, user service and authentication wiring
- **middleware**: Correlation IDs, request logging and global error handling
- **schemas**: Error envelope and user bodies
- **utils**: orjson responses and lenient query parsing
"""
