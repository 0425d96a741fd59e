"""Cross-cutting request/response concerns.

- **RequestContextMiddleware**: correlation IDs
- **RequestLoggingMiddleware**: request logging with timing
- **error_handler**: the global exception handlers

Middleware run in reverse order of registration, so the request context is
established before the request logger runs.
"""
