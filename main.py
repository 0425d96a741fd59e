"""Entry point for the Rick and Morty API Gateway.

    python main.py          run the HTTP server with uvicorn
    python main.py seed     create the demo user accounts
"""

import asyncio
import os
import sys

import uvicorn
from loguru import logger

from src.core.config import get_settings
from src.core.logging import setup_logging


def _uvicorn_log_config() -> dict[str, object]:
    """Route uvicorn's loggers through Loguru."""
    handler = {"handlers": ["default"], "level": "INFO", "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {
            "default": {
                "class": "src.core.logging.InterceptHandler",
            },
        },
        "loggers": {
            "uvicorn": handler,
            "uvicorn.error": handler,
            "uvicorn.access": handler,
        },
    }


async def seed() -> None:
    """Create the default admin and demo users that do not exist yet."""
    from src.domain.users import UserRepository, UserService
    from src.domain.users.seed import seed_default_users
    from src.infrastructure.database.session import close_database, get_async_session
    from src.infrastructure.security import PasswordHasher

    try:
        async with get_async_session() as session:
            service = UserService(UserRepository(session), PasswordHasher())
            await seed_default_users(service)
    finally:
        await close_database()


def main() -> None:
    """Main entry point for the gateway."""
    settings = get_settings()
    setup_logging(settings)

    if sys.argv[1:] == ["seed"]:
        asyncio.run(seed())
        return

    # Cloud Run sets PORT to the port the container should listen on
    port = int(os.environ.get("PORT", settings.api_port))

    if settings.debug:
        # Reload requires the app as an import string
        logger.info(
            "Starting Uvicorn on http://{}:{} (development mode with auto-reload)",
            settings.api_host,
            port,
        )
        uvicorn.run(
            "src.api.main:app",
            host=settings.api_host,
            port=port,
            reload=True,
            log_config=_uvicorn_log_config(),
        )
    else:
        from src.api.main import app

        logger.info(
            "Starting Uvicorn on http://{}:{} (production mode)",
            settings.api_host,
            port,
        )
        uvicorn.run(
            app,
            host=settings.api_host,
            port=port,
            reload=False,
            log_config=_uvicorn_log_config(),
        )


if __name__ == "__main__":
    main()
