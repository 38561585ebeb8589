"""Entry point for the User Admin API.

Launches the FastAPI application under Uvicorn.  It is intended to be
executed from the project root, for example under Docker, where you
only specify a single Python file to run.

Configuration such as the users file location, log level and secret
key is read from environment variables (see
``user_admin_api/app/core/config.py``).

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from user_admin_api.app.core.config import settings
from user_admin_api.app.main import app


async def run_api() -> None:
    """Start the API using Uvicorn.

    Host and port are read from the environment variables
    ``ADMIN_HOST`` and ``ADMIN_PORT``.  Defaults are ``0.0.0.0`` and
    ``8000``.
    """
    config = Config(
        app=app,
        host=settings.admin_host,
        port=settings.admin_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


def main() -> None:
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        logging.getLogger(__name__).info("Shutting down")


if __name__ == "__main__":
    main()
