"""Entry point for the Task Manager API.

Starts the FastAPI application with Uvicorn.  Host, port and log level
are read from environment variables (``HOST``, ``PORT``, ``LOG_LEVEL``)
through ``task_manager_api.app.core.config``.  Database settings
such as ``DATABASE_URL`` can also be placed in the environment.

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from task_manager_api.app.core.config import settings
from task_manager_api.app.main import app


async def run_api() -> None:
    """Serve the API until the process is stopped."""
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
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
