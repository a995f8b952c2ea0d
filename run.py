"""Entry point for the Library API server.

Starts the FastAPI application with Uvicorn.  Host, port and log level
are read from environment variables ``API_HOST``, ``API_PORT`` and
``LOG_LEVEL``; everything else is configured through the variables
documented in ``library_api/app/core/config.py``.

Usage:
    python run.py
"""
import asyncio
import logging
import os

from uvicorn import Config, Server

from library_api.app.main import app


async def run_api() -> None:
    """Serve the API until interrupted."""
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    config = Config(app=app, host=host, port=port, reload=False, log_level=os.getenv("LOG_LEVEL", "info").lower())
    server = Server(config)
    await server.serve()


async def main() -> None:
    try:
        await run_api()
    except Exception:
        logging.getLogger(__name__).exception("API server stopped with an error")
        raise


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
