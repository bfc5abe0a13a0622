"""Entry point for serving the Recycle Points API.

Host, port and log level come from the application settings, so the
usual environment variables (``HOST``, ``PORT``, ``LOG_LEVEL``,
``DATABASE_URL`` ...) apply.

Usage:
    python run.py
"""
import logging

from uvicorn import Config, Server

from recycle_points_api.app.core.config import settings


def main() -> None:
    """Serve the application until interrupted."""
    config = Config(
        app="recycle_points_api.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    logging.getLogger(__name__).info("Starting API on %s:%s", settings.host, settings.port)
    server.run()


if __name__ == "__main__":
    try:
        main()
    except (KeyboardInterrupt, SystemExit):
        pass
