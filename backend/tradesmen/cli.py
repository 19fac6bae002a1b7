"""
Console entry points.

- ``tradesmen-api``: serve the API with uvicorn on HOST:PORT
- ``tradesmen-initdb``: create any missing tables
"""
import uvicorn

from tradesmen.lib.db import engine, init_db
from tradesmen.lib.logging import get_logger
from tradesmen.lib.settings import settings

logger = get_logger(__name__)


def serve() -> None:
    logger.info(f"Listening on {settings.host}:{settings.port}")
    uvicorn.run(
        "tradesmen.api.app:app",
        host=settings.host,
        port=settings.port,
        log_config=None,  # keep the JSON logging set up by tradesmen.lib.logging
    )


def initdb() -> None:
    logger.info("Creating tables", extra={"database": engine.url.render_as_string(hide_password=True)})
    init_db()
    logger.info("Database initialized")


if __name__ == "__main__":
    serve()
