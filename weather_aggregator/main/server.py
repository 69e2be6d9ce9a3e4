"""
Server Entry Point - Main Layer

Serves the FastAPI application with uvicorn using the configured host,
port and reload flag.
"""

import uvicorn

from weather_aggregator.main.config import get_settings
from weather_aggregator.shared import configure_logging, get_logger

logger = get_logger(__name__)


def main() -> None:
    configure_logging()
    settings = get_settings()

    logger.info(
        "server.starting",
        host=settings.service.host,
        port=settings.service.port,
        environment=settings.environment.value,
    )
    # structlog owns the root handlers; keep uvicorn from installing its own.
    uvicorn.run(
        "weather_aggregator.main.app:app",
        host=settings.service.host,
        port=settings.service.port,
        reload=settings.service.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
