"""Main entry point - runs the signing API."""

import logging
import sys

import uvicorn

from tronsigner.api.app import create_app
from tronsigner.config import get_settings
from tronsigner.errors import ConfigError

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # httpx logs full request URLs at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> int:
    """Main entry point."""
    settings = get_settings()
    configure_logging(settings.debug)

    logger.info("Starting tronsigner...")
    logger.info(f"Environment: {settings.environment}")

    try:
        app = create_app(settings)
    except ConfigError as e:
        for problem in e.problems:
            logger.critical(f"Configuration error: {problem}")
        return 1

    logger.info(f"Starting API server on {settings.api_host}:{settings.port}")
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
