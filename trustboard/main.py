"""Application entry point."""

import logging
import uvicorn

from trustboard.config import Config
from trustboard.app import create_app

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    """Root logging at ``level``; httpx request lines only at WARNING and up."""
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # basicConfig is a no-op once handlers exist; the level still applies
    logging.getLogger().setLevel(level)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main():
    """Run the trustboard API server."""
    config = Config.from_env()
    configure_logging(config.log_level)
    app = create_app(config)

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
