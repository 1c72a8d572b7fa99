"""Run the todoops API server: ``python -m todoops``."""

import uvicorn

from . import config
from .logging_setup import setup_logging


def main() -> None:
    setup_logging(config.LOG_LEVEL, config.LOG_FILE)
    uvicorn.run(
        "todoops.api.app:app",
        host=config.SERVICE_HOST,
        port=config.SERVICE_PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
