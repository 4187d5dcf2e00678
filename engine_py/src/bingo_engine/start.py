#!/usr/bin/env python3
"""Console entry point for the bingo board backend"""

import logging
import os

import uvicorn

from .config import BoardConfig

logger = logging.getLogger(__name__)


def main():
    config = BoardConfig.from_env()
    logging.basicConfig(level=config.log_level)

    logger.info(f"Board API on http://{config.host}:{config.port} (push channel at /ws)")
    if config.max_cards:
        logger.info(f"Accepting up to {config.max_cards} cards")

    uvicorn.run(
        "bingo_engine.main:app",
        host=config.host,
        port=config.port,
        reload=os.getenv("RELOAD", "false").lower() == "true",
        log_level=config.log_level.lower()
    )


if __name__ == "__main__":
    main()
