#!/usr/bin/env python
"""Script to run the task manager API server."""
import logging

import uvicorn

from app.config import Settings
from app.logging_setup import setup_logging


def main() -> None:
    settings = Settings.from_env()
    setup_logging(
        console_level=getattr(logging, settings.log_level, logging.INFO),
        log_file=settings.log_file,
    )
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.port,
    )


if __name__ == "__main__":
    main()
