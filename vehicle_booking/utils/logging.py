import logging
import os
import sys


def setup_logging(level_name: str | None = None) -> None:
    """Configure the root logger once; LOG_LEVEL env var picks the level."""
    level_name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers to avoid duplication when create_app runs twice
    root_logger.handlers = []

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    root_logger.addHandler(handler)

    logging.getLogger("werkzeug").setLevel(level)
