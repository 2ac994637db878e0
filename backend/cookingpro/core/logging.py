import logging
import sys
from cookingpro.core.config import get_settings

ROOT_LOGGER = "cookingpro"


def setup_logging():
    """Configure logging for the application."""
    settings = get_settings()

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(settings.log_level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(settings.log_level.upper())

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler.setFormatter(formatter)

    # Repeated calls must not stack handlers
    if not logger.handlers:
        logger.addHandler(handler)

    return logger


def get_logger(name: str):
    """Get a logger instance with the given name."""
    setup_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
