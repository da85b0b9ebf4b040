"""Logging configuration for the backend."""
import logging
import sys

from profile_api.config import settings


def setup_logging() -> None:
    """Configure application logging."""
    level = logging.DEBUG if settings.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    # Access lines are already emitted by LoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    # google-auth logs certificate fetches at DEBUG
    logging.getLogger("google.auth").setLevel(logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the profile_api namespace."""
    if not name.startswith("profile_api"):
        name = f"profile_api.{name}"
    return logging.getLogger(name)
