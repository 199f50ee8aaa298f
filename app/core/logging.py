from __future__ import annotations

import logging

from app.core.settings import AppSettings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: AppSettings) -> None:
    """Configure root logging once for the API process."""
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logging.getLogger("app").setLevel(settings.log_level)
