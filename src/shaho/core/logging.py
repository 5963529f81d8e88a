"""Process-wide logging setup."""

from __future__ import annotations

import logging

from shaho.core.config import AppSettings

_configured = False


def configure_logging(settings: AppSettings | None = None) -> None:
    """Configure root logging once from settings.log_level."""
    global _configured
    if _configured:
        return
    level_name = (settings.log_level if settings else "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    _configured = True
