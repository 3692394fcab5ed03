"""Single-line key=value logging for the rent roll backend."""

from __future__ import annotations

import logging
import os
import re
from typing import Optional

# SAS signatures and keys must never be written out, even inside exception text
_SECRET_PARAMS = re.compile(r"(?i)\b(sig|se|skoid|sktid|skey)=([^&\s'\"]+)")


class SasRedactingFilter(logging.Filter):
    """Mask SAS query parameters in the fully rendered message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        scrubbed = _SECRET_PARAMS.sub(lambda m: f"{m.group(1)}=***", message)
        if scrubbed != message:
            record.msg = scrubbed
            record.args = None
        return True


def configure_logging(namespace: str = "backend", level: Optional[str] = None) -> logging.Logger:
    """Return the package logger, attaching the handler on first use.

    Output is ``timestamp level name message``; messages themselves are
    key=value pairs (``cache_hit properties=12``) so blob sizes, fetch modes
    and fallback reasons stay greppable. ``LOG_LEVEL`` is read when the
    handler is first attached.
    """

    logger = logging.getLogger(namespace)
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(fmt="%(asctime)s %(levelname)s %(name)s %(message)s", datefmt="%Y-%m-%dT%H:%M:%S")
    )
    handler.addFilter(SasRedactingFilter())

    logger.addHandler(handler)
    logger.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
    logger.propagate = False
    return logger


def get_logger(child: Optional[str] = None) -> logging.Logger:
    base = configure_logging()
    return base.getChild(child) if child else base
