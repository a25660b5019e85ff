# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging setup for loteamentos.

Modules log through `logging.getLogger(__name__)`; this module only wires the
handlers once at startup:

    from loteamentos.logging_config import setup_logging
    setup_logging()                       # LOG_LEVEL / LOG_FORMAT from env
    setup_logging("DEBUG", "json")

Line format (standard):
    2026-02-16 14:32:01 | INFO     | loteamentos.services.data_service | Areas import replaced collection with 12 record(s)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def setup_logging(level: Optional[str] = None, format_type: Optional[str] = None) -> logging.Logger:
    """Configure the `loteamentos` logger with a stdout handler. Idempotent."""
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    fmt = (format_type or os.getenv("LOG_FORMAT", "standard")).lower()

    logger = logging.getLogger("loteamentos")
    logger.setLevel(log_level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)

    # python-multipart is noisy at DEBUG
    logging.getLogger("multipart").setLevel(logging.WARNING)
    return logger
