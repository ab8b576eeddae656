# ==============================================================================
# LOGGING CONFIGURATION
# ==============================================================================
# Root logger setup driven by LOG_LEVEL and LOG_FORMAT
# ==============================================================================

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from uow_coordinator.core.settings import LogFormat, settings

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    level: Optional[str] = None,
    log_format: Optional[LogFormat] = None,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Level name (defaults to settings.LOG_LEVEL)
        log_format: Output format (defaults to settings.LOG_FORMAT)
    """
    level = (level or settings.LOG_LEVEL).upper()
    log_format = log_format or settings.LOG_FORMAT

    handler = logging.StreamHandler()
    if log_format == LogFormat.JSON:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logging.basicConfig(level=level, handlers=[handler], force=True)
