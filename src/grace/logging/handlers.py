"""JSON log formatting for grace.

Shutdown and probe records carry their context through ``extra=``:

    logger.info("Received %s", sig.name, extra={"signal": sig.name})

JSONFormatter lifts those fields to top-level keys so a log pipeline can
follow one shutdown across the signal, each hook and the re-delivery.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Record attributes set by grace's own log calls
CONTEXT_FIELDS: tuple[str, ...] = ("signal", "hook", "probe_path")


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: timestamp (ISO-8601 UTC), level, logger, pid, message, any of
    CONTEXT_FIELDS the record carries, and exception when exc_info is set.
    The pid is included because shutdown ends with a signal sent to it.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "pid": record.process,
            "message": record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)
