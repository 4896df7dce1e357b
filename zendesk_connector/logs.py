"""Logging setup for the connector.

Two formats, selected by ZENDESK_LOG_FORMAT:
  - text: one compact ``key=value`` line per record (default)
  - json: one JSON object per line, for log shippers

Credentials are redacted from every formatted line.
"""

from __future__ import annotations

import datetime
import json
import logging
from typing import Any, Dict

from zendesk_connector.secrets import redact_dict, redact_text

LOGGER_NAME = "zendesk_connector"

# Attributes every LogRecord carries; anything else came in via ``extra=``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in vars(record).items() if k not in _RESERVED_ATTRS}


class TextFormatter(logging.Formatter):
    """``level logger: message key=value ...``"""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = _extra_fields(record)
        if extras:
            line += " " + " ".join(f"{k}={v}" for k, v in sorted(extras.items()))
        return redact_text(line)


class JsonFormatter(logging.Formatter):
    """One compact JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        event: Dict[str, Any] = {
            "ts": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        event.update(_extra_fields(record))
        if record.exc_info:
            event["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(redact_dict(event), separators=(",", ":"), default=str)


def configure_logging(level: str = "INFO", log_format: str = "text") -> logging.Logger:
    """Install a single stream handler on the connector's root logger."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if log_format == "json" else TextFormatter())
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger
