"""
Logging setup driven by LoggingSettings.

Library modules only create loggers with ``logging.getLogger(__name__)``;
the embedding application calls :func:`configure_logging` once.
"""

import json
import logging
from datetime import datetime, timezone

from seedi.config import LoggingSettings, get_settings

_HANDLER_NAME = "seedi"


class JsonFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(settings: LoggingSettings | None = None) -> logging.Logger:
    """
    Attach a single stream handler to the ``seedi`` logger.

    Calling it again replaces the handler, so level or format changes
    take effect without duplicating output.
    """
    cfg = settings or get_settings().logging
    logger = logging.getLogger("seedi")
    logger.setLevel(cfg.log_level)

    for handler in list(logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if cfg.log_format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
    logger.addHandler(handler)
    return logger
