"""
ComplyDocs Logging
Text or JSON console logging, configured once by the CLI or host application
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

# Extra attributes copied into JSON records when present
CONTEXT_FIELDS = ("organization_id", "document_id", "requirement_id", "user_id")


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON"""

    def format(self, record):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for name in CONTEXT_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        return json.dumps(log_data)


def setup_logging(level: str = "INFO", log_format: str = "text", logger_name: Optional[str] = None):
    """Configure console logging. Defaults to the root logger so every module logger inherits it."""
    logger = logging.getLogger(logger_name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers
    logger.handlers = []

    handler = logging.StreamHandler()
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        ))

    logger.addHandler(handler)
    return logger
