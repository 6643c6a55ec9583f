"""
Logging configuration for the session service.

Session identifiers act as bearer credentials. Access lines can carry one
in the query string (the form-field fallback), so the access handler masks
it before the line is written. Liveness probes are dropped.
"""

import logging
import logging.config
import re
from typing import Any, Dict, Iterable

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
ACCESS_FORMAT = "%(asctime)s access: %(message)s"
MASK = "***"


class AccessLogFilter(logging.Filter):
    """Mask session identifiers in access lines and drop probe requests."""

    def __init__(self, field_name: str = "_SESSION_ID", skip_paths: Iterable[str] = ("/healthz",)):
        super().__init__()
        self.pattern = re.compile(rf"(?<=[?&]){re.escape(field_name)}=[^&\s\"]*")
        self.replacement = f"{field_name}={MASK}"
        self.skip = tuple(f"GET {path} " for path in skip_paths)

    def mask(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)

    def filter(self, record: logging.LogRecord) -> bool:
        if any(probe in record.getMessage() for probe in self.skip):
            return False

        # uvicorn passes the request path as a format argument
        if isinstance(record.args, tuple):
            record.args = tuple(self.mask(arg) if isinstance(arg, str) else arg for arg in record.args)
        if isinstance(record.msg, str):
            record.msg = self.mask(record.msg)
        return True


def get_logging_config(level: str = "INFO", session_field: str = "_SESSION_ID") -> Dict[str, Any]:
    """
    Build the dictConfig for uvicorn and the sessionstash loggers.

    Args:
        level: Log level for every configured logger
        session_field: Query/form field whose value is masked in access lines
    """
    level = level.upper()

    def logger(handler: str) -> Dict[str, Any]:
        return {"handlers": [handler], "level": level, "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "access": {"()": AccessLogFilter, "field_name": session_field},
        },
        "formatters": {
            "default": {"format": LOG_FORMAT},
            "access": {"format": ACCESS_FORMAT},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
                "filters": ["access"],
            },
        },
        "loggers": {
            "uvicorn": logger("default"),
            "uvicorn.error": logger("default"),
            "uvicorn.access": logger("access"),
            "sessionstash": logger("default"),
        },
        "root": {"level": level, "handlers": ["default"]},
    }


def configure_logging(level: str = "INFO", session_field: str = "_SESSION_ID") -> None:
    """Apply the logging configuration."""
    logging.config.dictConfig(get_logging_config(level, session_field))
