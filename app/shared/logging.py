"""
Logging configuration for the API and the Celery worker.

Both processes share one line format so their output can be read side by side.
Logging must not change program behavior.
Bearer tokens and bcrypt hashes are masked before a record is emitted.
"""

import logging
import re
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(process)d | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "celery.redirected": logging.WARNING,
}

_SECRET_PATTERNS = (
    # JWT: three base64url segments
    re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]+"),
    # bcrypt hash
    re.compile(r"\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}"),
)
REDACTED = "[redacted]"


def redact(text: str) -> str:
    """Replace tokens and password hashes in ``text`` with a placeholder."""
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(REDACTED, text)
    return text


class SecretRedactingFilter(logging.Filter):
    """Masks credentials that slipped into a log message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def configure_logging(level: str = "INFO") -> None:
    """Configure logging for the current process.

    Args:
        level: The log level string (DEBUG, INFO, WARNING, ERROR).
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler.addFilter(SecretRedactingFilter())

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )

    for name, noisy_level in NOISY_LOGGERS.items():
        logging.getLogger(name).setLevel(noisy_level)
