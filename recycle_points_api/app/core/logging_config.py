"""
Logging configuration for the application.

The ``setup_logging`` function configures the root logger with a
console handler and an optional file handler.  Every handler carries a
``CredentialFilter`` so that passwords, stored credential hashes and
bearer tokens are masked before a record is written anywhere.
"""

import logging
import re
from pathlib import Path
from typing import Optional


REDACTED = "[REDACTED]"

_SECRET_PATTERNS = (
    # password=..., "password": "...", senha: ...
    (re.compile(r"(?i)(\"?(?:password|senha|token)\"?\s*[=:]\s*\"?)[^\s\",}]+"), r"\1" + REDACTED),
    # Authorization: Bearer <token>
    (re.compile(r"(?i)(bearer\s+)[A-Za-z0-9._~+/=-]+"), r"\1" + REDACTED),
    # "<salt hex>$<hash hex>" as produced by security.hash_password
    (re.compile(r"\b[0-9a-f]{32}\$[0-9a-f]{64}\b"), REDACTED),
)


def redact(text: str) -> str:
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class CredentialFilter(logging.Filter):
    """Mask credentials in the rendered message of a record.

    The record is never dropped.  When something was masked the
    formatted message replaces ``msg`` and ``args`` is cleared.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = redact(message)
        if masked != message:
            record.msg = masked
            record.args = ()
        return True


def _install_filter(handler: logging.Handler) -> None:
    if not any(isinstance(f, CredentialFilter) for f in handler.filters):
        handler.addFilter(CredentialFilter())


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure root logger.

    If no handlers are attached to the root logger, attach a
    console handler and optionally a file handler.  Handlers that are
    already attached only get the credential filter.

    Parameters
    ----------
    level : str
        Logging level name (e.g. ``"DEBUG"``, ``"INFO"``).  Case
        insensitive.
    logfile : Optional[str]
        Path to a file to log messages to.  If omitted, no file
        handler is added.
    """
    logger = logging.getLogger()
    if logger.handlers:
        # Already configured (test runs, repeated ``create_app`` calls).
        for handler in logger.handlers:
            _install_filter(handler)
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handlers = [logging.StreamHandler()]
    if logfile:
        log_path = Path(logfile).resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        _install_filter(handler)
        logger.addHandler(handler)
