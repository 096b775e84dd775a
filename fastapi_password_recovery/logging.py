"""
Structured logging for the recovery subsystem.

Every module obtains its logger through get_logger(__name__). Events are
snake_case names with key/value context, for example::

    log.info("otp_issued", email=mask_email(email), expires_at=...)

OTP codes, reset tokens and passwords must never be logged; the
redact_sensitive_fields processor blanks them if they slip into an event.
"""

import logging
import sys

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

SENSITIVE_FIELDS = ("code", "otp", "token", "password", "secret")

_PRESERVED_KEYS = {"event", "level", "logger", "timestamp"}


def mask_email(email: str | None) -> str | None:
    """
    Mask the local part of an email address for logging.

    Example:
        >>> mask_email("reader@library.org")
        'r***@library.org'
    """
    if not email:
        return email
    local, sep, domain = email.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """
    Redact secrets from the event dict.

    A key is sensitive when one of its underscore separated words is in
    SENSITIVE_FIELDS, so ``reset_token`` is redacted but ``tokens`` is not.
    """
    for key in list(event_dict.keys()):
        if key in _PRESERVED_KEYS:
            continue
        words = key.lower().split("_")
        if any(sensitive in words for sensitive in SENSITIVE_FIELDS):
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_logging(level: str = "INFO", *, json: bool = False) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
        json: Render JSON lines instead of the development console format
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_sensitive_fields,
        structlog.processors.StackInfoRenderer(),
    ]
    if json:
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> BoundLogger:
    """
    Get a structlog logger bound to *name*.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("otp_issued", email=mask_email("reader@library.org"))
    """
    return structlog.get_logger(name)
