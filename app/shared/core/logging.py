import sys
import structlog
import logging
from app.shared.core.config import get_settings


def pii_redactor(logger, method_name, event_dict):
    """
    Redact credentials and personal fields from logs before rendering.
    """
    pii_fields = {
        "email", "password", "password_hash", "token", "secret", "session", "cookie"
    }

    for field in pii_fields:
        if field in event_dict:
            event_dict[field] = "[REDACTED]"

    for container in ["metadata", "payload", "details", "extra"]:
        if container in event_dict and isinstance(event_dict[container], dict):
            for field in pii_fields:
                if field in event_dict[container]:
                    event_dict[container][field] = "[REDACTED]"

    return event_dict


def setup_logging():
    settings = get_settings()

    # 1. Choose the renderer based on environment
    if settings.DEBUG:
        renderer = structlog.dev.ConsoleRenderer()
        min_level = logging.DEBUG
    else:
        renderer = structlog.processors.JSONRenderer()
        min_level = logging.INFO

    # 2. Processor pipeline
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        pii_redactor,
        renderer
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # 3. Route stdlib logging (uvicorn, sqlalchemy) to stdout at the same level
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=min_level,
    )


def audit_log(event: str, user_id: str, details: dict = None):
    """
    Standardized helper for security-relevant events (logins, deletions).
    """
    logger = structlog.get_logger("audit")
    logger.info(
        "audit_event",
        audit_event=event,
        user_id=str(user_id),
        metadata=details or {},
    )
