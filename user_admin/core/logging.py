"""
Structured logging configuration with JSON output and PII masking.

User records carry e-mail addresses and phone numbers, so both formatters
can mask them before anything reaches the log stream.
"""

import logging
import re
import sys
from typing import Any, Optional

from pythonjsonlogger import jsonlogger

from user_admin.core.config import Settings, settings

EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b")
# Digits inside URLs (IP hosts, ports, path ids) are left alone
PHONE_PATTERN = re.compile(r"(?<![\w./:])\+?\d[\d\s().-]{6,}\d\b(?![.:]\d)")


def mask_email(email: str) -> str:
    """Mask email address keeping first 2 chars and domain."""
    parts = email.split("@")
    if len(parts) == 2:
        username, domain = parts
        if len(username) > 2:
            masked_username = username[:2] + "*" * (len(username) - 2)
        else:
            masked_username = "*" * len(username)
        return f"{masked_username}@{domain}"
    return "***@***.***"


def mask_phone(phone: str) -> str:
    """Keep the last two digits of a phone number."""
    digits = [c for c in phone if c.isdigit()]
    return "*" * max(len(digits) - 2, 0) + "".join(digits[-2:])


def mask_sensitive_data(text: str) -> str:
    """Mask sensitive data patterns in text."""
    text = EMAIL_PATTERN.sub(lambda m: mask_email(m.group(0)), text)
    text = PHONE_PATTERN.sub(lambda m: mask_phone(m.group(0)), text)
    return text


class PIIMaskingFormatter(jsonlogger.JsonFormatter):
    """
    JSON formatter with PII (Personally Identifiable Information) masking.

    Masks email addresses and phone numbers in log messages and string
    extras if configured.
    """

    def __init__(self, *args: Any, mask_pii: Optional[bool] = None, **kwargs: Any) -> None:
        self.mask_pii = settings.mask_customer_data_in_logs if mask_pii is None else mask_pii
        super().__init__(*args, **kwargs)

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with PII masking if enabled."""
        if self.mask_pii:
            record.msg = mask_sensitive_data(str(record.msg))

            for key, value in record.__dict__.items():
                if isinstance(value, str) and key not in ("name", "levelname", "pathname"):
                    record.__dict__[key] = mask_sensitive_data(value)

        return super().format(record)


class TextFormatter(logging.Formatter):
    """
    Simple text formatter for development/console output.
    """

    def __init__(self, *args: Any, mask_pii: Optional[bool] = None, **kwargs: Any) -> None:
        self.mask_pii = settings.mask_customer_data_in_logs if mask_pii is None else mask_pii
        super().__init__(*args, **kwargs)

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with optional PII masking."""
        if self.mask_pii:
            record.msg = mask_sensitive_data(str(record.msg))

        return super().format(record)


def setup_logging(config: Optional[Settings] = None) -> None:
    """
    Configure application-wide logging.

    Sets up structured JSON logging for production or text logging for development.
    Respects LOG_LEVEL and LOG_FORMAT from settings.
    """
    config = config or settings
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)

    if config.log_format == "json":
        formatter: logging.Formatter = PIIMaskingFormatter(
            fmt="%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            mask_pii=config.mask_customer_data_in_logs,
        )
    else:
        formatter = TextFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            mask_pii=config.mask_customer_data_in_logs,
        )

    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    # Request tracing from our own client in development
    if config.is_development and config.debug:
        logging.getLogger("user_admin.clients").setLevel(logging.DEBUG)

    root_logger.info(
        "Logging configured",
        extra={
            "log_level": config.log_level,
            "log_format": config.log_format,
            "environment": config.app_env,
        },
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


class AuditLogger:
    """
    Specialized logger for the trail of record changes and exports.
    """

    def __init__(self, logger_name: str = "audit") -> None:
        self.logger = logging.getLogger(logger_name)

    def log_user_created(self, user_id: int, **kwargs: Any) -> None:
        """Log user creation."""
        self.logger.info(
            "User created",
            extra={"event": "user_created", "user_id": user_id, **kwargs},
        )

    def log_user_updated(self, user_id: int, **kwargs: Any) -> None:
        """Log user update."""
        self.logger.info(
            "User updated",
            extra={"event": "user_updated", "user_id": user_id, **kwargs},
        )

    def log_user_deleted(self, user_id: int, **kwargs: Any) -> None:
        """Log user deletion."""
        self.logger.info(
            "User deleted",
            extra={"event": "user_deleted", "user_id": user_id, **kwargs},
        )

    def log_csv_exported(self, filename: str, row_count: int, **kwargs: Any) -> None:
        """Log CSV export."""
        self.logger.info(
            "Users exported to CSV",
            extra={
                "event": "csv_exported",
                "export_filename": filename,
                "row_count": row_count,
                **kwargs,
            },
        )

    def log_error(self, event: str, error: Exception, **kwargs: Any) -> None:
        """Log error with context."""
        self.logger.error(
            f"Error in {event}",
            extra={
                "event": event,
                "error_type": type(error).__name__,
                "error_message": str(error),
                **kwargs,
            },
            exc_info=True,
        )


# Global audit logger instance
audit_logger = AuditLogger()
