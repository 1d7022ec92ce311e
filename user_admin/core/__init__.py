"""Core application modules."""

from user_admin.core.config import Settings, settings
from user_admin.core.logging import get_logger, setup_logging, audit_logger

__all__ = [
    "Settings",
    "settings",
    "get_logger",
    "setup_logging",
    "audit_logger",
]
