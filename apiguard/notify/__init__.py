"""
User-visible notifications (toasts).

A notifier is any callable ``(severity, title, message=None) -> None``. It is
optional everywhere: ``notify`` calls it if present and never lets it break
the request path.
"""

import logging
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Severity(Enum):
    """Toast severities."""
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARN = "warn"


Notifier = Callable[[str, str, Optional[str]], None]


def notify(notifier: Optional[Notifier], severity: Severity, title: str,
           message: Optional[str] = None) -> None:
    """Call the notifier if one is configured."""
    if notifier is None:
        return
    try:
        notifier(severity.value, title, message)
    except Exception as e:
        logger.error(f"Notifier failed for '{title}': {e}")


class LoggingNotifier:
    """Notifier that writes toasts to a logger."""

    LEVELS = {
        Severity.SUCCESS.value: logging.INFO,
        Severity.INFO.value: logging.INFO,
        Severity.WARN.value: logging.WARNING,
        Severity.ERROR.value: logging.ERROR,
    }

    def __init__(self, target: Optional[logging.Logger] = None):
        self.logger = target or logging.getLogger("apiguard.toast")

    def __call__(self, severity: str, title: str, message: Optional[str] = None) -> None:
        level = self.LEVELS.get(severity, logging.INFO)
        if message:
            self.logger.log(level, f"{title}: {message}")
        else:
            self.logger.log(level, title)


__all__ = [
    "Severity",
    "Notifier",
    "notify",
    "LoggingNotifier",
]
