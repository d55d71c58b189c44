"""
Notification Sinks

Fire-and-forget delivery of user-facing error messages. The cart never
consumes a return value and a failing sink must not break a cart operation.
"""

from typing import Callable, Protocol

from shopcart.i18n import get_text
from shopcart.logging import get_logger, sanitize_string_for_logging

logger = get_logger(__name__)


class NotificationSink(Protocol):
    def error(self, message: str) -> None: ...


class LoggingNotificationSink:
    """Default sink: writes user-facing errors to the log."""

    def error(self, message: str) -> None:
        logger.warning(f"[user] {sanitize_string_for_logging(message, max_length=200)}")


class CallbackNotificationSink:
    """Adapts a UI callback (toast, status bar, dialog) to NotificationSink."""

    def __init__(self, callback: Callable[[str], None]):
        self._callback = callback

    def error(self, message: str) -> None:
        self._callback(message)


class Notifier:
    """Resolves message keys in the configured language and emits them."""

    def __init__(self, sink: NotificationSink, language: str = "en"):
        self.sink = sink
        self.language = language

    def error(self, key: str) -> None:
        message = get_text(key, self.language)
        try:
            self.sink.error(message)
        except Exception as e:
            logger.error(f"Notification sink failed for {key}: {e}", exc_info=True)


__all__ = [
    "NotificationSink",
    "LoggingNotificationSink",
    "CallbackNotificationSink",
    "Notifier",
]
