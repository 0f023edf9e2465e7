from urbarber.config import AppConfig
from urbarber.notifications.base import LoggingNotifier, Notifier
from urbarber.notifications.dispatcher import NotificationDispatcher
from urbarber.notifications.email_notifier import EmailNotifier


def build_notifier(config: AppConfig) -> Notifier:
    """Email when SMTP is configured, otherwise log the confirmation."""
    if config.notifier.enabled:
        return EmailNotifier(config.notifier, config.shop)
    return LoggingNotifier()


__all__ = [
    "Notifier", "LoggingNotifier", "EmailNotifier",
    "NotificationDispatcher", "build_notifier",
]
