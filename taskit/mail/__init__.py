"""Outbound account notifications."""
from .notifications import (
    Notifier,
    LogNotifier,
    SmtpNotifier,
    EventNotifier,
    build_notifier,
)

__all__ = ["Notifier", "LogNotifier", "SmtpNotifier", "EventNotifier", "build_notifier"]
