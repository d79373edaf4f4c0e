"""Chat notification sinks for order events."""

from .hipchat import Color, HipchatClient, NotificationError, Notifier, NullNotifier

__all__ = ["Color", "HipchatClient", "NotificationError", "Notifier", "NullNotifier"]
