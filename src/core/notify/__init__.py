"""Push notification abstraction layer."""

from core.notify.expo_notifier import ExpoNotifier
from core.notify.interface import Notifier, get_notifier
from core.notify.messages import build_fare_alert

__all__ = ["ExpoNotifier", "Notifier", "build_fare_alert", "get_notifier"]
