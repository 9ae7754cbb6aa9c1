from enum import Enum
from typing import List, Protocol

from pydantic import BaseModel

from core.logging import logger


class Variant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Notification(BaseModel):
    title: str
    description: str = ""
    variant: Variant = Variant.DEFAULT


class Notifier(Protocol):
    """Port through which services surface transient messages to the user."""

    def notify(self, notification: Notification) -> None:
        ...


class LoggingNotifier:
    """Writes notifications to the application log."""

    def notify(self, notification: Notification) -> None:
        if notification.variant == Variant.DESTRUCTIVE:
            logger.warning(f"[notify] {notification.title}: {notification.description}")
        else:
            logger.info(f"[notify] {notification.title}: {notification.description}")


class InMemoryNotifier:
    """Keeps notifications in a list, e.g. for a UI to poll or for tests."""

    def __init__(self, limit: int = 20):
        self.limit = limit
        self.notifications: List[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)
        if len(self.notifications) > self.limit:
            del self.notifications[: len(self.notifications) - self.limit]

    def clear(self) -> None:
        self.notifications.clear()
