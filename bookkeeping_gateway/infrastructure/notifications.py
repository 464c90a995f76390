"""Toast notifications surfaced to the reviewer"""

import logging
from collections import deque
from typing import List, Protocol
from bookkeeping_gateway.domain.models import Notification, NotificationVariant

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, notification: Notification) -> None: ...


class NotificationCenter:
    """Fire-and-forget notifier keeping a bounded history for the dashboard to poll"""

    def __init__(self, history_size: int = 50):
        self._history: deque[Notification] = deque(maxlen=history_size)

    def notify(self, notification: Notification) -> None:
        self._history.append(notification)
        level = logging.WARNING if notification.variant == NotificationVariant.DESTRUCTIVE else logging.INFO
        logger.log(level, notification.message, extra={"variant": notification.variant.value})

    def recent(self, limit: int = 20) -> List[Notification]:
        """Newest first"""
        return list(reversed(self._history))[:limit]

    def clear(self) -> None:
        self._history.clear()
