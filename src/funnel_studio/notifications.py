"""User-facing notices raised by the editing session."""

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class NotificationLevel(Enum):
    """Severity of a notice."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Notification:
    """A notice shown to the author, e.g. as a toast."""
    id: str
    level: NotificationLevel
    title: str
    message: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    read: bool = False


class Notifier:
    """Collects notices and forwards them to registered listeners."""

    def __init__(self, max_history: int = 100):
        self.history: List[Notification] = []
        self.max_history = max_history
        self._listeners: List[Callable[[Notification], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Callable[[Notification], None]):
        self._listeners.append(listener)

    def notify(self, level: NotificationLevel, title: str, message: str = "") -> Notification:
        notification = Notification(id=str(uuid.uuid4())[:8], level=level, title=title, message=message)
        with self._lock:
            self.history.append(notification)
            del self.history[:-self.max_history]

        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception as e:
                logger.error(f"Notification listener failed: {e}")
        return notification

    def notify_error(self, title: str, message: str = "") -> Notification:
        return self.notify(NotificationLevel.ERROR, title, message)

    def notify_info(self, title: str, message: str = "") -> Notification:
        return self.notify(NotificationLevel.INFO, title, message)

    def unread(self, level: Optional[NotificationLevel] = None) -> List[Notification]:
        return [n for n in self.history if not n.read and (level is None or n.level == level)]

    def mark_all_read(self):
        for notification in self.history:
            notification.read = True
