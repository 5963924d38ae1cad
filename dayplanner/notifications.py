"""User-visible notifications emitted after successful mutations."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Notification:
    user_id: str
    text: str


class Notifier(ABC):
    """Sink for short confirmations such as 'Added 3 event(s)'."""

    @abstractmethod
    async def notify(self, user_id: str, text: str) -> None:
        pass


class CollectingNotifier(Notifier):
    """Keeps notifications in memory for the surrounding UI to drain."""

    def __init__(self):
        self.notifications: List[Notification] = []

    async def notify(self, user_id: str, text: str) -> None:
        self.notifications.append(Notification(user_id=user_id, text=text))

    def drain(self) -> List[Notification]:
        items, self.notifications = self.notifications, []
        return items


class ConsoleNotifier(Notifier):
    """Prints notifications through a writer (print by default)."""

    def __init__(self, writer: Optional[Callable[[str], None]] = None):
        self.writer = writer or print

    async def notify(self, user_id: str, text: str) -> None:
        logger.info(f"Notification for {user_id}: {text}")
        self.writer(f"[planner] {text}")
