"""Toast-style notifications shown once by the page."""

from dataclasses import dataclass
from enum import Enum

import structlog

logger = structlog.get_logger(__name__)


class NotificationLevel(Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str


class Notifier:
    def __init__(self) -> None:
        self._pending: list[Notification] = []

    def _push(self, level: NotificationLevel, message: str) -> None:
        self._pending.append(Notification(level=level, message=message))

    def success(self, message: str) -> None:
        logger.info("toast", level="success", message=message)
        self._push(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> None:
        logger.warning("toast", level="error", message=message)
        self._push(NotificationLevel.ERROR, message)

    def info(self, message: str) -> None:
        logger.info("toast", level="info", message=message)
        self._push(NotificationLevel.INFO, message)

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        """Return pending notifications and forget them."""
        pending, self._pending = self._pending, []
        return pending
