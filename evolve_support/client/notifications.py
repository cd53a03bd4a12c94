"""Transient user-facing notifications."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal

import structlog

from evolve_support.client.errors import ClientError

logger = structlog.get_logger()

Variant = Literal["default", "destructive"]


@dataclass(frozen=True)
class Notification:
    title: str
    description: str
    variant: Variant = "default"

    @classmethod
    def from_error(cls, title: str, error: ClientError) -> "Notification":
        return cls(title=title, description=error.message, variant="destructive")


class Notifier(ABC):
    """Sink for toast-style notifications."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        pass


class LogNotifier(Notifier):
    """Writes notifications to the structured log."""

    def notify(self, notification: Notification) -> None:
        log = logger.warning if notification.variant == "destructive" else logger.info
        log(
            "Notification",
            title=notification.title,
            description=notification.description,
        )
