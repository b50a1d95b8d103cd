"""Status notifications for the host.

The engine reports progress as short human-readable strings: once when an
operation starts, once when it completes, and once per failure.  These are
purely observational and never influence the algorithms.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, message: str, error: bool = False) -> None: ...


@dataclass
class Notification:
    message: str
    error: bool = False


class LoggingNotifier:
    """Send notifications to the log."""

    def notify(self, message: str, error: bool = False) -> None:
        if error:
            logger.error(message)
        else:
            logger.info(message)


@dataclass
class RecordingNotifier:
    """Keep notifications so they can be returned to the caller."""
    notifications: list[Notification] = field(default_factory=list)
    echo: bool = True

    def notify(self, message: str, error: bool = False) -> None:
        self.notifications.append(Notification(message=message, error=error))
        if self.echo:
            LoggingNotifier().notify(message, error=error)

    @property
    def messages(self) -> list[str]:
        return [n.message for n in self.notifications]

    @property
    def errors(self) -> list[str]:
        return [n.message for n in self.notifications if n.error]
