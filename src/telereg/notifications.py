"""Terminal availability notifications and their delivery strategies."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class NotificationKind(str, Enum):
    OFF_TO_SILENT = "O2S"
    OFF_TO_ON = "O2I"
    SILENT_TO_ON = "S2I"
    BUSY_TO_ON = "B2I"
    BUSY_TO_SILENT = "B2S"


@dataclass(frozen=True)
class Notification:
    terminal_key: str
    kind: NotificationKind

    def to_record(self) -> str:
        return f"{self.kind.value}|{self.terminal_key}"


class NotificationDelivery(Protocol):
    def deliver(self, notification: Notification) -> bool:
        """Hand ``notification`` over; ``False`` keeps it in the client's unread queue."""
        ...


class QueuedDelivery:
    """Keep notifications until the client reads them."""

    def deliver(self, notification: Notification) -> bool:
        del notification
        return False


class ImmediateDelivery:
    def __init__(self, sink: Callable[[Notification], None]) -> None:
        self._sink = sink

    def deliver(self, notification: Notification) -> bool:
        self._sink(notification)
        return True
