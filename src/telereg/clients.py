"""Registry clients: terminal owners, pricing tier and notification inbox."""

from __future__ import annotations

import math
from collections import deque
from typing import TYPE_CHECKING

from telereg.communications import CommunicationKind, round_amount
from telereg.notifications import Notification, NotificationDelivery, QueuedDelivery
from telereg.tariffs import PLATINUM_VIDEO_STREAK, ClientType, review_client_type

if TYPE_CHECKING:
    from telereg.terminals.terminal import Terminal


class Client:
    def __init__(
        self,
        key: str,
        name: str,
        tax_id: int,
        *,
        client_type: ClientType = ClientType.NORMAL,
        notifications_enabled: bool = True,
        delivery: NotificationDelivery | None = None,
    ) -> None:
        self.key = key
        self.name = name
        self.tax_id = tax_id
        self.client_type = client_type
        self.notifications_enabled = notifications_enabled
        self.delivery: NotificationDelivery = delivery or QueuedDelivery()
        self._terminals: dict[str, Terminal] = {}
        self._notifications: list[Notification] = []
        self._recent_kinds: deque[CommunicationKind] = deque(maxlen=PLATINUM_VIDEO_STREAK)

    @property
    def terminals(self) -> list[Terminal]:
        return [self._terminals[key] for key in sorted(self._terminals)]

    @property
    def terminal_count(self) -> int:
        return len(self._terminals)

    @property
    def debt(self) -> float:
        return math.fsum(terminal.debt_balance for terminal in self._terminals.values())

    @property
    def paid(self) -> float:
        return math.fsum(terminal.paid_balance for terminal in self._terminals.values())

    @property
    def balance(self) -> float:
        return self.paid - self.debt

    @property
    def pending_notifications(self) -> tuple[Notification, ...]:
        return tuple(self._notifications)

    def add_terminal(self, terminal: Terminal) -> None:
        self._terminals[terminal.key] = terminal

    def set_notifications(self, enabled: bool) -> None:
        self.notifications_enabled = enabled

    def notify(self, notification: Notification) -> None:
        if not self.notifications_enabled:
            return
        if not self.delivery.deliver(notification):
            self._notifications.append(notification)

    def read_notifications(self) -> list[Notification]:
        unread = list(self._notifications)
        self._notifications.clear()
        return unread

    def record_communication(self, kind: CommunicationKind, *, review: bool = True) -> None:
        self._recent_kinds.append(kind)
        if review:
            self._review(after_payment=False)

    def record_payment(self, *, review: bool = True) -> None:
        if review:
            self._review(after_payment=True)

    def _review(self, *, after_payment: bool) -> None:
        updated = review_client_type(
            self.client_type,
            self.balance,
            tuple(self._recent_kinds),
            after_payment=after_payment,
        )
        if updated != self.client_type:
            self.client_type = updated
            self._recent_kinds.clear()

    def to_record(self) -> str:
        return "|".join(
            [
                "CLIENT",
                self.key,
                self.name,
                str(self.tax_id),
                self.client_type.value,
                "YES" if self.notifications_enabled else "NO",
                str(self.terminal_count),
                str(round_amount(self.debt)),
                str(round_amount(self.paid)),
            ]
        )
