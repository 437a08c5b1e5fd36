"""Terminal aggregate: availability, communication ledger, friends and observers."""

from __future__ import annotations

import math
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from telereg.communications import Communication, CommunicationKind, round_amount
from telereg.errors import (
    ExitCode,
    InvalidPaymentError,
    NoActiveCommunicationError,
    RegistryError,
    UnavailableTerminalError,
    UnsupportedOperationError,
)
from telereg.notifications import Notification, NotificationKind
from telereg.terminals.state import (
    StateTag,
    TerminalState,
    change_notification,
    parse_state_tag,
    transition,
)

if TYPE_CHECKING:
    from telereg.clients import Client
    from telereg.tariffs import TariffPolicy


class TerminalKind(str, Enum):
    BASIC = "BASIC"
    FANCY = "FANCY"

    def supports(self, kind: CommunicationKind) -> bool:
        if kind == CommunicationKind.VIDEO:
            return self is TerminalKind.FANCY
        return True


class TerminalRegistry(Protocol):
    """What a terminal needs from the network it belongs to."""

    tariff: TariffPolicy
    tier_review_enabled: bool

    def lookup_terminal(self, key: str) -> Terminal: ...

    def next_communication_id(self) -> int: ...

    def mark_dirty(self) -> None: ...


class Terminal:
    def __init__(
        self,
        key: str,
        owner: Client,
        *,
        kind: TerminalKind = TerminalKind.BASIC,
        state: TerminalState | None = None,
    ) -> None:
        if state is not None and state.is_busy:
            raise RegistryError(
                f"Terminal {key} cannot be created busy",
                code=ExitCode.VALIDATION_ERROR,
                hint="Create the terminal ON, OFF or SILENT.",
            )
        self._key = key
        self._owner = owner
        self.kind = kind
        self.state = state or TerminalState.on()
        self.active_communication: Communication | None = None
        self._friends: set[str] = set()
        self._observers: list[Client] = []
        self._sent: list[Communication] = []
        self._received: list[Communication] = []

    @property
    def key(self) -> str:
        return self._key

    @property
    def owner(self) -> Client:
        return self._owner

    @property
    def friends(self) -> list[str]:
        return sorted(self._friends)

    @property
    def observers(self) -> list[Client]:
        return list(self._observers)

    @property
    def sent_communications(self) -> list[Communication]:
        return list(self._sent)

    @property
    def received_communications(self) -> list[Communication]:
        return list(self._received)

    @property
    def debt_balance(self) -> float:
        """Exact sum of the finished, unpaid communications this terminal sent."""
        return math.fsum(comm.price or 0.0 for comm in self._sent if comm.finished and not comm.paid)

    @property
    def paid_balance(self) -> float:
        return math.fsum(comm.price or 0.0 for comm in self._sent if comm.paid)

    @property
    def balance(self) -> float:
        return self.paid_balance - self.debt_balance

    @property
    def is_unused(self) -> bool:
        return not self._sent and not self._received

    def is_friend(self, key: str) -> bool:
        return key in self._friends

    def supports(self, kind: CommunicationKind) -> bool:
        return self.kind.supports(kind)

    def can_start_communication(self) -> bool:
        return self.state.can_start_communication()

    def can_end_current_communication(self) -> bool:
        return self.state.can_end_current_communication(self)

    def send_text(self, destination_key: str, text: str, network: TerminalRegistry) -> float:
        destination = network.lookup_terminal(destination_key)
        self._require_can_start()
        if not destination.state.can_receive_text():
            raise UnavailableTerminalError(destination.key, destination.state.tag.value)

        comm = Communication.text_message(
            network.next_communication_id(),
            self.key,
            destination.key,
            text,
            tariff=network.tariff,
            client_type=self.owner.client_type,
            between_friends=self.is_friend(destination.key),
        )
        price = comm.price if comm.price is not None else 0.0
        self._sent.append(comm)
        destination._received.append(comm)
        self.owner.record_communication(comm.kind, review=network.tier_review_enabled)
        network.mark_dirty()
        return price

    def send_interactive(
        self,
        destination_key: str,
        kind: CommunicationKind | str,
        network: TerminalRegistry,
    ) -> Communication:
        comm_kind = _parse_comm_kind(kind)
        if not comm_kind.is_interactive:
            raise RegistryError(
                f"Not an interactive communication kind: {comm_kind.value}",
                code=ExitCode.VALIDATION_ERROR,
                hint="Use VOICE or VIDEO.",
            )
        destination = network.lookup_terminal(destination_key)
        self._require_can_start()
        if not self.supports(comm_kind):
            raise UnsupportedOperationError(self.key, comm_kind.value)
        if not destination.supports(comm_kind):
            raise UnsupportedOperationError(destination.key, comm_kind.value)
        if destination is self:
            raise UnavailableTerminalError(self.key, self.state.tag.value)
        if not destination.state.can_receive_interactive(comm_kind):
            raise UnavailableTerminalError(destination.key, destination.state.tag.value)

        comm = Communication.interactive(
            network.next_communication_id(),
            self.key,
            destination.key,
            comm_kind,
            between_friends=self.is_friend(destination.key),
        )
        self._open_session(comm)
        destination._open_session(comm)
        self._sent.append(comm)
        destination._received.append(comm)
        network.mark_dirty()
        return comm

    def end_active_communication(self, duration: int, network: TerminalRegistry) -> int:
        comm = self.active_communication
        if comm is None or not self.can_end_current_communication():
            raise NoActiveCommunicationError(self.key)
        receiver = network.lookup_terminal(comm.receiver_key)

        price = comm.close(duration, tariff=network.tariff, client_type=self.owner.client_type)
        self._close_session()
        if receiver is not self and receiver.active_communication is comm:
            receiver._close_session()
        self.owner.record_communication(comm.kind, review=network.tier_review_enabled)
        network.mark_dirty()
        return round_amount(price)

    def pay_communication(self, comm_id: int, network: TerminalRegistry) -> None:
        comm = self._unpaid_communication(comm_id)
        comm.mark_paid()
        self.owner.record_payment(review=network.tier_review_enabled)
        network.mark_dirty()

    def change_state(
        self, new_state: TerminalState | StateTag | str, network: TerminalRegistry
    ) -> None:
        if isinstance(new_state, TerminalState):
            target = new_state
        else:
            target = TerminalState(parse_state_tag(new_state))
        if not self.state.is_same_type(target):
            if target.is_busy:
                raise RegistryError(
                    f"Terminal {self.key} cannot be set busy directly",
                    code=ExitCode.VALIDATION_ERROR,
                    hint="Start an interactive communication instead.",
                )
            if self.state.is_busy:
                raise UnavailableTerminalError(self.key, self.state.tag.value)
        self._install(transition(self.state, target, key=self.key))
        network.mark_dirty()

    def add_friend(self, key: str, network: TerminalRegistry) -> None:
        friend = network.lookup_terminal(key)
        if friend.key == self.key or friend.key in self._friends:
            return
        self._friends.add(friend.key)
        network.mark_dirty()

    def remove_friend(self, key: str, network: TerminalRegistry) -> None:
        friend = network.lookup_terminal(key)
        if friend.key == self.key or friend.key not in self._friends:
            return
        self._friends.discard(friend.key)
        network.mark_dirty()

    def add_observer(self, client: Client) -> None:
        if client not in self._observers:
            self._observers.append(client)

    def notify_observers(self, change: NotificationKind) -> None:
        for client in self._observers:
            client.notify(Notification(self.key, change))

    def to_record(self) -> str:
        fields = [
            self.key,
            self.owner.key,
            self.state.tag.value,
            str(round_amount(self.debt_balance)),
            str(round_amount(self.paid_balance)),
        ]
        if self._friends:
            fields.append(",".join(sorted(self._friends)))
        return "|".join(fields)

    def _require_can_start(self) -> None:
        if not self.can_start_communication():
            raise UnavailableTerminalError(self.key, self.state.tag.value)

    def _unpaid_communication(self, comm_id: int) -> Communication:
        for comm in self._sent:
            if comm.comm_id == comm_id:
                if comm.finished and not comm.paid:
                    return comm
                break
        raise InvalidPaymentError(comm_id)

    def _open_session(self, comm: Communication) -> None:
        self._install(transition(self.state, TerminalState(StateTag.BUSY), key=self.key))
        self.active_communication = comm

    def _close_session(self) -> None:
        restored = self.state.previous or TerminalState.on()
        self.active_communication = None
        self._install(transition(self.state, restored, key=self.key))

    def _install(self, state: TerminalState) -> None:
        old = self.state.tag
        self.state = state
        change = change_notification(old, state.tag)
        if change is None or not self._observers:
            return
        self.notify_observers(change)
        self._observers.clear()

    def __repr__(self) -> str:
        return f"Terminal({self.to_record()!r})"


def _parse_comm_kind(value: CommunicationKind | str) -> CommunicationKind:
    if isinstance(value, CommunicationKind):
        return value
    try:
        return CommunicationKind(str(value).strip().upper())
    except ValueError as exc:
        raise RegistryError(
            f"Invalid communication kind: {value}",
            code=ExitCode.VALIDATION_ERROR,
            hint="Use VOICE or VIDEO.",
        ) from exc


def parse_terminal_kind(value: TerminalKind | str) -> TerminalKind:
    if isinstance(value, TerminalKind):
        return value
    try:
        return TerminalKind(str(value).strip().upper())
    except ValueError as exc:
        raise RegistryError(
            f"Invalid terminal kind: {value}",
            code=ExitCode.VALIDATION_ERROR,
            hint="Use BASIC or FANCY.",
        ) from exc
