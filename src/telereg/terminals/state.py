"""Terminal availability states and their transition rule."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from telereg.communications import CommunicationKind
from telereg.errors import ExitCode, RegistryError, SameStateError
from telereg.notifications import NotificationKind

if TYPE_CHECKING:
    from telereg.terminals.terminal import Terminal


class StateTag(str, Enum):
    ON = "ON"
    OFF = "OFF"
    SILENT = "SILENT"
    BUSY = "BUSY"


_TAG_ALIASES = {
    "ON": StateTag.ON,
    "IDLE": StateTag.ON,
    "OFF": StateTag.OFF,
    "SILENT": StateTag.SILENT,
    "SILENCE": StateTag.SILENT,
    "BUSY": StateTag.BUSY,
}

_CHANGE_NOTIFICATIONS = {
    (StateTag.OFF, StateTag.SILENT): NotificationKind.OFF_TO_SILENT,
    (StateTag.OFF, StateTag.ON): NotificationKind.OFF_TO_ON,
    (StateTag.SILENT, StateTag.ON): NotificationKind.SILENT_TO_ON,
    (StateTag.BUSY, StateTag.ON): NotificationKind.BUSY_TO_ON,
    (StateTag.BUSY, StateTag.SILENT): NotificationKind.BUSY_TO_SILENT,
}


@dataclass(frozen=True)
class TerminalState:
    """Availability of a terminal.

    ``previous`` is only set for BUSY and holds the state that ending the
    session restores.
    """

    tag: StateTag
    previous: TerminalState | None = None

    @classmethod
    def on(cls) -> TerminalState:
        return cls(StateTag.ON)

    @classmethod
    def off(cls) -> TerminalState:
        return cls(StateTag.OFF)

    @classmethod
    def silent(cls) -> TerminalState:
        return cls(StateTag.SILENT)

    @classmethod
    def busy(cls, previous: TerminalState) -> TerminalState:
        return cls(StateTag.BUSY, previous)

    @property
    def is_busy(self) -> bool:
        return self.tag == StateTag.BUSY

    def can_start_communication(self) -> bool:
        return self.tag in (StateTag.ON, StateTag.SILENT)

    def can_receive_text(self) -> bool:
        return self.tag in (StateTag.ON, StateTag.SILENT)

    def can_receive_interactive(self, kind: CommunicationKind) -> bool:
        del kind
        return self.tag == StateTag.ON

    def can_end_current_communication(self, terminal: Terminal) -> bool:
        if self.tag != StateTag.BUSY:
            return False
        active = terminal.active_communication
        return active is not None and active.sender_key == terminal.key

    def is_same_type(self, other: TerminalState) -> bool:
        return self.tag == other.tag

    def __str__(self) -> str:
        return self.tag.value


def transition(current: TerminalState, target: TerminalState, *, key: str = "") -> TerminalState:
    """Return the state installed when ``current`` is asked to become ``target``.

    Leaving BUSY drops the remembered state; entering BUSY remembers ``current``.
    """
    if current.is_same_type(target):
        raise SameStateError(key, current.tag.value)
    if target.tag == StateTag.BUSY:
        return TerminalState.busy(current)
    return TerminalState(target.tag)


def parse_state_tag(value: StateTag | str) -> StateTag:
    if isinstance(value, StateTag):
        return value
    normalized = str(value).strip().upper()
    tag = _TAG_ALIASES.get(normalized)
    if tag is None:
        raise RegistryError(
            f"Invalid terminal state: {value}",
            code=ExitCode.VALIDATION_ERROR,
            hint="Use one of: ON, OFF, SILENT.",
        )
    return tag


def change_notification(old: StateTag, new: StateTag) -> NotificationKind | None:
    """Notification sent to observers when a terminal goes from ``old`` to ``new``, if any."""
    return _CHANGE_NOTIFICATIONS.get((old, new))
