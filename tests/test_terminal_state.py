from __future__ import annotations

import pytest

from telereg.communications import CommunicationKind
from telereg.errors import ExitCode, RegistryError, SameStateError
from telereg.notifications import NotificationKind
from telereg.terminals import StateTag, TerminalState, change_notification, parse_state_tag, transition


def test_only_on_and_silent_terminals_can_start_communications() -> None:
    assert TerminalState.on().can_start_communication()
    assert TerminalState.silent().can_start_communication()
    assert not TerminalState.off().can_start_communication()
    assert not TerminalState.busy(TerminalState.on()).can_start_communication()


def test_text_reception_is_blocked_by_off_and_busy() -> None:
    assert TerminalState.on().can_receive_text()
    assert TerminalState.silent().can_receive_text()
    assert not TerminalState.off().can_receive_text()
    assert not TerminalState.busy(TerminalState.silent()).can_receive_text()


def test_interactive_reception_requires_on() -> None:
    for kind in (CommunicationKind.VOICE, CommunicationKind.VIDEO):
        assert TerminalState.on().can_receive_interactive(kind)
        assert not TerminalState.silent().can_receive_interactive(kind)
        assert not TerminalState.off().can_receive_interactive(kind)
        assert not TerminalState.busy(TerminalState.on()).can_receive_interactive(kind)


def test_same_type_ignores_remembered_state() -> None:
    assert TerminalState.busy(TerminalState.on()).is_same_type(TerminalState.busy(TerminalState.silent()))
    assert not TerminalState.on().is_same_type(TerminalState.silent())


def test_transition_to_same_tag_fails() -> None:
    with pytest.raises(SameStateError) as exc:
        transition(TerminalState.silent(), TerminalState.silent(), key="t1")

    assert exc.value.key == "t1"
    assert exc.value.state == "SILENT"


def test_entering_busy_remembers_current_state() -> None:
    state = transition(TerminalState.silent(), TerminalState(StateTag.BUSY))

    assert state.tag == StateTag.BUSY
    assert state.previous == TerminalState.silent()


def test_leaving_busy_discards_remembered_state() -> None:
    state = transition(TerminalState.busy(TerminalState.silent()), TerminalState.off())

    assert state == TerminalState.off()
    assert state.previous is None


def test_state_renders_as_tag() -> None:
    assert str(TerminalState.busy(TerminalState.on())) == "BUSY"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("on", StateTag.ON),
        ("IDLE", StateTag.ON),
        (" off ", StateTag.OFF),
        ("SILENCE", StateTag.SILENT),
        ("silent", StateTag.SILENT),
        (StateTag.BUSY, StateTag.BUSY),
    ],
)
def test_parse_state_tag_accepts_aliases(raw: str, expected: StateTag) -> None:
    assert parse_state_tag(raw) == expected


def test_parse_state_tag_rejects_unknown_values() -> None:
    with pytest.raises(RegistryError) as exc:
        parse_state_tag("sleeping")

    assert exc.value.code == ExitCode.VALIDATION_ERROR


def test_change_notification_kinds() -> None:
    assert change_notification(StateTag.OFF, StateTag.SILENT) == NotificationKind.OFF_TO_SILENT
    assert change_notification(StateTag.OFF, StateTag.ON) == NotificationKind.OFF_TO_ON
    assert change_notification(StateTag.SILENT, StateTag.ON) == NotificationKind.SILENT_TO_ON
    assert change_notification(StateTag.BUSY, StateTag.ON) == NotificationKind.BUSY_TO_ON
    assert change_notification(StateTag.BUSY, StateTag.SILENT) == NotificationKind.BUSY_TO_SILENT
    assert change_notification(StateTag.ON, StateTag.OFF) is None
    assert change_notification(StateTag.ON, StateTag.BUSY) is None
