from __future__ import annotations

from telereg.communications import CommunicationKind
from telereg.network import Network
from telereg.notifications import ImmediateDelivery, Notification, NotificationKind, QueuedDelivery
from telereg.terminals import StateTag, Terminal, TerminalKind


def _network() -> tuple[Network, Terminal, Terminal]:
    network = Network()
    network.register_client("c1", "Ana", 100)
    network.register_client("c2", "Rui", 200)
    t1 = network.register_terminal("t1", TerminalKind.FANCY, "c1")
    t2 = network.register_terminal("t2", TerminalKind.FANCY, "c2", StateTag.OFF)
    return network, t1, t2


def test_observer_is_notified_when_terminal_turns_on() -> None:
    network, _, t2 = _network()
    network.watch("t2", "c1")

    t2.change_state(StateTag.ON, network)

    client = network.lookup_client("c1")
    assert client.pending_notifications == (Notification("t2", NotificationKind.OFF_TO_ON),)
    assert t2.observers == []


def test_off_to_silent_notification() -> None:
    network, _, t2 = _network()
    network.watch("t2", "c1")

    t2.change_state(StateTag.SILENT, network)

    [notification] = network.lookup_client("c1").read_notifications()
    assert notification.to_record() == "O2S|t2"


def test_transition_without_notification_keeps_observers() -> None:
    network, t1, _ = _network()
    network.watch("t1", "c2")

    t1.change_state(StateTag.OFF, network)

    assert network.lookup_client("c2").pending_notifications == ()
    assert t1.observers == [network.lookup_client("c2")]


def test_end_of_session_notifies_busy_to_on() -> None:
    network, t1, t2 = _network()
    t2.change_state(StateTag.ON, network)
    network.register_client("c3", "Eva", 300)
    t1.send_interactive("t2", CommunicationKind.VOICE, network)
    network.watch("t2", "c3")

    t1.end_active_communication(2, network)

    [notification] = network.lookup_client("c3").read_notifications()
    assert notification == Notification("t2", NotificationKind.BUSY_TO_ON)


def test_disabled_client_does_not_queue_notifications() -> None:
    network, _, t2 = _network()
    network.set_client_notifications("c1", False)
    network.watch("t2", "c1")

    t2.change_state(StateTag.ON, network)

    assert network.lookup_client("c1").pending_notifications == ()


def test_notify_observers_with_no_observers_is_a_no_op() -> None:
    _, t1, _ = _network()

    t1.notify_observers(NotificationKind.OFF_TO_ON)

    assert t1.observers == []


def test_watching_twice_registers_once() -> None:
    network, _, t2 = _network()
    network.watch("t2", "c1")
    network.watch("t2", "c1")

    assert len(t2.observers) == 1


def test_immediate_delivery_bypasses_queue() -> None:
    network, _, t2 = _network()
    received: list[Notification] = []
    client = network.lookup_client("c1")
    client.delivery = ImmediateDelivery(received.append)
    network.watch("t2", "c1")

    t2.change_state(StateTag.ON, network)

    assert received == [Notification("t2", NotificationKind.OFF_TO_ON)]
    assert client.pending_notifications == ()


def test_queued_delivery_keeps_notifications() -> None:
    assert QueuedDelivery().deliver(Notification("t1", NotificationKind.SILENT_TO_ON)) is False
