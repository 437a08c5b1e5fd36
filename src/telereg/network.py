"""In-memory registry of clients and terminals."""

from __future__ import annotations

import logging as py_logging

from telereg.clients import Client
from telereg.communications import Communication
from telereg.config import AppConfig, build_tariff_policy
from telereg.errors import DuplicateKeyError, UnknownKeyError
from telereg.tariffs import ClientType, TariffPolicy
from telereg.terminals.state import StateTag, TerminalState, parse_state_tag
from telereg.terminals.terminal import Terminal, TerminalKind, parse_terminal_kind

logger = py_logging.getLogger(__name__)


class Network:
    """Registry that resolves keys, hands out communication ids and tracks staleness.

    Terminal operations receive the network explicitly; it holds no business
    rules of its own beyond registration.
    """

    def __init__(
        self,
        *,
        tariff: TariffPolicy | None = None,
        tier_review_enabled: bool = True,
        notifications_default: bool = True,
        default_client_type: ClientType = ClientType.NORMAL,
    ) -> None:
        self.tariff = tariff or TariffPolicy()
        self.tier_review_enabled = tier_review_enabled
        self.notifications_default = notifications_default
        self.default_client_type = default_client_type
        self._clients: dict[str, Client] = {}
        self._terminals: dict[str, Terminal] = {}
        self._next_comm_id = 1
        self._dirty = False

    @classmethod
    def from_config(cls, config: AppConfig) -> Network:
        return cls(
            tariff=build_tariff_policy(config),
            tier_review_enabled=config.tier_review_enabled,
            notifications_default=config.notifications_default,
            default_client_type=ClientType(config.default_client_type),
        )

    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        if not self._dirty:
            logger.debug("Network state marked dirty")
        self._dirty = True

    def mark_clean(self) -> None:
        self._dirty = False

    def register_client(self, key: str, name: str, tax_id: int) -> Client:
        if key in self._clients:
            raise DuplicateKeyError(key, entity="client")
        client = Client(
            key,
            name,
            tax_id,
            client_type=self.default_client_type,
            notifications_enabled=self.notifications_default,
        )
        self._clients[key] = client
        logger.debug("Registered client key=%s", key)
        self.mark_dirty()
        return client

    def register_terminal(
        self,
        key: str,
        kind: TerminalKind | str,
        client_key: str,
        state: StateTag | str = StateTag.ON,
    ) -> Terminal:
        if key in self._terminals:
            raise DuplicateKeyError(key, entity="terminal")
        owner = self.lookup_client(client_key)
        terminal = Terminal(
            key,
            owner,
            kind=parse_terminal_kind(kind),
            state=TerminalState(parse_state_tag(state)),
        )
        self._terminals[key] = terminal
        owner.add_terminal(terminal)
        logger.debug("Registered terminal key=%s kind=%s owner=%s", key, terminal.kind.value, client_key)
        self.mark_dirty()
        return terminal

    def lookup_client(self, key: str) -> Client:
        client = self._clients.get(key)
        if client is None:
            raise UnknownKeyError(key, entity="client")
        return client

    def lookup_terminal(self, key: str) -> Terminal:
        terminal = self._terminals.get(key)
        if terminal is None:
            raise UnknownKeyError(key, entity="terminal")
        return terminal

    def next_communication_id(self) -> int:
        comm_id = self._next_comm_id
        self._next_comm_id += 1
        return comm_id

    def watch(self, terminal_key: str, client_key: str) -> None:
        """Subscribe a client to the availability changes of a terminal."""
        terminal = self.lookup_terminal(terminal_key)
        client = self.lookup_client(client_key)
        terminal.add_observer(client)
        self.mark_dirty()

    def set_client_notifications(self, client_key: str, enabled: bool) -> None:
        self.lookup_client(client_key).set_notifications(enabled)
        self.mark_dirty()

    def clients(self) -> list[Client]:
        return [self._clients[key] for key in sorted(self._clients)]

    def terminals(self) -> list[Terminal]:
        return [self._terminals[key] for key in sorted(self._terminals)]

    def unused_terminals(self) -> list[Terminal]:
        return [item for item in self.terminals() if item.is_unused]

    def terminals_with_positive_balance(self) -> list[Terminal]:
        return [item for item in self.terminals() if item.balance > 0]

    def communications(self) -> list[Communication]:
        collected = [comm for terminal in self._terminals.values() for comm in terminal.sent_communications]
        return sorted(collected, key=lambda comm: comm.comm_id)

    def communications_from_client(self, client_key: str) -> list[Communication]:
        client = self.lookup_client(client_key)
        collected = [comm for terminal in client.terminals for comm in terminal.sent_communications]
        return sorted(collected, key=lambda comm: comm.comm_id)

    def communications_to_client(self, client_key: str) -> list[Communication]:
        client = self.lookup_client(client_key)
        seen: dict[int, Communication] = {}
        for terminal in client.terminals:
            for comm in terminal.received_communications:
                seen[comm.comm_id] = comm
        return [seen[comm_id] for comm_id in sorted(seen)]

    def clients_with_debts(self) -> list[Client]:
        indebted = [client for client in self._clients.values() if client.debt > 0]
        return sorted(indebted, key=lambda client: (-client.debt, client.key))

    def clients_without_debts(self) -> list[Client]:
        return [client for client in self.clients() if client.debt <= 0]

    def global_balance(self) -> tuple[float, float]:
        paid = sum((client.paid for client in self._clients.values()), 0.0)
        debt = sum((client.debt for client in self._clients.values()), 0.0)
        return paid, debt
