"""Load a network from the pipe-delimited import format.

One entry per line::

    CLIENT|key|name|taxId
    BASIC|key|clientKey|state
    FANCY|key|clientKey|state
    FRIENDS|key|friend1,friend2,...

Blank lines and lines starting with ``#`` are skipped.
"""

from __future__ import annotations

import logging as py_logging
from collections.abc import Iterable
from pathlib import Path

from telereg.config import AppConfig
from telereg.errors import ExitCode, ImportFormatError, RegistryError
from telereg.network import Network
from telereg.terminals.state import StateTag, parse_state_tag

logger = py_logging.getLogger(__name__)

_TERMINAL_ENTRIES = {"BASIC", "FANCY"}


def load_network(path: str | Path, *, config: AppConfig | None = None) -> Network:
    resolved = Path(path).expanduser()
    try:
        text = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        raise RegistryError(
            f"Cannot read import file: {resolved}",
            code=ExitCode.IMPORT_ERROR,
            hint=str(exc) or "Check the file path and permissions.",
        ) from exc
    network = Network.from_config(config) if config is not None else Network()
    import_lines(text.splitlines(), network)
    logger.info("Imported %s from %s", _summary(network), resolved)
    return network


def import_lines(lines: Iterable[str], network: Network) -> Network:
    for line_number, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        fields = [item.strip() for item in line.split("|")]
        try:
            _import_entry(fields, network)
        except ImportFormatError:
            raise
        except RegistryError as exc:
            raise ImportFormatError(line_number, line, exc.message) from exc
        except ValueError as exc:
            raise ImportFormatError(line_number, line, str(exc)) from exc
    network.mark_clean()
    return network


def _import_entry(fields: list[str], network: Network) -> None:
    entry = fields[0].upper()
    if entry == "CLIENT":
        _require_fields(fields, 4)
        network.register_client(fields[1], fields[2], int(fields[3]))
    elif entry in _TERMINAL_ENTRIES:
        _require_fields(fields, 4)
        state = parse_state_tag(fields[3])
        if state == StateTag.BUSY:
            raise ValueError("terminals cannot be imported busy")
        network.register_terminal(fields[1], entry, fields[2], state)
    elif entry == "FRIENDS":
        _require_fields(fields, 3)
        terminal = network.lookup_terminal(fields[1])
        for friend_key in fields[2].split(","):
            friend_key = friend_key.strip()
            if friend_key:
                terminal.add_friend(friend_key, network)
    else:
        raise ValueError(f"unknown entry type {fields[0]!r}")


def _require_fields(fields: list[str], count: int) -> None:
    if len(fields) != count:
        raise ValueError(f"expected {count} fields, found {len(fields)}")


def _summary(network: Network) -> str:
    return f"clients={len(network.clients())} terminals={len(network.terminals())}"
