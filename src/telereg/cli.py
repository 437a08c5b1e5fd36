"""Public CLI contract and entrypoint."""

from __future__ import annotations

import argparse
import logging as py_logging
import sys
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TextIO

from .communications import round_amount
from .config import load_config
from .errors import ExitCode, RegistryError, user_facing_error
from .importer import load_network
from .logging import LOG_LEVELS, configure_logging, default_log_path, normalize_level
from .network import Network


def _show_clients(network: Network) -> list[str]:
    return [client.to_record() for client in network.clients()]


def _show_terminals(network: Network) -> list[str]:
    return [terminal.to_record() for terminal in network.terminals()]


def _show_unused(network: Network) -> list[str]:
    return [terminal.to_record() for terminal in network.unused_terminals()]


def _show_positive(network: Network) -> list[str]:
    return [terminal.to_record() for terminal in network.terminals_with_positive_balance()]


def _show_debtors(network: Network) -> list[str]:
    return [client.to_record() for client in network.clients_with_debts()]


def _show_settled(network: Network) -> list[str]:
    return [client.to_record() for client in network.clients_without_debts()]


def _show_communications(network: Network) -> list[str]:
    return [comm.to_record() for comm in network.communications()]


def _show_balance(network: Network) -> list[str]:
    paid, debt = network.global_balance()
    return [f"BALANCE|{round_amount(paid)}|{round_amount(debt)}"]


def _show_sent(network: Network, client_key: str) -> list[str]:
    return [comm.to_record() for comm in network.communications_from_client(client_key)]


def _show_received(network: Network, client_key: str) -> list[str]:
    return [comm.to_record() for comm in network.communications_to_client(client_key)]


_VIEWS: dict[str, Callable[[Network], list[str]]] = {
    "clients": _show_clients,
    "terminals": _show_terminals,
    "unused": _show_unused,
    "positive": _show_positive,
    "debtors": _show_debtors,
    "settled": _show_settled,
    "communications": _show_communications,
    "balance": _show_balance,
}
_CLIENT_VIEWS: dict[str, Callable[[Network, str], list[str]]] = {
    "sent": _show_sent,
    "received": _show_received,
}


def _log_level_type(value: str) -> str:
    normalized = normalize_level(value)
    if normalized is None:
        accepted = ", ".join(LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="telereg")
    parser.add_argument("import_file", type=Path, help="Network import file")
    parser.add_argument("--show", choices=(*_VIEWS, *_CLIENT_VIEWS), default="clients")
    parser.add_argument("--client", default=None, help="Client key for the sent and received views")
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--log-level", type=_log_level_type, default=None)
    parser.add_argument("--log-file", type=Path, default=None)
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    return parser.parse_args(argv)


def render(network: Network, view: str, client_key: str | None = None) -> list[str]:
    if view not in _CLIENT_VIEWS:
        return _VIEWS[view](network)
    if not client_key:
        raise RegistryError(
            f"View {view} needs a client key",
            code=ExitCode.INVALID_ARGS,
            hint="Pass --client KEY.",
        )
    return _CLIENT_VIEWS[view](network, client_key)


def main(argv: Sequence[str] | None = None, *, out: TextIO | None = None) -> int:
    log_path = default_log_path()
    logger = configure_logging(log_file=log_path)
    parser = build_parser()
    try:
        namespace = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code not in (None, 0):
            logger.warning("Argument parsing failed with exit code %s", exc.code)
        return int(exc.code or 0)

    config = load_config(namespace.config)
    if namespace.log_file is not None:
        log_path = namespace.log_file.expanduser()
    logger = configure_logging(level=namespace.log_level or config.log_level, log_file=log_path)

    stream = out or sys.stdout
    try:
        network = load_network(namespace.import_file, config=config)
        logger.debug("Rendering view %s", namespace.show)
        for line in render(network, namespace.show, namespace.client):
            print(line, file=stream)
        return int(ExitCode.SUCCESS)
    except RegistryError as exc:
        logger.error(
            "Handled RegistryError (code=%s): %s",
            int(exc.code),
            exc.message,
            exc_info=logger.isEnabledFor(py_logging.DEBUG),
        )
        print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
        return int(exc.code)
    except Exception:
        logger.exception("Unhandled exception in CLI entrypoint")
        hint = f"Inspect logs: {log_path}"
        print(user_facing_error("Unexpected runtime failure", hint=hint), file=sys.stderr)
        return int(ExitCode.RUNTIME_ERROR)


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
