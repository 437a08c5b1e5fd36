"""Terminal availability state machine and terminal aggregate."""

from .state import StateTag, TerminalState, change_notification, parse_state_tag, transition
from .terminal import Terminal, TerminalKind, TerminalRegistry, parse_terminal_kind

__all__ = [
    "change_notification",
    "parse_state_tag",
    "parse_terminal_kind",
    "StateTag",
    "Terminal",
    "TerminalKind",
    "TerminalRegistry",
    "TerminalState",
    "transition",
]
