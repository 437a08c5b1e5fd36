"""Deterministic error model and exit code contract."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_ARGS = 2
    CONFIG_ERROR = 3
    RUNTIME_ERROR = 4
    LOOKUP_ERROR = 5
    STATE_ERROR = 6
    VALIDATION_ERROR = 7
    IMPORT_ERROR = 8


class ErrorKind(str, Enum):
    UNKNOWN_KEY = "unknown-key"
    DUPLICATE_KEY = "duplicate-key"
    SAME_STATE = "same-state"
    UNAVAILABLE = "unavailable"
    UNSUPPORTED_OPERATION = "unsupported-operation"
    NO_ACTIVE_COMMUNICATION = "no-active-communication"
    INVALID_PAYMENT = "invalid-payment"
    INVALID_REQUEST = "invalid-request"
    IMPORT_FORMAT = "import-format"


@dataclass
class RegistryError(Exception):
    message: str
    code: ExitCode = ExitCode.RUNTIME_ERROR
    hint: str = ""

    kind = ErrorKind.INVALID_REQUEST

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


class UnknownKeyError(RegistryError):
    kind = ErrorKind.UNKNOWN_KEY

    def __init__(self, key: str, *, entity: str = "terminal") -> None:
        super().__init__(
            f"Unknown {entity} key: {key}",
            code=ExitCode.LOOKUP_ERROR,
            hint=f"Use the key of a registered {entity}.",
        )
        self.key = key
        self.entity = entity


class DuplicateKeyError(RegistryError):
    kind = ErrorKind.DUPLICATE_KEY

    def __init__(self, key: str, *, entity: str = "client") -> None:
        super().__init__(
            f"Duplicate {entity} key: {key}",
            code=ExitCode.VALIDATION_ERROR,
            hint=f"Choose a {entity} key that is not registered yet.",
        )
        self.key = key
        self.entity = entity


class SameStateError(RegistryError):
    kind = ErrorKind.SAME_STATE

    def __init__(self, key: str, state: str) -> None:
        super().__init__(f"Terminal {key} is already {state}", code=ExitCode.STATE_ERROR)
        self.key = key
        self.state = state


class UnavailableTerminalError(RegistryError):
    kind = ErrorKind.UNAVAILABLE

    def __init__(self, key: str, state: str) -> None:
        super().__init__(
            f"Terminal {key} is unavailable ({state})",
            code=ExitCode.STATE_ERROR,
            hint="Retry once the terminal changes state.",
        )
        self.key = key
        self.state = state


class UnsupportedOperationError(RegistryError):
    kind = ErrorKind.UNSUPPORTED_OPERATION

    def __init__(self, key: str, comm_kind: str) -> None:
        super().__init__(
            f"Terminal {key} does not support {comm_kind} communications",
            code=ExitCode.VALIDATION_ERROR,
        )
        self.key = key
        self.comm_kind = comm_kind


class NoActiveCommunicationError(RegistryError):
    kind = ErrorKind.NO_ACTIVE_COMMUNICATION

    def __init__(self, key: str) -> None:
        super().__init__(
            f"Terminal {key} has no communication it can end",
            code=ExitCode.STATE_ERROR,
            hint="Only the originator of an ongoing session can end it.",
        )
        self.key = key


class InvalidPaymentError(RegistryError):
    kind = ErrorKind.INVALID_PAYMENT

    def __init__(self, comm_id: int) -> None:
        super().__init__(
            f"Invalid payment for communication {comm_id}",
            code=ExitCode.VALIDATION_ERROR,
            hint="Pay a finished, unpaid communication sent by this terminal.",
        )
        self.comm_id = comm_id


class ImportFormatError(RegistryError):
    kind = ErrorKind.IMPORT_FORMAT

    def __init__(self, line_number: int, line: str, reason: str) -> None:
        super().__init__(
            f"Invalid import line {line_number}: {reason}",
            code=ExitCode.IMPORT_ERROR,
            hint=f"Fix the entry {line!r} and import again.",
        )
        self.line_number = line_number
        self.line = line
        self.reason = reason


def user_facing_error(message: str, *, hint: str = "") -> str:
    if hint:
        return f"Error: {message}. Next step: {hint}"
    return f"Error: {message}."
