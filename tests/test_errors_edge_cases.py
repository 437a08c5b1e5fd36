"""Errors module edge case tests."""

from __future__ import annotations

from telereg.errors import (
    DuplicateKeyError,
    ErrorKind,
    ExitCode,
    ImportFormatError,
    InvalidPaymentError,
    NoActiveCommunicationError,
    RegistryError,
    SameStateError,
    UnavailableTerminalError,
    UnknownKeyError,
    UnsupportedOperationError,
    user_facing_error,
)


def test_user_facing_error_without_hint() -> None:
    result = user_facing_error("something went wrong")
    assert result == "Error: something went wrong."


def test_user_facing_error_with_hint() -> None:
    result = user_facing_error("something went wrong", hint="try again")
    assert result == "Error: something went wrong. Next step: try again"


def test_exit_code_values() -> None:
    assert int(ExitCode.SUCCESS) == 0
    assert int(ExitCode.INVALID_ARGS) == 2
    assert int(ExitCode.CONFIG_ERROR) == 3
    assert int(ExitCode.RUNTIME_ERROR) == 4
    assert int(ExitCode.LOOKUP_ERROR) == 5
    assert int(ExitCode.STATE_ERROR) == 6
    assert int(ExitCode.VALIDATION_ERROR) == 7
    assert int(ExitCode.IMPORT_ERROR) == 8


def test_registry_error_str_with_hint() -> None:
    error = RegistryError("msg", hint="hint")
    assert "hint" in str(error)


def test_registry_error_str_without_hint() -> None:
    error = RegistryError("msg")
    assert str(error) == "msg"
    assert error.kind == ErrorKind.INVALID_REQUEST


def test_taxonomy_errors_carry_structured_payload() -> None:
    unknown = UnknownKeyError("t9", entity="terminal")
    assert unknown.key == "t9"
    assert unknown.code == ExitCode.LOOKUP_ERROR
    assert unknown.kind == ErrorKind.UNKNOWN_KEY

    duplicate = DuplicateKeyError("c1")
    assert duplicate.entity == "client"
    assert duplicate.kind == ErrorKind.DUPLICATE_KEY

    same = SameStateError("t1", "OFF")
    assert same.state == "OFF"
    assert same.kind == ErrorKind.SAME_STATE

    unavailable = UnavailableTerminalError("t2", "BUSY")
    assert (unavailable.key, unavailable.state) == ("t2", "BUSY")
    assert unavailable.kind == ErrorKind.UNAVAILABLE

    unsupported = UnsupportedOperationError("t3", "VIDEO")
    assert (unsupported.key, unsupported.comm_kind) == ("t3", "VIDEO")
    assert unsupported.kind == ErrorKind.UNSUPPORTED_OPERATION

    assert NoActiveCommunicationError("t1").kind == ErrorKind.NO_ACTIVE_COMMUNICATION

    payment = InvalidPaymentError(7)
    assert payment.comm_id == 7
    assert payment.kind == ErrorKind.INVALID_PAYMENT


def test_taxonomy_errors_are_registry_errors() -> None:
    for error in (
        UnknownKeyError("k"),
        DuplicateKeyError("k"),
        SameStateError("k", "ON"),
        UnavailableTerminalError("k", "OFF"),
        UnsupportedOperationError("k", "VIDEO"),
        NoActiveCommunicationError("k"),
        InvalidPaymentError(1),
        ImportFormatError(3, "BOGUS|x", "unknown entry type"),
    ):
        assert isinstance(error, RegistryError)
        assert error.message


def test_import_format_error_mentions_line_number() -> None:
    error = ImportFormatError(3, "BOGUS|x", "unknown entry type")
    assert error.line_number == 3
    assert "line 3" in error.message
    assert error.code == ExitCode.IMPORT_ERROR
