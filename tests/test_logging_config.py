from __future__ import annotations

import io
import logging as py_logging
from pathlib import Path

import pytest

from telereg.logging import LOGGER_NAME, configure_logging, default_log_path, normalize_level


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("debug", "DEBUG"), (" Info ", "INFO"), ("warning", "WARN"), ("WARN", "WARN"), ("loud", None), ("", None)],
)
def test_normalize_level(raw: str, expected: str | None) -> None:
    assert normalize_level(raw) == expected


def test_default_log_path_points_at_telereg_log() -> None:
    path = default_log_path()

    assert path.is_absolute()
    assert path.parent.name == "logs"
    assert path.name == "telereg.log"


def test_unknown_level_falls_back_to_info() -> None:
    logger = configure_logging("chatty")

    assert logger.name == LOGGER_NAME
    assert logger.level == py_logging.INFO


def test_module_loggers_reach_the_console_handler() -> None:
    stream = io.StringIO()
    configure_logging("DEBUG", stream)

    py_logging.getLogger("telereg.network").debug("registered %s", "t1")

    assert "registered t1" in stream.getvalue()


def test_reconfiguring_closes_previous_handlers(tmp_path: Path) -> None:
    first = configure_logging("INFO", log_file=tmp_path / "first.log")
    old_handlers = list(first.handlers)

    logger = configure_logging("ERROR")

    assert len(logger.handlers) == 1
    assert all(handler not in logger.handlers for handler in old_handlers)
    file_handler = next(h for h in old_handlers if isinstance(h, py_logging.FileHandler))
    assert file_handler.stream is None
    assert logger.propagate is False


def test_file_handler_records_debug_below_console_level(tmp_path: Path) -> None:
    log_file = tmp_path / "nested" / "telereg.log"

    logger = configure_logging("ERROR", io.StringIO(), log_file=log_file)
    file_handlers = [h for h in logger.handlers if isinstance(h, py_logging.FileHandler)]

    assert len(file_handlers) == 1
    assert file_handlers[0].level == py_logging.DEBUG
    assert log_file.exists()


def test_unopenable_log_file_warns_on_console(monkeypatch, tmp_path: Path) -> None:
    def refuse(*args: object, **kwargs: object) -> py_logging.Handler:
        raise OSError("read-only file system")

    monkeypatch.setattr(py_logging, "FileHandler", refuse)
    stream = io.StringIO()

    logger = configure_logging("INFO", stream, log_file=tmp_path / "telereg.log")

    assert [type(h) for h in logger.handlers] == [py_logging.StreamHandler]
    assert "Log file unavailable" in stream.getvalue()
