"""Tests for the startup sequencer: settings, database connection, listener."""

from __future__ import annotations

import logging
import sys
import threading

import pytest

from portal_api import main as main_module
from portal_api.db import DatabaseConnectionError, DatabaseConnectionInfo


class _DatabaseStub:
    """Database service stub with a configurable connection outcome."""

    def __init__(self, error: Exception | None = None) -> None:
        self._error = error
        self.connect_calls = 0

    def db_connect(self) -> DatabaseConnectionInfo:
        self.connect_calls += 1
        if self._error is not None:
            raise self._error
        return DatabaseConnectionInfo(host="cluster0.mongo.test", database_name="portal")

    def db_get_database(self) -> object:
        return object()

    def db_close(self) -> None:
        return None


@pytest.fixture(autouse=True)
def _isolate_process_hooks(monkeypatch: pytest.MonkeyPatch) -> None:
    """Restore process-wide hooks and keep the environment deterministic."""

    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(threading, "excepthook", threading.excepthook)
    for variable in ("PORT", "HOST", "NODE_ENV", "MONGODB_URI", "LOG_LEVEL"):
        monkeypatch.delenv(variable, raising=False)


@pytest.fixture
def uvicorn_calls(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, object]]:
    calls: list[dict[str, object]] = []

    def _record_run(application: object, **options: object) -> None:
        calls.append({"application": application, **options})

    monkeypatch.setattr(main_module.uvicorn, "run", _record_run)
    return calls


def test_main_exits_without_binding_when_database_is_unreachable(
    monkeypatch: pytest.MonkeyPatch,
    uvicorn_calls: list[dict[str, object]],
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Log the connection error and exit 1 before the listener starts.

    Returns:
        None: Assertions validate startup behavior.

    Raises:
        AssertionError: Raised when the server starts despite the failure.
    """

    database = _DatabaseStub(error=DatabaseConnectionError("connection timed out"))
    monkeypatch.setenv("MONGODB_URI", "mongodb://unreachable.invalid:27017/portal")
    monkeypatch.setattr(main_module, "bootstrap_create_database_service", lambda settings: database)
    caplog.set_level(logging.INFO, logger="portal_api.startup")

    with pytest.raises(SystemExit) as exit_info:
        main_module.main([])

    assert exit_info.value.code == 1
    assert database.connect_calls == 1
    assert uvicorn_calls == []
    assert "Database connection error: connection timed out" in caplog.text


def test_main_exits_when_uri_is_missing(uvicorn_calls: list[dict[str, object]]) -> None:
    """Treat a missing MONGODB_URI as a fatal connection failure."""

    with pytest.raises(SystemExit) as exit_info:
        main_module.main([])

    assert exit_info.value.code == 1
    assert uvicorn_calls == []


def test_main_exits_on_invalid_settings(
    monkeypatch: pytest.MonkeyPatch,
    uvicorn_calls: list[dict[str, object]],
) -> None:
    """Exit 1 when the configured port is not a number."""

    monkeypatch.setenv("PORT", "not-a-port")

    with pytest.raises(SystemExit) as exit_info:
        main_module.main([])

    assert exit_info.value.code == 1
    assert uvicorn_calls == []


def test_main_connects_then_starts_listener_on_default_port(
    monkeypatch: pytest.MonkeyPatch,
    uvicorn_calls: list[dict[str, object]],
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Connect once, log the host, then bind on port 5003."""

    database = _DatabaseStub()
    monkeypatch.setenv("MONGODB_URI", "mongodb://cluster0.mongo.test/portal")
    monkeypatch.setattr(main_module, "bootstrap_create_database_service", lambda settings: database)
    caplog.set_level(logging.INFO, logger="portal_api.startup")

    main_module.main([])

    assert database.connect_calls == 1
    assert "MongoDB Connected: cluster0.mongo.test" in caplog.text
    assert len(uvicorn_calls) == 1
    assert uvicorn_calls[0]["port"] == 5003
    assert uvicorn_calls[0]["host"] == "0.0.0.0"
    assert sys.excepthook != sys.__excepthook__


def test_main_cli_overrides_port(
    monkeypatch: pytest.MonkeyPatch,
    uvicorn_calls: list[dict[str, object]],
) -> None:
    """Prefer the command-line port over the environment."""

    monkeypatch.setenv("PORT", "7000")
    monkeypatch.setenv("MONGODB_URI", "mongodb://cluster0.mongo.test/portal")
    monkeypatch.setattr(main_module, "bootstrap_create_database_service", lambda settings: _DatabaseStub())

    main_module.main(["--port", "8123"])

    assert uvicorn_calls[0]["port"] == 8123
