import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from foodcourt import main
from foodcourt.database import DataStore, StoreError
from foodcourt.main import create_app

from conftest import make_settings


class RecordingLoop:
    def __init__(self):
        self.defaulted = []

    def default_exception_handler(self, context):
        self.defaulted.append(context)


@pytest.fixture
def exits(monkeypatch):
    codes = []
    monkeypatch.setattr(main, "terminate", lambda code=main.EXIT_FAULT: codes.append(code))
    return codes


def test_loop_fault_terminates_process(exits):
    loop = RecordingLoop()

    main.handle_loop_exception(loop, {"message": "Task exception was never retrieved",
                                      "exception": RuntimeError("boom")})

    assert exits == [main.EXIT_FAULT]
    assert loop.defaulted == []


def test_loop_messages_without_exception_are_only_logged(exits):
    loop = RecordingLoop()
    context = {"message": "Unclosed transport"}

    main.handle_loop_exception(loop, context)

    assert exits == []
    assert loop.defaulted == [context]


def test_store_error_returns_500(sql_app, monkeypatch):
    async def broken():
        raise StoreError("relation vendors does not exist")

    with TestClient(sql_app) as client:
        monkeypatch.setattr(sql_app.state.sql_repository, "list_vendors", broken)
        response = client.get("/api/vendors")

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Database error", "detail": None}


def test_store_error_detail_in_debug(sql_settings, monkeypatch):
    app = create_app(sql_settings.model_copy(update={"debug": True}))

    async def broken(limit):
        raise StoreError("syntax error at or near ORDER")

    with TestClient(app) as client:
        monkeypatch.setattr(app.state.sql_repository, "list_orders", broken)
        response = client.get("/api/orders")

    assert response.status_code == 500
    assert response.json()["detail"] == "syntax error at or near ORDER"


def test_fallback_disabled_returns_503(unreachable_db_url):
    app = create_app(make_settings(unreachable_db_url, fallback_enabled=False))

    with TestClient(app) as client:
        assert client.get("/api/vendors").status_code == 503
        assert client.get("/health").status_code == 200


def test_connection_error_marks_store_disconnected(sql_settings):
    async def scenario():
        store = DataStore(sql_settings)
        try:
            await store.connect()
            with pytest.raises(StoreError) as excinfo:
                async with store.session():
                    raise OperationalError("SELECT 1", {}, ConnectionResetError("server closed the connection"))
            return store.connected, excinfo.value
        finally:
            await store.dispose()

    connected, error = asyncio.run(scenario())

    assert connected is False
    assert error.connection_lost is True


def test_check_detects_recovery(sql_settings):
    async def scenario():
        store = DataStore(sql_settings)
        try:
            store.mark_disconnected("network blip")
            assert not store.connected
            return await store.check(), store.connected, store.last_error
        finally:
            await store.dispose()

    assert asyncio.run(scenario()) == (True, True, None)


def test_check_detects_loss(unreachable_db_url):
    async def scenario():
        store = DataStore(make_settings(unreachable_db_url))
        store._connected = True
        try:
            return await store.check(), store.connected
        finally:
            await store.dispose()

    assert asyncio.run(scenario()) == (False, False)


def test_recovered_store_switches_to_database(mock_app, monkeypatch):
    with TestClient(mock_app) as client:
        assert client.get("/api/vendors").headers["x-data-source"] == "mock"

        mock_app.state.data_store._connected = True
        calls = []

        async def from_database():
            calls.append(True)
            return []

        monkeypatch.setattr(mock_app.state.sql_repository, "list_vendors", from_database)
        response = client.get("/api/vendors")

    assert response.headers["x-data-source"] == "database"
    assert calls == [True]


def test_unexpected_error_returns_500(sql_app, monkeypatch):
    async def broken():
        raise RuntimeError("vendor cache corrupted")

    with TestClient(sql_app, raise_server_exceptions=False) as client:
        monkeypatch.setattr(sql_app.state.sql_repository, "list_vendors", broken)
        response = client.get("/api/vendors")

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Internal Server Error",
        "detail": "An unexpected error occurred",
    }


def test_unexpected_error_keeps_cors_headers(mock_app, monkeypatch):
    async def broken(limit):
        raise RuntimeError("order list exploded")

    with TestClient(mock_app, raise_server_exceptions=False) as client:
        monkeypatch.setattr(mock_app.state.mock_repository, "list_orders", broken)
        response = client.get("/api/orders", headers={"Origin": "http://example.com"})

    assert response.status_code == 500
    assert response.headers["access-control-allow-origin"] == "*"


def test_uncaught_exception_logged_critical(caplog):
    error = RuntimeError("boom")

    with caplog.at_level("CRITICAL", logger="foodcourt.main"):
        main.handle_uncaught_exception(RuntimeError, error, None)

    records = [r for r in caplog.records if r.name == "foodcourt.main"]
    assert [r.levelname for r in records] == ["CRITICAL"]
    assert records[0].exc_info[1] is error


def test_keyboard_interrupt_uses_default_hook(monkeypatch, caplog):
    seen = []
    monkeypatch.setattr(main.sys, "__excepthook__", lambda *args: seen.append(args[0]))

    main.handle_uncaught_exception(KeyboardInterrupt, KeyboardInterrupt(), None)

    assert seen == [KeyboardInterrupt]
    assert not [r for r in caplog.records if r.levelname == "CRITICAL"]
