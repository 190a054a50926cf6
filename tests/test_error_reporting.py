import asyncio
from unittest import mock

import httpx
import pytest
from fastapi.testclient import TestClient

from albaranes.core.error_sink import LoggerSink, WebhookSink, build_error_sink
from albaranes.core.errors import Internal, InvalidArgument
from albaranes.main import create_app
from albaranes.utils.ids import MAX_ID, parse_id


class RecordingSink:
    def __init__(self):
        self.messages = []

    def write(self, message):
        self.messages.append(message)


@pytest.fixture(name="sink")
def sink_fixture():
    return RecordingSink()


@pytest.fixture(name="app")
def app_fixture(sink):
    app = create_app(error_sink=sink)

    @app.get("/boom")
    def boom():
        raise RuntimeError("explota")

    @app.get("/internal")
    def internal():
        raise Internal("Fallo del almacén")

    @app.get("/bad")
    def bad():
        raise InvalidArgument("Nada grave")

    return app


def test_unhandled_exception_is_reported(app, sink):
    api = TestClient(app, raise_server_exceptions=False)

    resp = api.get("/boom")

    assert resp.status_code == 500
    assert len(sink.messages) == 1
    assert "/boom" in sink.messages[0]
    assert "explota" in sink.messages[0]


def test_internal_error_response_is_reported(app, sink):
    resp = TestClient(app).get("/internal")

    assert resp.status_code == 500
    assert resp.json() == {"error": "INTERNAL", "message": "Fallo del almacén"}
    assert sink.messages == ["[GET] /internal -> 500"]


class LoopProbingSink(RecordingSink):
    """Anota si write se ejecuta con un event loop activo en su hilo."""

    def __init__(self):
        super().__init__()
        self.inside_loop = []

    def write(self, message):
        try:
            asyncio.get_running_loop()
            self.inside_loop.append(True)
        except RuntimeError:
            self.inside_loop.append(False)
        super().write(message)


def test_sink_runs_outside_event_loop():
    sink = LoopProbingSink()
    app = create_app(error_sink=sink)

    @app.get("/internal")
    def internal():
        raise Internal("Fallo del almacén")

    TestClient(app).get("/internal")

    assert sink.inside_loop == [False]


def test_client_errors_are_not_reported(app, sink):
    resp = TestClient(app).get("/bad")

    assert resp.status_code == 400
    assert sink.messages == []


def test_build_error_sink():
    assert isinstance(build_error_sink(None), LoggerSink)
    assert isinstance(build_error_sink("https://hooks.example.com/x"), WebhookSink)


def test_webhook_sink_posts_text():
    sink = WebhookSink("https://hooks.example.com/x", timeout=2.0)

    with mock.patch("albaranes.core.error_sink.httpx.post") as post:
        sink.write("caída")

    post.assert_called_once_with("https://hooks.example.com/x", json={"text": "caída"}, timeout=2.0)


def test_webhook_sink_falls_back_to_logger():
    sink = WebhookSink("https://hooks.example.com/x")

    with mock.patch("albaranes.core.error_sink.httpx.post", side_effect=httpx.ConnectError("sin red")), \
            mock.patch("albaranes.core.error_sink.logger") as logger:
        sink.write("caída")

    logger.error.assert_called_once_with("caída")


@pytest.mark.parametrize("value, expected", [(1, 1), ("42", 42), (" 7 ", 7), (str(MAX_ID), MAX_ID)])
def test_parse_id_accepts(value, expected):
    assert parse_id(value) == expected


@pytest.mark.parametrize("value", [
    "abc", "", None, "0", "-3", "1.5", "١٢", True, 0, "65f1c2a9e4b0a1b2c3d4e5f6",
    "99999999999999999999999", str(MAX_ID + 1), MAX_ID + 1,
])
def test_parse_id_rejects(value):
    with pytest.raises(InvalidArgument):
        parse_id(value)
