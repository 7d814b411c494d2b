"""Tests for the /readyz and /healthz routes."""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from scylla_status.api.dependencies import get_prober
from scylla_status.main import create_app
from scylla_status.probeserver.prober import Prober


@pytest.fixture
def prober():
    prober = MagicMock()
    prober.readyz = AsyncMock(return_value=200)
    prober.healthz = AsyncMock(return_value=200)
    return prober


@pytest.fixture
def client(prober):
    app = create_app()
    app.dependency_overrides[get_prober] = lambda: prober
    return TestClient(app)


class TestProbeRoutes:
    @pytest.mark.parametrize("code", [200, 500, 503])
    def test_readyz_returns_prober_status_code(self, client, prober, code):
        prober.readyz.return_value = code

        response = client.get("/readyz")

        assert response.status_code == code
        assert response.content == b""
        prober.readyz.assert_awaited_once()

    @pytest.mark.parametrize("code", [200, 503])
    def test_healthz_returns_prober_status_code(self, client, prober, code):
        prober.healthz.return_value = code

        response = client.get("/healthz")

        assert response.status_code == code
        assert response.content == b""
        prober.healthz.assert_awaited_once()
        prober.readyz.assert_not_awaited()


def _http_scope(path):
    return {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": "GET",
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": b"",
        "headers": [],
        "client": ("10.0.0.10", 51234),
        "server": ("10.0.0.1", 8080),
    }


class SlowScyllaClient:
    """Local node API whose calls never answer in time."""

    def __init__(self):
        self.cancelled = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    async def _hang(self, name):
        try:
            await asyncio.sleep(30)
        except asyncio.CancelledError:
            self.cancelled.append(name)
            raise

    async def ping(self):
        return await self._hang("ping")

    async def status(self):
        return await self._hang("status")


class TestClientDisconnect:
    async def _serve(self, path, prober):
        app = create_app()
        app.dependency_overrides[get_prober] = lambda: prober
        messages = [{"type": "http.request", "body": b"", "more_body": False}]
        sent = []

        async def receive():
            if messages:
                return messages.pop(0)
            await asyncio.sleep(0.3)
            return {"type": "http.disconnect"}

        async def send(message):
            sent.append(message)

        await asyncio.wait_for(app(_http_scope(path), receive, send), timeout=5)
        return sent

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path,call", [("/healthz", "ping"), ("/readyz", "status")])
    async def test_disconnect_cancels_outbound_calls(self, make_lister, make_service, path, call):
        scylla = SlowScyllaClient()
        prober = Prober(
            namespace="scylla",
            service_name="basic-dc1-a-0",
            service_lister=make_lister("Service", [make_service("basic-dc1-a-0")]),
            await_paths=[],
            client_factory=lambda: scylla,
            timeout=60,
        )

        await self._serve(path, prober)

        assert scylla.cancelled == [call]
        assert scylla.closed

    @pytest.mark.asyncio
    async def test_finished_probe_is_answered_before_disconnect(self, prober):
        prober.healthz.return_value = 503

        sent = await self._serve("/healthz", prober)

        assert sent[0]["type"] == "http.response.start"
        assert sent[0]["status"] == 503
