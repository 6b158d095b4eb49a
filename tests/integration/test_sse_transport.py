"""
Integration Tests for the SSE Transport
=======================================

The event stream is driven at route level since it never ends on its own;
client messages go through the HTTP client.
"""

import json

import httpx
import pytest
import pytest_asyncio
from starlette.requests import Request

from md2pdf_mcp.api.routes.sse import open_sse_stream
from md2pdf_mcp.api.sessions.events import KEEPALIVE_COMMENT


def request_for(app) -> Request:
    return Request({"type": "http", "method": "GET", "path": "/sse", "headers": [], "app": app})


async def next_message(stream) -> str:
    chunk = await stream.__anext__()
    while chunk == KEEPALIVE_COMMENT:
        chunk = await stream.__anext__()
    return chunk


def event_data(chunk: str) -> str:
    return "".join(line[len("data: "):] for line in chunk.splitlines() if line.startswith("data: "))


@pytest.fixture
def app(app_factory):
    return app_factory("sse")


@pytest_asyncio.fixture
async def client(app):
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://127.0.0.1"
    ) as client:
        yield client


@pytest_asyncio.fixture
async def stream(app):
    response = await open_sse_stream(request_for(app))
    assert response.media_type == "text/event-stream"
    yield response.body_iterator
    await response.body_iterator.aclose()


class TestSseSession:
    """Test the endpoint handshake and message round trip."""

    @pytest.mark.asyncio
    async def test_endpoint_event_first(self, app, stream):
        first = await stream.__anext__()
        assert first.startswith("event: endpoint\n")
        endpoint = event_data(first)
        assert endpoint.startswith("/messages?sessionId=")
        assert endpoint.split("=", 1)[1] in app.state.registry

    @pytest.mark.asyncio
    async def test_reply_delivered_on_stream(self, stream, client):
        endpoint = event_data(await stream.__anext__())

        response = await client.post(endpoint, json={"jsonrpc": "2.0", "id": 4, "method": "ping"})
        assert response.status_code == 202
        assert response.text == "Accepted"

        chunk = await next_message(stream)
        assert chunk.startswith("event: message\n")
        assert json.loads(event_data(chunk)) == {"jsonrpc": "2.0", "id": 4, "result": {}}

    @pytest.mark.asyncio
    async def test_tool_call_over_sse(self, stream, client, tmp_path):
        endpoint = event_data(await stream.__anext__())
        output = tmp_path / "sse.pdf"

        await client.post(
            endpoint,
            json={
                "jsonrpc": "2.0",
                "id": 5,
                "method": "tools/call",
                "params": {
                    "name": "markdown_content_to_pdf",
                    "arguments": {"markdownContent": "# SSE", "outputPath": str(output)},
                },
            },
        )

        notifications = []
        reply = json.loads(event_data(await next_message(stream)))
        while "method" in reply:
            notifications.append(reply)
            reply = json.loads(event_data(await next_message(stream)))
        assert reply["id"] == 5
        assert reply["result"]["content"][0]["text"].startswith("Successfully converted")
        assert output.exists()

        logged = notifications[-1]
        assert logged["method"] == "notifications/message"
        assert logged["params"]["level"] == "info"
        assert logged["params"]["data"]["output"] == str(output.resolve())

    @pytest.mark.asyncio
    async def test_disconnect_closes_session(self, app):
        response = await open_sse_stream(request_for(app))
        session_id = event_data(await response.body_iterator.__anext__()).split("=", 1)[1]
        assert session_id in app.state.registry

        await response.body_iterator.aclose()

        assert session_id not in app.state.registry


class TestSseRejections:
    """Test messages for missing or unknown sessions."""

    @pytest.mark.asyncio
    async def test_unknown_session(self, client):
        response = await client.post(
            "/messages?sessionId=missing", json={"jsonrpc": "2.0", "id": 1, "method": "ping"}
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == -32000

    @pytest.mark.asyncio
    async def test_missing_session_id(self, client):
        response = await client.post("/messages", json={"jsonrpc": "2.0", "id": 1, "method": "ping"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_mcp_routes_absent_in_sse_mode(self, client):
        response = await client.post("/mcp", json={"jsonrpc": "2.0", "id": 1, "method": "ping"})
        assert response.status_code in (404, 405)
