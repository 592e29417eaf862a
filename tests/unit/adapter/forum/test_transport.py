"""Unit tests for HttpTransport."""

import json

import httpx
import pytest

from threadsync.adapter.error import TransportError
from threadsync.adapter.forum import HttpTransport


def _transport(handler, auth_token="secret") -> HttpTransport:
    return HttpTransport(
        base_url="http://forum.test/",
        auth_token=auth_token,
        transport=httpx.MockTransport(handler),
    )


class TestHttpTransport:
    """Tests for HttpTransport.call."""

    @pytest.mark.asyncio
    async def test_sends_bearer_token_params_and_body(self):
        # Arrange
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            seen["auth"] = request.headers.get("Authorization")
            seen["body"] = json.loads(request.content) if request.content else None
            return httpx.Response(200, json={"ok": True})

        transport = _transport(handler)

        # Act
        result = await transport.call(
            "POST", "/api/things", body={"a": 1}, params={"page": 2}
        )

        # Assert
        assert result == {"ok": True}
        assert seen == {
            "method": "POST",
            "path": "/api/things",
            "params": {"page": "2"},
            "auth": "Bearer secret",
            "body": {"a": 1},
        }

    @pytest.mark.asyncio
    async def test_anonymous_requests_have_no_auth_header(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json=[])

        await _transport(handler, auth_token=None).call("GET", "/api/x")

        assert seen["auth"] is None

    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_status_and_body(self):
        # Arrange
        transport = _transport(lambda request: httpx.Response(403, text="Forbidden"))

        # Act
        with pytest.raises(TransportError) as exc_info:
            await transport.call("GET", "/api/x")

        # Assert
        assert exc_info.value.status == 403
        assert exc_info.value.body == "Forbidden"
        assert str(exc_info.value) == "API request failed: 403 - Forbidden"

    @pytest.mark.asyncio
    async def test_network_error_raises_without_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as exc_info:
            await _transport(handler).call("GET", "/api/x")

        assert exc_info.value.status is None

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self):
        transport = _transport(lambda request: httpx.Response(204))
        assert await transport.call("PUT", "/api/x") is None

    @pytest.mark.asyncio
    async def test_text_body_returned_as_text(self):
        transport = _transport(lambda request: httpx.Response(200, text="Post resolved"))
        assert await transport.call("PUT", "/api/x") == "Post resolved"
