"""Tests for the httpx-backed transport."""

from __future__ import annotations

import base64
import json
from typing import Callable
from urllib.parse import parse_qs

import httpx
import pytest

from paypalapi.client.transport import HTTPTransport
from paypalapi.exceptions import HTTPStatusError, MalformedResponseError, TransportError
from paypalapi.models import RequestSpec


URL = "https://api.example.test/v1/catalogs/products"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _transport(handler: Callable[[httpx.Request], httpx.Response]) -> HTTPTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HTTPTransport(client=client)


def _recording(response: httpx.Response) -> tuple[list[httpx.Request], Callable[[httpx.Request], httpx.Response]]:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return response

    return seen, handler


# ---------------------------------------------------------------------------
# Successful responses
# ---------------------------------------------------------------------------


class TestSuccess:
    @pytest.mark.asyncio
    async def test_json_body_is_decoded(self) -> None:
        _, handler = _recording(httpx.Response(200, json={"id": "PROD-1"}))
        transport = _transport(handler)

        assert await transport.send(RequestSpec(url=URL)) == {"id": "PROD-1"}

    @pytest.mark.asyncio
    async def test_empty_body_is_none(self) -> None:
        _, handler = _recording(httpx.Response(204))
        transport = _transport(handler)

        assert await transport.send(RequestSpec(method="DELETE", url=URL)) is None

    @pytest.mark.asyncio
    async def test_text_body_is_returned_raw(self) -> None:
        _, handler = _recording(httpx.Response(200, text="OK"))
        transport = _transport(handler)

        assert await transport.send(RequestSpec(url=URL)) == "OK"

    @pytest.mark.asyncio
    async def test_sends_method_headers_params_and_json(self) -> None:
        seen, handler = _recording(httpx.Response(201, json={}))
        transport = _transport(handler)

        await transport.send(RequestSpec(
            method="POST",
            url=URL,
            headers={"Authorization": "Bearer abc", "Prefer": "return=representation"},
            params={"page_size": 5},
            body={"name": "Pro"},
        ))

        request = seen[0]
        assert request.method == "POST"
        assert request.url.params["page_size"] == "5"
        assert request.headers["Authorization"] == "Bearer abc"
        assert request.headers["Prefer"] == "return=representation"
        assert json.loads(request.content) == {"name": "Pro"}

    @pytest.mark.asyncio
    async def test_form_body_and_basic_auth(self) -> None:
        seen, handler = _recording(httpx.Response(200, json={"access_token": "abc"}))
        transport = _transport(handler)

        await transport.send(
            RequestSpec(
                method="POST",
                url="https://api.example.test/v1/oauth2/token",
                data={"grant_type": "client_credentials"},
                timeout=5.0,
            ),
            auth=("client-id", "client-secret"),
        )

        request = seen[0]
        expected = base64.b64encode(b"client-id:client-secret").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert parse_qs(request.content.decode()) == {"grant_type": ["client_credentials"]}


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    @pytest.mark.asyncio
    async def test_non_2xx_raises_status_error_with_json_body(self) -> None:
        body = {"name": "VALIDATION_ERROR", "details": [{"issue": "DUPLICATE"}]}
        _, handler = _recording(httpx.Response(422, json=body))
        transport = _transport(handler)

        with pytest.raises(HTTPStatusError) as info:
            await transport.send(RequestSpec(method="POST", url=URL))

        assert info.value.status_code == 422
        assert info.value.body == body
        assert info.value.method == "POST"
        assert info.value.url == URL

    @pytest.mark.asyncio
    async def test_non_2xx_with_text_body(self) -> None:
        _, handler = _recording(httpx.Response(502, text="Bad Gateway"))
        transport = _transport(handler)

        with pytest.raises(HTTPStatusError) as info:
            await transport.send(RequestSpec(url=URL))

        assert info.value.body == "Bad Gateway"

    @pytest.mark.asyncio
    async def test_non_2xx_with_empty_body(self) -> None:
        _, handler = _recording(httpx.Response(401))
        transport = _transport(handler)

        with pytest.raises(HTTPStatusError) as info:
            await transport.send(RequestSpec(url=URL))

        assert info.value.body is None

    @pytest.mark.asyncio
    async def test_connection_error_becomes_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = _transport(handler)

        with pytest.raises(TransportError) as info:
            await transport.send(RequestSpec(url=URL))

        assert "connection refused" in info.value.message
        assert info.value.url == URL
        assert isinstance(info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_timeout_becomes_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timeout", request=request)

        transport = _transport(handler)

        with pytest.raises(TransportError) as info:
            await transport.send(RequestSpec(url=URL))

        assert info.value.message.startswith("Request timed out")

    @pytest.mark.asyncio
    async def test_unencodable_body_becomes_transport_error(self) -> None:
        seen, handler = _recording(httpx.Response(200, json={}))
        transport = _transport(handler)

        with pytest.raises(TransportError) as info:
            await transport.send(RequestSpec(method="POST", url=URL, body={"x": {1, 2}}))

        assert info.value.message.startswith("Cannot encode request")
        assert info.value.method == "POST"
        assert isinstance(info.value.__cause__, TypeError)
        assert seen == []

    @pytest.mark.asyncio
    async def test_invalid_url_becomes_transport_error(self) -> None:
        seen, handler = _recording(httpx.Response(200, json={}))
        transport = _transport(handler)
        url = "https://api.example.test/v1/\x00"

        with pytest.raises(TransportError) as info:
            await transport.send(RequestSpec(url=url))

        assert info.value.url == url
        assert isinstance(info.value.__cause__, httpx.InvalidURL)
        assert seen == []

    @pytest.mark.asyncio
    async def test_invalid_json_on_success(self) -> None:
        _, handler = _recording(
            httpx.Response(200, content=b"{broken", headers={"content-type": "application/json"})
        )
        transport = _transport(handler)

        with pytest.raises(MalformedResponseError):
            await transport.send(RequestSpec(url=URL))


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager_closes_own_client(self) -> None:
        async with HTTPTransport(timeout=5.0) as transport:
            client = transport._client
            assert client is not None
        assert client.is_closed
        assert transport._client is None

    @pytest.mark.asyncio
    async def test_injected_client_is_not_closed(self) -> None:
        _, handler = _recording(httpx.Response(200))
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        transport = HTTPTransport(client=client)

        await transport.aclose()

        assert not client.is_closed
        await client.aclose()
