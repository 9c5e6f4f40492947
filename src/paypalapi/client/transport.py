"""HTTP transport -- the only place that touches the network.

:class:`HTTPTransport` wraps :class:`httpx.AsyncClient` and converts every
outcome into either a parsed body or one of the three transport failure
shapes from :mod:`paypalapi.exceptions`:

- :class:`~paypalapi.exceptions.TransportError` -- no response at all.
- :class:`~paypalapi.exceptions.HTTPStatusError` -- non-2xx response.
- :class:`~paypalapi.exceptions.MalformedResponseError` -- 2xx response
  whose body claims to be JSON but isn't.

The token manager and the dispatcher only depend on the :class:`Transport`
protocol, so tests can substitute a fake.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

import httpx

from paypalapi.exceptions import HTTPStatusError, MalformedResponseError, TransportError
from paypalapi.models import RequestSpec

logger = logging.getLogger(__name__)

BasicAuth = tuple[str, str]


class Transport(Protocol):
    """Black-box request/response function used by the auth core."""

    async def send(self, spec: RequestSpec, auth: Optional[BasicAuth] = None) -> Any:
        """Execute *spec* (absolute URL) and return the parsed response body."""
        ...


def _error_body(response: httpx.Response) -> Any:
    """Best-effort body of an error response: JSON when possible, else text."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HTTPTransport:
    """Asynchronous :class:`Transport` backed by :class:`httpx.AsyncClient`.

    Can be used as an async context manager; otherwise the underlying client
    is created on first use and released by :meth:`aclose`.

    Args:
        timeout: Default timeout in seconds for calls whose
            :class:`~paypalapi.models.RequestSpec` sets none.
        client: Pre-built client (e.g. one using ``httpx.MockTransport``).
            A client passed in is not closed by :meth:`aclose`.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> HTTPTransport:
        self._get_client()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
            self._owns_client = True
        return self._client

    async def send(self, spec: RequestSpec, auth: Optional[BasicAuth] = None) -> Any:
        """Send *spec* and return the parsed body.

        Returns:
            The decoded JSON body, the raw text for non-JSON bodies, or
            ``None`` for an empty body (e.g. ``204 No Content``).

        Raises:
            TransportError: On network / timeout errors, an invalid URL, or a
                body that cannot be encoded.
            HTTPStatusError: On any non-2xx status.
            MalformedResponseError: On a 2xx JSON response that fails to decode.
        """
        kwargs: dict[str, Any] = {
            "method": spec.method,
            "url": spec.url,
            "headers": spec.headers or {},
        }
        if spec.params:
            kwargs["params"] = spec.params
        if spec.data is not None:
            kwargs["data"] = spec.data
        elif spec.body is not None:
            kwargs["json"] = spec.body
        if spec.timeout is not None:
            kwargs["timeout"] = spec.timeout
        if auth is not None:
            kwargs["auth"] = auth

        try:
            response = await self._get_client().request(**kwargs)
        except httpx.TimeoutException as exc:
            raise TransportError(
                f"Request timed out: {exc}", method=spec.method, url=spec.url
            ) from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(
                f"Request failed: {exc}", method=spec.method, url=spec.url
            ) from exc
        except (TypeError, ValueError) as exc:
            # Body or params that cannot be encoded.
            raise TransportError(
                f"Cannot encode request: {exc}", method=spec.method, url=spec.url
            ) from exc

        logger.debug("%s %s -> %s", spec.method, spec.url, response.status_code)

        if not response.is_success:
            raise HTTPStatusError(
                response.status_code,
                _error_body(response),
                method=spec.method,
                url=spec.url,
            )

        if not response.content:
            return None
        if "json" not in response.headers.get("content-type", ""):
            return response.text
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(
                f"Invalid JSON in response from {spec.method} {spec.url}",
                body=response.text[:200],
            ) from exc
