"""High-level PayPal client wiring settings, transport, tokens and dispatch together.

:class:`PayPalClient` is the object an application constructs once per
process and shares between callers.  It owns a single
:class:`~paypalapi.auth.token_manager.TokenManager`, so both endpoint
families keep exactly one cached credential for the whole process.

Example::

    async with PayPalClient() as paypal:
        plan = await paypal.get("v1/billing/plans/P-123")
        await paypal.patch(
            "v1/billing/plans/P-123",
            body=[{"op": "replace", "path": "/name", "value": "Pro"}],
        )
        await paypal.post(
            "v2/checkout/orders",
            family=EndpointFamily.ALTERNATE,
            body=order,
            full_representation=True,
        )
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional

from paypalapi.auth.state_store import FileStateStore, StateStore
from paypalapi.auth.token_manager import TokenManager
from paypalapi.client.dispatcher import RequestDispatcher
from paypalapi.client.transport import HTTPTransport, Transport
from paypalapi.config import load_settings
from paypalapi.models import EndpointFamily, PayPalSettings, RequestSpec


class PayPalClient:
    """Async PayPal API client.

    Args:
        settings: Connection settings; loaded with
            :func:`~paypalapi.config.load_settings` when omitted.
        store: Persistence for tokens; a :class:`FileStateStore` in the data
            directory when omitted.
        transport: Custom transport.  When omitted an :class:`HTTPTransport`
            is created and closed together with the client.
        clock: Unix time source used for token expiry.
    """

    def __init__(
        self,
        settings: Optional[PayPalSettings] = None,
        store: Optional[StateStore] = None,
        transport: Optional[Transport] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings if settings is not None else load_settings()
        self._http: Optional[HTTPTransport] = None
        if transport is None:
            self._http = HTTPTransport(timeout=self.settings.request_timeout)
            transport = self._http
        self.tokens = TokenManager(
            self.settings,
            transport,
            store=store if store is not None else FileStateStore(),
            clock=clock,
        )
        self.dispatcher = RequestDispatcher(self.settings, self.tokens, transport)

    async def __aenter__(self) -> PayPalClient:
        self.tokens.load()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP transport if this client created it."""
        if self._http is not None:
            await self._http.aclose()

    async def request(
        self,
        method: str,
        url: str,
        family: EndpointFamily = EndpointFamily.STANDARD,
        **fields: Any,
    ) -> Any:
        """Send a request; *fields* are any other :class:`RequestSpec` fields."""
        spec = RequestSpec(method=method, url=url, **fields)
        return await self.dispatcher.send(spec, family)

    async def get(self, url: str, **kwargs: Any) -> Any:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> Any:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> Any:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", url, **kwargs)
