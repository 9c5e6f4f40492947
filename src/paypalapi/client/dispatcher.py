"""Authenticated request dispatch for the PayPal API.

:class:`RequestDispatcher` wraps every outbound call with:

1. authentication on demand -- a missing or expired token triggers exactly
   one :meth:`~paypalapi.auth.token_manager.TokenManager.authenticate` call;
2. bearer token injection and URL resolution against the endpoint family's
   base URL;
3. the ``full_representation`` shortcut (``Prefer: return=representation``);
4. uniform error surfacing -- failures are normalised with
   :func:`~paypalapi.client.errors.parse_response_error`, logged with the
   method and URL, and re-raised.

No request is retried.  Retry policy for transient errors belongs to the
caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from paypalapi.client.errors import parse_response_error
from paypalapi.client.transport import Transport
from paypalapi.exceptions import PayPalError, TransportError, UnauthenticatedError
from paypalapi.models import Credential, EndpointFamily, PayPalSettings, RequestSpec

if TYPE_CHECKING:
    from paypalapi.auth.token_manager import TokenManager

logger = logging.getLogger(__name__)

PREFER_REPRESENTATION = "return=representation"


class RequestDispatcher:
    """Execute :class:`~paypalapi.models.RequestSpec` objects with transparent auth.

    Args:
        settings: Supplies the base URL of each endpoint family.
        token_manager: Source of credentials.
        transport: Executes the outbound request.

    Example::

        dispatcher = RequestDispatcher(settings, token_manager, transport)
        plan = await dispatcher.send(
            RequestSpec(method="GET", url="v1/billing/plans/P-123"),
            EndpointFamily.STANDARD,
        )
    """

    def __init__(
        self,
        settings: PayPalSettings,
        token_manager: TokenManager,
        transport: Transport,
    ) -> None:
        self._settings = settings
        self._token_manager = token_manager
        self._transport = transport

    async def send(
        self,
        spec: RequestSpec,
        family: EndpointFamily = EndpointFamily.STANDARD,
    ) -> Any:
        """Send *spec* to *family* and return the transport's parsed result.

        The caller's *spec* is never modified.

        Raises:
            UnauthenticatedError: If no valid token could be obtained.  The
                transport is not called in that case.
            TransportError, HTTPStatusError, MalformedResponseError: From the
                transport, with ``message`` replaced by the normalised
                diagnostic.  Any other exception raised on the way is wrapped
                in a :class:`~paypalapi.exceptions.TransportError`.
        """
        try:
            credential = await self._ensure_credential(spec, family)
            outbound = self.build_outbound(spec, family, credential)
            return await self._transport.send(outbound)
        except PayPalError as exc:
            exc.message = self._report(spec, exc)
            raise
        except Exception as exc:
            error = TransportError(
                f"Request failed: {exc!r}", method=spec.method, url=spec.url
            )
            error.message = self._report(spec, error)
            raise error from exc

    def _report(self, spec: RequestSpec, exc: PayPalError) -> str:
        message = parse_response_error(exc)
        logger.error("PayPal.send %s %s: %s", spec.method, spec.url, message)
        return message

    async def _ensure_credential(
        self, spec: RequestSpec, family: EndpointFamily
    ) -> Credential:
        credential = self._token_manager.get_valid(family)
        if credential is not None:
            return credential

        if self._token_manager.get(family) is not None:
            logger.info("PayPal.send %s: Token expired, will fetch a new one", spec.url)

        if await self._token_manager.authenticate(family):
            credential = self._token_manager.get_valid(family)
        if credential is None:
            raise UnauthenticatedError(f"Not authenticated to PayPal {family.label}")
        return credential

    def build_outbound(
        self,
        spec: RequestSpec,
        family: EndpointFamily,
        credential: Credential,
    ) -> RequestSpec:
        """Derive the request actually handed to the transport.

        Returns a copy of *spec* with a fresh headers dict carrying the bearer
        token, an absolute URL, and ``full_representation`` translated into
        the ``Prefer`` header.
        """
        headers = dict(spec.headers or {})
        headers["Authorization"] = f"Bearer {credential.access_token}"
        update: dict[str, Any] = {"headers": headers}

        if not spec.is_absolute:
            update["url"] = f"{self._settings.base_url_for(family)}{spec.url.lstrip('/')}"

        if spec.full_representation:
            headers["Prefer"] = PREFER_REPRESENTATION
            update["full_representation"] = False

        return spec.model_copy(update=update, deep=True)
