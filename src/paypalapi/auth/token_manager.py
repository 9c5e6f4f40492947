"""OAuth2 client-credentials token lifecycle for both PayPal endpoint families.

:class:`TokenManager` owns exactly one :class:`~paypalapi.models.Credential`
slot per :class:`~paypalapi.models.EndpointFamily`.  It exchanges the
configured client id / secret for an access token (:rfc:`6749` section 4.4),
caches it in memory with a locally computed expiry, and persists it through a
:class:`~paypalapi.auth.state_store.StateStore` so that a restarted process
can reuse a token that is still valid.

The local expiry is ``now + expires_in - safety_margin``: tokens are renewed
a few minutes before PayPal would reject them.

:meth:`TokenManager.authenticate` is best-effort.  Failures are logged and
reported as ``False``; the previously cached credential, if any, stays in
place.

See Also:
    :class:`~paypalapi.client.dispatcher.RequestDispatcher` -- decides what
    to do when authentication fails.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Optional

from pydantic import ValidationError

from paypalapi.auth.state_store import StateStore
from paypalapi.client.errors import parse_response_error
from paypalapi.client.transport import Transport
from paypalapi.config import resolve_credential
from paypalapi.exceptions import MalformedResponseError, PayPalError
from paypalapi.models import AppState, Credential, EndpointFamily, PayPalSettings, RequestSpec

logger = logging.getLogger(__name__)

TOKEN_PATH = "v1/oauth2/token"


class TokenManager:
    """Produce and cache one valid credential per endpoint family.

    Concurrent :meth:`authenticate` calls for the same family share a single
    in-flight token request.

    Args:
        settings: Base URLs, credential sources, timeouts and safety margin.
        transport: Used for the token exchange.
        store: Optional persistence for credentials across restarts.
        clock: Returns the current unix time; defaults to :func:`time.time`.

    Example::

        manager = TokenManager(settings, transport, store=FileStateStore())
        manager.load()
        if manager.get_valid(EndpointFamily.STANDARD) is None:
            await manager.authenticate(EndpointFamily.STANDARD)
    """

    def __init__(
        self,
        settings: PayPalSettings,
        transport: Transport,
        store: Optional[StateStore] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._store = store
        self._clock = clock
        self._credentials: dict[EndpointFamily, Credential] = {}
        self._inflight: dict[EndpointFamily, asyncio.Task[bool]] = {}

    def load(self) -> None:
        """Warm the in-memory cache from the state store.

        Missing, unreadable or malformed records are ignored; the affected
        families simply start out unauthenticated.
        """
        if self._store is None:
            return
        key = self._settings.provider_name
        try:
            record = self._store.get(key)
        except Exception as exc:
            logger.warning("PayPal.load: cannot read auth state '%s': %s", key, exc)
            return
        if not isinstance(record, dict):
            return
        for family in EndpointFamily:
            slot = record.get(family.state_key)
            if slot is None:
                continue
            try:
                state = AppState.model_validate({family.state_key: slot})
            except ValidationError as exc:
                logger.warning(
                    "PayPal.load: ignoring malformed auth state '%s.%s': %s",
                    key, family.state_key, exc,
                )
                continue
            credential = state.get(family)
            if credential is not None:
                self._credentials[family] = credential

    def get(self, family: EndpointFamily) -> Optional[Credential]:
        """Return the cached credential for *family*, expired or not."""
        return self._credentials.get(family)

    def get_valid(self, family: EndpointFamily) -> Optional[Credential]:
        """Return the cached credential for *family* if it has not expired.

        Returns:
            The :class:`~paypalapi.models.Credential`, or ``None`` when the
            caller must authenticate first.
        """
        credential = self._credentials.get(family)
        if credential is not None and credential.is_valid(self._clock()):
            return credential
        return None

    async def authenticate(self, family: EndpointFamily) -> bool:
        """Fetch a new access token for *family*.

        Never raises.  On failure the error is logged and the previously
        cached credential is left untouched.

        Returns:
            ``True`` if a new credential was stored, ``False`` otherwise.
        """
        task = self._inflight.get(family)
        if task is None:
            task = asyncio.ensure_future(self._authenticate(family))
            self._inflight[family] = task
            task.add_done_callback(lambda done, f=family: self._forget(f, done))
        return await asyncio.shield(task)

    def _forget(self, family: EndpointFamily, task: asyncio.Task[bool]) -> None:
        if self._inflight.get(family) is task:
            del self._inflight[family]

    async def _authenticate(self, family: EndpointFamily) -> bool:
        label = family.label
        try:
            token_data = await self._fetch_token(family)
            credential = self._build_credential(token_data)
        except PayPalError as exc:
            logger.error("PayPal.authenticate %s: %s", label, parse_response_error(exc))
            return False
        except Exception as exc:
            logger.error("PayPal.authenticate %s: unexpected error: %r", label, exc)
            return False

        self._credentials[family] = credential
        logger.info("PayPal.authenticate %s: Got a new %s token", label, label)
        self._persist(family, credential)
        return True

    async def _fetch_token(self, family: EndpointFamily) -> dict[str, Any]:
        """POST ``grant_type=client_credentials`` to the family's token endpoint.

        Raises:
            ConfigError: If the client id or secret cannot be resolved.
            TransportError, HTTPStatusError: From the transport.
            MalformedResponseError: If ``access_token`` is absent.
        """
        client_id = resolve_credential(self._settings.client_id_source)
        client_secret = resolve_credential(self._settings.client_secret_source)

        spec = RequestSpec(
            method="POST",
            url=f"{self._settings.base_url_for(family)}{TOKEN_PATH}",
            headers={
                "Accept": "application/json",
                "Content-Type": "application/x-www-form-urlencoded",
            },
            data={"grant_type": "client_credentials"},
            timeout=self._settings.token_timeout,
        )
        token_data = await self._transport.send(spec, auth=(client_id, client_secret))

        if not isinstance(token_data, dict) or not token_data.get("access_token"):
            raise MalformedResponseError(
                "Token response missing 'access_token' field", body=token_data
            )
        return token_data

    def _build_credential(self, token_data: dict[str, Any]) -> Credential:
        """Compute the local expiry and wrap the token in a credential."""
        expires_in = token_data.get("expires_in") or self._settings.default_expires_in
        try:
            lifetime = int(expires_in)
        except (TypeError, ValueError) as exc:
            raise MalformedResponseError(
                f"Token response has invalid 'expires_in': {expires_in!r}",
                body=token_data,
            ) from exc

        return Credential(
            access_token=str(token_data["access_token"]),
            expires_at=int(self._clock()) + lifetime - self._settings.safety_margin,
        )

    def _persist(self, family: EndpointFamily, credential: Credential) -> None:
        """Write *credential* to the state store; failures only cost a warm start."""
        if self._store is None:
            return
        try:
            self._store.set(
                self._settings.provider_name,
                {family.state_key: credential.model_dump(by_alias=True)},
            )
        except Exception as exc:
            logger.warning(
                "PayPal.authenticate %s: cannot persist token: %s", family.label, exc
            )
