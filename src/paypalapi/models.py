"""Canonical Pydantic models shared across all paypalapi modules.

Every other module imports its data shapes from here.  The models fall into
three groups:

**Auth state** -- :class:`EndpointFamily`, :class:`Credential` and
:class:`AppState`, the record persisted by the state store.

**Requests** -- :class:`RequestSpec`, the closed set of fields the dispatcher
and transport understand.

**Configuration** -- :class:`PayPalSettings`, serialised as JSON in the user's
config directory.

All models use Pydantic v2.  :class:`Credential` and :class:`RequestSpec` are
frozen: a credential is replaced as a whole, never edited in place, and the
dispatcher derives new request specs with ``model_copy`` instead of mutating
the caller's.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# --- Auth state ---


class EndpointFamily(str, enum.Enum):
    """The two independently authenticated API surfaces exposed by PayPal."""

    STANDARD = "standard"
    ALTERNATE = "alternate"

    @property
    def label(self) -> str:
        """Short name used in log lines (``api`` / ``api-m``)."""
        return "api-m" if self is EndpointFamily.ALTERNATE else "api"

    @property
    def state_key(self) -> str:
        """Key of this family's credential inside the persisted :class:`AppState`."""
        return "mAuth" if self is EndpointFamily.ALTERNATE else "auth"


class Credential(BaseModel):
    """Cached access token plus its locally computed expiry.

    ``expires_at`` is a unix timestamp that already has the safety margin
    subtracted, so a credential is usable while ``expires_at > now``.

    Serialised with the camelCase keys ``accessToken`` / ``expiresAt``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    access_token: str = Field(alias="accessToken", min_length=1)
    expires_at: int = Field(alias="expiresAt")

    def is_valid(self, now: float) -> bool:
        return self.expires_at > now


class AppState(BaseModel):
    """Persisted per-provider record holding one credential slot per family."""

    model_config = ConfigDict(populate_by_name=True)

    auth: Optional[Credential] = None
    m_auth: Optional[Credential] = Field(default=None, alias="mAuth")

    def get(self, family: EndpointFamily) -> Optional[Credential]:
        if family is EndpointFamily.ALTERNATE:
            return self.m_auth
        return self.auth


# --- Requests ---


class RequestSpec(BaseModel):
    """A single outbound API call.

    ``url`` is either absolute or relative to the endpoint family's base URL.
    Setting ``full_representation`` asks the provider to return the complete
    object instead of a minimal acknowledgement; the dispatcher turns it into
    a ``Prefer: return=representation`` header.

    Example::

        RequestSpec(
            method="PATCH",
            url="v1/billing/plans/P-123",
            body=[{"op": "replace", "path": "/name", "value": "Pro"}],
            full_representation=True,
        )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: str = "GET"
    url: str
    headers: Optional[dict[str, str]] = None
    params: Optional[dict[str, Any]] = None
    body: Any = Field(default=None, description="JSON-serialisable request body")
    data: Optional[dict[str, str]] = Field(
        default=None, description="Form-encoded request body"
    )
    timeout: Optional[float] = Field(
        default=None, description="Per-call timeout in seconds (transport default when None)"
    )
    full_representation: bool = False

    @field_validator("method")
    @classmethod
    def _upper_method(cls, value: str) -> str:
        return value.upper()

    @property
    def is_absolute(self) -> bool:
        return self.url.startswith("http")


# --- Configuration ---


class PayPalSettings(BaseModel):
    """Connection and credential settings for the PayPal API.

    ``client_id_source`` and ``client_secret_source`` are credential source
    descriptors resolved lazily by :func:`paypalapi.config.resolve_credential`
    (``env:VAR``, ``file:/path`` or ``value:<literal>``), so secrets never have
    to be written into the config file.
    """

    base_url: str = Field(
        default="https://api.sandbox.paypal.com/",
        description="Base URL of the standard API",
    )
    m_base_url: str = Field(
        default="https://api-m.sandbox.paypal.com/",
        description="Base URL of the api-m endpoints",
    )
    client_id_source: str = "env:PAYPAL_CLIENT_ID"
    client_secret_source: str = "env:PAYPAL_CLIENT_SECRET"
    token_timeout: float = Field(
        default=20.0, gt=0, description="Timeout in seconds for the token exchange"
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="Default timeout in seconds for API calls"
    )
    safety_margin: int = Field(
        default=180, gt=0, description="Seconds subtracted from the token lifetime"
    )
    default_expires_in: int = Field(
        default=3600, gt=0, description="Token lifetime assumed when the provider omits it"
    )
    provider_name: str = Field(
        default="paypal", description="Key of the persisted auth state record"
    )

    @field_validator("base_url", "m_base_url")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else f"{value}/"

    @model_validator(mode="after")
    def _margin_below_lifetime(self) -> PayPalSettings:
        if self.safety_margin >= self.default_expires_in:
            raise ValueError(
                f"safety_margin ({self.safety_margin}) must be smaller than "
                f"default_expires_in ({self.default_expires_in})"
            )
        return self

    def base_url_for(self, family: EndpointFamily) -> str:
        if family is EndpointFamily.ALTERNATE:
            return self.m_base_url
        return self.base_url
