"""paypalapi -- authenticated async client for the PayPal REST API.

PayPal exposes two independently authenticated endpoint families, the
standard API and the ``api-m`` endpoints.  This package keeps one OAuth2
client-credentials token per family, renews it before it expires, persists
it across restarts, and injects it into every outbound call.

Typical usage::

    from paypalapi import EndpointFamily, PayPalClient

    async with PayPalClient() as paypal:
        product = await paypal.get("v1/catalogs/products/PROD-1")
"""

from paypalapi.auth import FileStateStore, MemoryStateStore, StateStore, TokenManager
from paypalapi.client import HTTPTransport, RequestDispatcher, Transport, parse_response_error
from paypalapi.client.api import PayPalClient
from paypalapi.config import load_settings, resolve_credential
from paypalapi.exceptions import (
    ConfigError,
    HTTPStatusError,
    MalformedResponseError,
    PayPalError,
    TransportError,
    UnauthenticatedError,
)
from paypalapi.models import Credential, EndpointFamily, PayPalSettings, RequestSpec

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "Credential",
    "EndpointFamily",
    "FileStateStore",
    "HTTPStatusError",
    "HTTPTransport",
    "MalformedResponseError",
    "MemoryStateStore",
    "PayPalClient",
    "PayPalError",
    "PayPalSettings",
    "RequestDispatcher",
    "RequestSpec",
    "StateStore",
    "TokenManager",
    "Transport",
    "TransportError",
    "UnauthenticatedError",
    "load_settings",
    "parse_response_error",
    "resolve_credential",
]
