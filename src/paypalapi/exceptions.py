"""Exception hierarchy for paypalapi.

All exceptions inherit from :class:`PayPalError`, which carries a mutable
``message`` attribute.  :class:`~paypalapi.client.dispatcher.RequestDispatcher`
replaces that message with the normalised diagnostic produced by
:func:`~paypalapi.client.errors.parse_response_error` before re-raising, so
callers always see the same readable string that was logged.

The failure shapes produced by the transport form a closed set::

    PayPalError
    +-- ConfigError             missing or invalid settings / credentials
    +-- UnauthenticatedError    no token could be obtained before a call
    +-- TransportError          no response received (network, timeout)
    +-- HTTPStatusError         response received with a non-2xx status
    +-- MalformedResponseError  2xx response whose body is unusable
"""

from __future__ import annotations

from typing import Any, Optional


class PayPalError(Exception):
    """Base exception for all paypalapi errors.

    Args:
        message: Human-readable error description.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigError(PayPalError):
    """Raised for configuration problems (invalid JSON, unresolvable credential sources)."""


class UnauthenticatedError(PayPalError):
    """Raised when no access token could be obtained for an endpoint family."""


class TransportError(PayPalError):
    """Raised when a request produced no response (timeout, DNS failure, connection refused).

    Args:
        message: Description of the network failure.
        method: HTTP method of the failed request, if known.
        url: Absolute URL of the failed request, if known.
    """

    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ):
        super().__init__(message)
        self.method = method
        self.url = url


class HTTPStatusError(PayPalError):
    """Raised when the provider answers with a non-2xx status code.

    Args:
        status_code: The HTTP status code.
        body: Parsed response body -- a dict for JSON error payloads, the
            raw text otherwise, ``None`` when empty.
        method: HTTP method of the failed request.
        url: Absolute URL of the failed request.
    """

    def __init__(
        self,
        status_code: int,
        body: Any = None,
        method: Optional[str] = None,
        url: Optional[str] = None,
    ):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code
        self.body = body
        self.method = method
        self.url = url


class MalformedResponseError(PayPalError):
    """Raised when a successful response cannot be used (bad JSON, missing fields).

    Args:
        message: What was wrong with the response.
        body: The offending body, for diagnostics.
    """

    def __init__(self, message: str, body: Any = None):
        super().__init__(message)
        self.body = body
