"""HTTP side of paypalapi.

Classes:
    :class:`HTTPTransport` -- :mod:`httpx` backed transport that maps every
    failure onto the exception union in :mod:`paypalapi.exceptions`.
    :class:`RequestDispatcher` -- attaches tokens, resolves URLs and
    normalises errors.

:class:`~paypalapi.client.api.PayPalClient` combines both with a
:class:`~paypalapi.auth.token_manager.TokenManager`; import it from
:mod:`paypalapi` or :mod:`paypalapi.client.api`.
"""

from paypalapi.client.dispatcher import RequestDispatcher
from paypalapi.client.errors import parse_response_error
from paypalapi.client.transport import HTTPTransport, Transport

__all__ = ["HTTPTransport", "RequestDispatcher", "Transport", "parse_response_error"]
