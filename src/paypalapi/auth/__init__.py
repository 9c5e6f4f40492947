"""Token lifecycle for the PayPal endpoint families.

- :class:`TokenManager` -- client-credentials exchange, one cached
  credential per :class:`~paypalapi.models.EndpointFamily`.
- :class:`StateStore` -- protocol for the key-value store that keeps
  credentials across restarts, with :class:`FileStateStore` and
  :class:`MemoryStateStore` implementations.
"""

from paypalapi.auth.state_store import FileStateStore, MemoryStateStore, StateStore
from paypalapi.auth.token_manager import TokenManager

__all__ = [
    "FileStateStore",
    "MemoryStateStore",
    "StateStore",
    "TokenManager",
]
