"""Shared test fixtures for paypalapi.

Provides a controllable clock, a recording fake transport, settings pointing
at example hosts, and an autouse fixture that redirects every XDG directory
into ``tmp_path`` so no test touches the real home directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import pytest

from paypalapi.auth.state_store import MemoryStateStore
from paypalapi.auth.token_manager import TokenManager
from paypalapi.client.dispatcher import RequestDispatcher
from paypalapi.models import PayPalSettings, RequestSpec


BASE_URL = "https://api.example.test/"
M_BASE_URL = "https://api-m.example.test/"


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point config and data directories at a disposable location."""
    monkeypatch.setattr("paypalapi.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in (
        "PAYPALAPI_BASE_URL",
        "PAYPALAPI_M_BASE_URL",
        "PAYPALAPI_CLIENT_ID_SOURCE",
        "PAYPALAPI_CLIENT_SECRET_SOURCE",
    ):
        monkeypatch.delenv(var, raising=False)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable unix clock that only moves when told to."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeTransport:
    """Records every request and replays queued outcomes.

    Token requests (``.../v1/oauth2/token``) pop from ``token_responses``;
    everything else pops from ``api_responses``.  An exception instance in
    either queue is raised instead of returned.  When a queue is empty a
    default success is produced.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[RequestSpec, Optional[tuple[str, str]]]] = []
        self.token_responses: list[Any] = []
        self.api_responses: list[Any] = []
        self._issued = 0

    async def send(self, spec: RequestSpec, auth: Optional[tuple[str, str]] = None) -> Any:
        self.calls.append((spec, auth))
        if spec.url.endswith("v1/oauth2/token"):
            if self.token_responses:
                outcome = self.token_responses.pop(0)
            else:
                self._issued += 1
                outcome = {"access_token": f"token-{self._issued}", "expires_in": 3600}
        else:
            outcome = self.api_responses.pop(0) if self.api_responses else {"ok": True}
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    @property
    def token_calls(self) -> list[RequestSpec]:
        return [spec for spec, _ in self.calls if spec.url.endswith("v1/oauth2/token")]

    @property
    def api_calls(self) -> list[RequestSpec]:
        return [spec for spec, _ in self.calls if not spec.url.endswith("v1/oauth2/token")]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> PayPalSettings:
    return PayPalSettings(
        base_url=BASE_URL,
        m_base_url=M_BASE_URL,
        client_id_source="value:client-id",
        client_secret_source="value:client-secret",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(1000.0)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def store() -> MemoryStateStore:
    return MemoryStateStore()


@pytest.fixture
def token_manager(
    settings: PayPalSettings,
    transport: FakeTransport,
    store: MemoryStateStore,
    clock: FakeClock,
) -> TokenManager:
    return TokenManager(settings, transport, store=store, clock=clock)


@pytest.fixture
def dispatcher(
    settings: PayPalSettings,
    token_manager: TokenManager,
    transport: FakeTransport,
) -> RequestDispatcher:
    return RequestDispatcher(settings, token_manager, transport)
