from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, List

import httpx
import pytest

from shadowrun_client.auth import AuthExpired, InMemoryTokenStore

# Load dotenv files early so fixtures can read overrides via os.getenv
try:  # pragma: no cover
    from dotenv import load_dotenv

    TEST_ROOT = Path(__file__).resolve().parent
    load_dotenv(TEST_ROOT / ".env", override=False)
except ImportError:
    pass


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    allowed_prefixes: Iterable[str] = (
        "http://mock",
        "https://mock",
        "http://localhost",
        "http://127.0.0.1",
        "/",  # Allow relative paths
    )

    orig_sync = httpx._client.Client.request
    orig_async = httpx._client.AsyncClient.request
    orig_sync_send = httpx._client.Client.send
    orig_async_send = httpx._client.AsyncClient.send

    def _is_allowed(url_str: str) -> bool:
        return any(url_str.startswith(p) for p in allowed_prefixes)

    def offline_sync(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return orig_sync(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async(self, method, url, *args, **kwargs):
        url_str = str(url)
        if _is_allowed(url_str):
            return await orig_async(self, method, url, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    # Streamed requests (SSE) go through build_request + send and never hit request()
    def offline_sync_send(self, request, *args, **kwargs):
        url_str = str(request.url)
        if _is_allowed(url_str):
            return orig_sync_send(self, request, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard: {url_str}")

    async def offline_async_send(self, request, *args, **kwargs):
        url_str = str(request.url)
        if _is_allowed(url_str):
            return await orig_async_send(self, request, *args, **kwargs)
        raise RuntimeError(f"External HTTP blocked by global offline guard (async): {url_str}")

    monkeypatch.setattr(httpx._client.Client, "request", offline_sync, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "request", offline_async, raising=True)
    monkeypatch.setattr(httpx._client.Client, "send", offline_sync_send, raising=True)
    monkeypatch.setattr(httpx._client.AsyncClient, "send", offline_async_send, raising=True)


@pytest.fixture(autouse=True)
def _isolated_client_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Keep the developer's environment and home directory out of the tests."""
    for name in (
        "SHADOWRUN_API_URL",
        "NEXT_PUBLIC_API_URL",
        "SHADOWRUN_TOKEN_STORE",
        "SHADOWRUN_LOG_LEVEL",
        "SHADOWRUN_LOG_FORMAT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))


@pytest.fixture
def token_store() -> InMemoryTokenStore:
    return InMemoryTokenStore("tok-123")


@pytest.fixture
def auth_events() -> List[AuthExpired]:
    return []


@pytest.fixture
def record_auth(auth_events: List[AuthExpired]) -> Callable[[AuthExpired], None]:
    return auth_events.append
