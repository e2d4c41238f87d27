from __future__ import annotations

from pathlib import Path

import pytest

from shadowrun_client.auth import FileTokenStore, InMemoryTokenStore
from shadowrun_client.client import ApiGatewayClient
from shadowrun_client.config import (
    CONTENT_TYPE,
    DEFAULT_API_URL,
    DEFAULT_TIMEOUT_SECONDS,
    TOKEN_STORAGE_KEY,
    ClientSettings,
)


def test_defaults() -> None:
    s = ClientSettings()
    assert s.api_url == DEFAULT_API_URL == "http://localhost:5000"
    assert s.token_store_path == Path.home() / ".config" / "shadowrun-client" / "storage.json"
    assert s.log_level == "INFO"
    assert s.log_format == "detailed"
    assert DEFAULT_TIMEOUT_SECONDS == 30.0
    assert CONTENT_TYPE == "application/json"
    assert TOKEN_STORAGE_KEY == "shadowrun-session-token"


def test_api_url_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHADOWRUN_API_URL", "https://api.example.test")
    assert ClientSettings().api_url == "https://api.example.test"


def test_front_end_variable_is_accepted(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NEXT_PUBLIC_API_URL", "https://legacy.example.test")
    assert ClientSettings().api_url == "https://legacy.example.test"


def test_dotenv_file_is_read(tmp_path: Path) -> None:
    # conftest runs every test from tmp_path
    (tmp_path / ".env").write_text("SHADOWRUN_API_URL=http://localhost:7000\nSHADOWRUN_LOG_FORMAT=json\n")
    s = ClientSettings()
    assert s.api_url == "http://localhost:7000"
    assert s.log_format == "json"


def test_client_resolves_base_url_once_at_construction(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHADOWRUN_API_URL", "http://localhost:5001/")
    api = ApiGatewayClient(token_provider=InMemoryTokenStore())
    monkeypatch.setenv("SHADOWRUN_API_URL", "http://localhost:9999")

    assert api.base_url == "http://localhost:5001"
    assert api.timeout == DEFAULT_TIMEOUT_SECONDS


def test_explicit_base_url_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SHADOWRUN_API_URL", "http://localhost:5001")
    api = ApiGatewayClient("http://mock", token_provider=InMemoryTokenStore())
    assert api.base_url == "http://mock"


def test_default_token_provider_is_file_store(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    store_path = tmp_path / "tokens.json"
    monkeypatch.setenv("SHADOWRUN_TOKEN_STORE", str(store_path))
    api = ApiGatewayClient("http://mock")

    assert isinstance(api.token_provider, FileTokenStore)
    assert api.token_provider.path == store_path


def test_explicit_settings_supply_base_url_and_token_store(tmp_path: Path) -> None:
    settings = ClientSettings(api_url="http://mock/", token_store_path=tmp_path / "store.json")

    api = ApiGatewayClient(settings=settings)

    assert api.base_url == "http://mock"
    assert isinstance(api.token_provider, FileTokenStore)
    assert api.token_provider.path == tmp_path / "store.json"


def test_token_provider_alone_still_resolves_base_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NEXT_PUBLIC_API_URL", "http://localhost:5002")
    store = InMemoryTokenStore()

    api = ApiGatewayClient(token_provider=store)

    assert api.base_url == "http://localhost:5002"
    assert api.token_provider is store
