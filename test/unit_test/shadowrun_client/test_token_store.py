from __future__ import annotations

import json
from pathlib import Path

from shadowrun_client.auth import FileTokenStore, InMemoryTokenStore, TokenProvider
from shadowrun_client.config import TOKEN_STORAGE_KEY


def test_in_memory_store_roundtrip() -> None:
    store = InMemoryTokenStore()
    assert store.get() is None
    store.set("abc")
    assert store.get() == "abc"
    store.clear()
    assert store.get() is None


def test_stores_satisfy_token_provider_protocol(tmp_path: Path) -> None:
    assert isinstance(InMemoryTokenStore(), TokenProvider)
    assert isinstance(FileTokenStore(tmp_path / "s.json"), TokenProvider)


def test_file_store_missing_file_reads_as_no_credential(tmp_path: Path) -> None:
    store = FileTokenStore(tmp_path / "nope" / "storage.json")
    assert store.get() is None
    store.clear()
    assert not store.path.exists()


def test_file_store_persists_under_fixed_key(tmp_path: Path) -> None:
    path = tmp_path / "cfg" / "storage.json"
    FileTokenStore(path).set("tok")

    assert json.loads(path.read_text()) == {TOKEN_STORAGE_KEY: "tok"}
    assert FileTokenStore(path).get() == "tok"


def test_file_store_clear_keeps_other_entries(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_text(json.dumps({TOKEN_STORAGE_KEY: "tok", "theme": "shadowrunBarren"}))
    store = FileTokenStore(path)

    store.clear()

    assert store.get() is None
    assert json.loads(path.read_text()) == {"theme": "shadowrunBarren"}


def test_file_store_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_text("{not json")
    store = FileTokenStore(path)

    assert store.get() is None
    store.set("tok")
    assert store.get() == "tok"


def test_file_store_empty_token_reads_as_absent(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    path.write_text(json.dumps({TOKEN_STORAGE_KEY: ""}))
    assert FileTokenStore(path).get() is None


def test_file_store_custom_key(tmp_path: Path) -> None:
    path = tmp_path / "storage.json"
    FileTokenStore(path, key="gm-token").set("g")
    assert FileTokenStore(path).get() is None
    assert FileTokenStore(path, key="gm-token").get() == "g"
