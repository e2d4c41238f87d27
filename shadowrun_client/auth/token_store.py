"""Credential storage.

Defines the `TokenProvider` capability the clients read the bearer token
from, plus two implementations:

- `InMemoryTokenStore` for tests and hosts that manage login themselves.
- `FileTokenStore`, a small persistent JSON key-value file in which the token
  lives under a fixed key, mirroring the browser storage entry used by the
  web front-end.

The clients only ever call `get()` (before every request) and `clear()`
(after a 401). Writing a token is the job of the external login flow.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Protocol, Union, runtime_checkable

from shadowrun_client.config import TOKEN_STORAGE_KEY, default_token_store_path

logger = logging.getLogger(__name__)


@runtime_checkable
class TokenProvider(Protocol):
    def get(self) -> Optional[str]: ...

    def clear(self) -> None: ...


class InMemoryTokenStore:
    """Process-local token holder."""

    def __init__(self, token: Optional[str] = None) -> None:
        self._token = token or None

    def get(self) -> Optional[str]:
        return self._token

    def set(self, token: str) -> None:
        self._token = token or None

    def clear(self) -> None:
        self._token = None


class FileTokenStore:
    """Persistent token store backed by a JSON object on disk.

    Other keys in the same file are preserved; only `key` is read, written
    and removed. A missing, empty or corrupt file reads as "no credential".
    """

    def __init__(self, path: Union[str, Path, None] = None, *, key: str = TOKEN_STORAGE_KEY) -> None:
        self.path = Path(path) if path is not None else default_token_store_path()
        self.key = key
        self._lock = threading.Lock()

    def _load(self) -> Dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError:
            logger.warning("FileTokenStore: cannot read %s", self.path, exc_info=True)
            return {}
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("FileTokenStore: ignoring malformed store at %s", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _dump(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)

    def get(self) -> Optional[str]:
        with self._lock:
            return self._load().get(self.key) or None

    def set(self, token: str) -> None:
        with self._lock:
            data = self._load()
            data[self.key] = token
            self._dump(data)
        logger.debug("FileTokenStore.set: stored credential under %r", self.key)

    def clear(self) -> None:
        with self._lock:
            data = self._load()
            if self.key not in data:
                return
            del data[self.key]
            self._dump(data)
        logger.debug("FileTokenStore.clear: removed credential %r from %s", self.key, self.path)
