"""Persisted key-value storage for the authentication token.

Login writes the token under ``userToken``, logout removes it, checkout only
reads it. The checkout flow receives a TokenProvider instead of touching the
store directly, so tests can hand it any callable source.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

USER_TOKEN_KEY = "userToken"


class TokenStoreError(Exception):
    """Raised when the persisted store cannot be read or written."""


class KeyValueStore(Protocol):
    """Async string key-value storage."""

    async def get_item(self, key: str) -> str | None: ...

    async def set_item(self, key: str, value: str) -> None: ...

    async def remove_item(self, key: str) -> None: ...


class TokenProvider(Protocol):
    """Source of the current authentication token."""

    async def get_token(self) -> str | None: ...


class InMemoryTokenStore:
    """Process-local store, for embedding and tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileTokenStore:
    """Store backed by a single JSON object on disk.

    Reads and writes happen in a worker thread. Writes replace the file
    atomically through a temporary sibling.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise TokenStoreError(f"Unable to read token store {self._path}: {e}") from e
        if not isinstance(data, dict):
            raise TokenStoreError(f"Token store {self._path} does not hold a JSON object")
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def _write(self, data: dict[str, str]) -> None:
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(json.dumps(data), encoding="utf-8")
            tmp.replace(self._path)
        except OSError as e:
            raise TokenStoreError(f"Unable to write token store {self._path}: {e}") from e

    async def get_item(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            data[key] = value
            await asyncio.to_thread(self._write, data)

    async def remove_item(self, key: str) -> None:
        async with self._lock:
            data = await asyncio.to_thread(self._read)
            if data.pop(key, None) is not None:
                await asyncio.to_thread(self._write, data)


class StoredTokenProvider:
    """Reads the authentication token from a KeyValueStore."""

    def __init__(self, store: KeyValueStore, key: str = USER_TOKEN_KEY) -> None:
        self._store = store
        self._key = key

    async def get_token(self) -> str | None:
        """Return the stored token, or None when absent or blank.

        Raises:
            TokenStoreError: If the store cannot be read.
        """
        token = await self._store.get_item(self._key)
        if token is None or not token.strip():
            logger.debug("No token stored under %s", self._key)
            return None
        return token
