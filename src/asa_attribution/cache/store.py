"""Key-value byte-blob stores backing the payload cache.

Storage structure (FileStore):
    {base_path}/{key}.json

Example:
    data/savedAttributionPayload.json

File I/O runs through asyncio.to_thread so the event loop never blocks.
Writes go to a temporary sibling first and are moved into place, so a
crash mid-write leaves the previous blob intact.
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Async get/set/remove of byte blobs by key."""

    async def load(self, key: str) -> bytes | None: ...

    async def save(self, key: str, data: bytes) -> None: ...

    async def remove(self, key: str) -> None: ...


class FileStore:
    """One file per key under a base directory.

    Args:
        base_path: Root directory for stored blobs. Defaults to 'data/'.
    """

    def __init__(self, base_path: str | Path = "data") -> None:
        self.base_path = Path(base_path)

    def _get_file_path(self, key: str) -> Path:
        """Map a key to its file path.

        Raises:
            ValueError: Key is empty or contains a path separator
        """
        if not key or "/" in key or "\\" in key or key in {".", ".."}:
            raise ValueError(f"Invalid store key: {key!r}")
        return self.base_path / f"{key}.json"

    async def load(self, key: str) -> bytes | None:
        """Read the blob for ``key``; None if it was never saved."""
        file_path = self._get_file_path(key)

        def _read() -> bytes | None:
            try:
                return file_path.read_bytes()
            except FileNotFoundError:
                return None

        return await asyncio.to_thread(_read)

    async def save(self, key: str, data: bytes) -> None:
        """Atomically replace the blob for ``key``."""
        file_path = self._get_file_path(key)

        def _write() -> None:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=file_path.parent, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(data)
                os.replace(tmp_name, file_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise

        await asyncio.to_thread(_write)
        logger.debug("Stored %d bytes at %s", len(data), file_path)

    async def remove(self, key: str) -> None:
        """Delete the blob for ``key`` if present."""
        file_path = self._get_file_path(key)
        await asyncio.to_thread(file_path.unlink, missing_ok=True)


class MemoryStore:
    """Dict-backed store for in-process use and tests."""

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(initial or {})

    async def load(self, key: str) -> bytes | None:
        return self._data.get(key)

    async def save(self, key: str, data: bytes) -> None:
        self._data[key] = data

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)
