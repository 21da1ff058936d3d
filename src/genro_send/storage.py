# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""LocalStorage - Filesystem capability used by the resolver.

The resolver never touches ``os`` directly. It talks to a StorageBackend,
which provides three operations:

    exists(path)  -> bool            errors are swallowed (False)
    stat(path)    -> os.stat_result  errors propagate as OSError
    open(path)    -> FileStream      lazy, nothing is opened until iterated

LocalStorage implements them on the local filesystem. Blocking calls are
decorated with ``smartasync``: awaited from a coroutine they run in a worker
thread, called from sync code they run inline::

    storage = LocalStorage()
    storage.exists("/srv/www/index.html")          # sync: bool
    await storage.stat("/srv/www/index.html")      # async: os.stat_result

Any other backend (in-memory for tests, object store) only needs to
implement the StorageBackend protocol with coroutine methods.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from typing import IO, Protocol, runtime_checkable

from smartasync import smartasync

__all__ = ["DEFAULT_CHUNK_SIZE", "FileStream", "LocalStorage", "StorageBackend"]

DEFAULT_CHUNK_SIZE = 64 * 1024


@runtime_checkable
class StorageBackend(Protocol):
    """Abstract filesystem capability.

    Paths are absolute strings already checked for containment.
    """

    async def exists(self, path: str) -> bool:
        """True if something exists at path. Never raises."""
        ...

    async def stat(self, path: str) -> os.stat_result:
        """Stat path, raising OSError on failure."""
        ...

    def open(self, path: str) -> AsyncIterator[bytes]:
        """Return a lazily opened byte stream for path."""
        ...


class FileStream:
    """Lazily opened async byte stream over a local file.

    The file is opened on first iteration and closed when iteration ends,
    whether it completes or is abandoned by the consumer.

    Example:
        async for chunk in FileStream("/srv/www/app.js"):
            await send({"type": "http.response.body", "body": chunk, "more_body": True})
    """

    __slots__ = ("path", "chunk_size", "_file")

    def __init__(self, path: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.path = path
        self.chunk_size = chunk_size
        self._file: IO[bytes] | None = None

    @property
    def opened(self) -> bool:
        """True while the underlying file is open."""
        return self._file is not None

    @smartasync
    def _open(self) -> None:
        self._file = open(self.path, "rb")

    @smartasync
    def _read(self) -> bytes:
        if self._file is None:
            raise RuntimeError(f"FileStream not open: {self.path}")
        return self._file.read(self.chunk_size)

    @smartasync
    def close(self) -> None:
        """Close the underlying file if open."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        await self._open()
        try:
            while True:
                chunk = await self._read()
                if not chunk:
                    break
                yield chunk
        finally:
            await self.close()

    def __repr__(self) -> str:
        return f"FileStream(path={self.path!r}, opened={self.opened})"


class LocalStorage:
    """StorageBackend on the local filesystem.

    Attributes:
        chunk_size: Read size for streams returned by ``open``.
    """

    __slots__ = ("chunk_size",)

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.chunk_size = chunk_size

    @smartasync
    def exists(self, path: str) -> bool:
        """True if path exists. Any OSError counts as absent."""
        try:
            os.stat(path)
        except OSError:
            return False
        return True

    @smartasync
    def stat(self, path: str) -> os.stat_result:
        """Stat path following symlinks. OSError propagates."""
        return os.stat(path)

    def open(self, path: str) -> FileStream:
        """Return a FileStream; the file is not opened yet."""
        return FileStream(path, chunk_size=self.chunk_size)

    def __repr__(self) -> str:
        return f"LocalStorage(chunk_size={self.chunk_size})"
