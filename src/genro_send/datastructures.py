# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""
Case-insensitive HTTP headers.

ASGI carries headers as ``list[tuple[bytes, bytes]]`` (Latin-1) in both
directions. The resolver needs two views of them:

- ``Headers``: the request side, read-only, built once per request
- ``MutableHeaders``: the response side, where the resolver sets, keeps or
  drops entries (``Content-Encoding``, ``Content-Length``, ...)

Flow::

    scope["headers"] = [(b"Accept-Encoding", b"br, gzip")]
                        ↓
    Headers: [("accept-encoding", "br, gzip")]
                        ↓
    headers.get("ACCEPT-ENCODING") → "br, gzip"

Duplicate names are allowed. ``MutableHeaders.set`` collapses them into a
single entry, ``append`` does not.

See RFC 7230 section 3.2 for the name-matching rules.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Iterator

__all__ = ["Headers", "MutableHeaders", "headers_from_scope"]


class _HeaderList:
    """Ordered ``(name, value)`` pairs with case-insensitive lookup."""

    __slots__ = ("_headers",)

    _headers: list[tuple[str, str]]

    def get(self, key: str, default: str | None = None) -> str | None:
        """First value for ``key``, or ``default``."""
        return next(iter(self.getlist(key)), default)

    def getlist(self, key: str) -> list[str]:
        """Every value for ``key``, in order."""
        wanted = key.lower()
        return [value for name, value in self._headers if name.lower() == wanted]

    def items(self) -> list[tuple[str, str]]:
        return list(self._headers)

    def __getitem__(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and bool(self.getlist(key))

    def __iter__(self) -> Iterator[str]:
        return iter(dict.fromkeys(name.lower() for name, _ in self._headers))

    def __len__(self) -> int:
        return len(self._headers)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._headers!r})"


class Headers(_HeaderList):
    """
    Request headers decoded from an ASGI scope.

    Names are lowercased once at construction, values are decoded as
    Latin-1 and never modified.

    Example:
        >>> headers = Headers([(b"Accept-Encoding", b"gzip"), (b"Accept", b"text/html")])
        >>> headers.get("accept-encoding")
        'gzip'
        >>> "ACCEPT" in headers
        True
    """

    __slots__ = ()

    def __init__(self, raw_headers: list[tuple[bytes, bytes]]) -> None:
        self._headers = [
            (name.decode("latin-1").lower(), value.decode("latin-1"))
            for name, value in raw_headers
        ]

    def keys(self) -> list[str]:
        """Distinct header names in order of first occurrence."""
        return list(self)


class MutableHeaders(_HeaderList):
    """
    Response headers with case-insensitive set/remove.

    The case given to ``set`` is kept for output until ``raw()``, which
    lowercases names. Values are always stored as ``str``.

    Example:
        >>> headers = MutableHeaders()
        >>> headers.set("Cache-Control", "max-age=0")
        >>> headers.get("cache-control")
        'max-age=0'
        >>> headers.remove("CACHE-CONTROL")
        >>> "cache-control" in headers
        False
    """

    __slots__ = ()

    def __init__(self, headers: Mapping[str, str] | list[tuple[str, str]] | None = None) -> None:
        if headers is None:
            headers = []
        pairs = headers.items() if isinstance(headers, Mapping) else headers
        self._headers = [(name, str(value)) for name, value in pairs]

    def set(self, key: str, value: Any) -> None:
        """Set a header, replacing any existing value with the same name."""
        self.remove(key)
        self.append(key, value)

    def append(self, key: str, value: Any) -> None:
        """Add a header entry without touching existing ones."""
        self._headers.append((key, str(value)))

    def remove(self, key: str) -> None:
        """Remove every entry with the given name. Missing names are ignored."""
        unwanted = key.lower()
        self._headers = [pair for pair in self._headers if pair[0].lower() != unwanted]

    def raw(self) -> list[tuple[bytes, bytes]]:
        """ASGI ``headers`` list: lowercase names, Latin-1 bytes."""
        return [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self._headers
        ]


def headers_from_scope(scope: Mapping[str, Any]) -> Headers:
    """Request headers of an ASGI scope (empty when the scope has none)."""
    return Headers(scope.get("headers", []))
