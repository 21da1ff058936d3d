# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Accept-Encoding negotiation.

Picks the client's preferred content coding among a set offered by the
server, following RFC 7231 section 5.3.4:

- codings are listed with an optional ``q`` weight (default 1)
- ``*`` matches any coding not listed explicitly
- ``identity`` is acceptable unless excluded (``identity;q=0`` or
  ``*;q=0``); when not mentioned it is added with the lowest listed weight
- a coding with ``q=0`` is not acceptable

Ties are broken by specificity (exact name over ``*``), then by position
in the header, then by the order the server offered the codings.

Example:
    >>> negotiate_encoding("gzip, br;q=0.8", "br", "identity")
    'br'
    >>> negotiate_encoding("gzip", "br", "identity")
    'identity'
    >>> negotiate_encoding("*;q=0", "br", "identity") is None
    True
"""

from __future__ import annotations

from typing import NamedTuple

__all__ = ["negotiate_encoding", "parse_accept_encoding"]


class EncodingSpec(NamedTuple):
    encoding: str
    q: float
    index: int


class _Priority(NamedTuple):
    specificity: int
    q: float
    order: int
    offered: int


def parse_accept_encoding(value: str | None) -> list[EncodingSpec]:
    """Parse an Accept-Encoding header value. Malformed entries are skipped."""
    specs: list[EncodingSpec] = []
    if not value:
        value = ""
    for item in value.split(","):
        parts = item.strip().split(";")
        encoding = parts[0].strip().lower()
        if not encoding:
            continue
        q = 1.0
        valid = True
        for param in parts[1:]:
            key, _, raw = param.partition("=")
            if key.strip().lower() != "q":
                continue
            try:
                q = float(raw.strip())
            except ValueError:
                valid = False
        if valid:
            specs.append(EncodingSpec(encoding, q, len(specs)))

    has_identity = any(spec.encoding in ("identity", "*") for spec in specs)
    if not has_identity:
        min_quality = min((spec.q or 1.0 for spec in specs), default=1.0)
        specs.append(EncodingSpec("identity", min_quality, len(specs)))
    return specs


def _priority(encoding: str, offered: int, specs: list[EncodingSpec]) -> _Priority:
    best = _Priority(0, 0.0, -1, offered)
    for spec in specs:
        if spec.encoding == encoding.lower():
            specificity = 1
        elif spec.encoding == "*":
            specificity = 0
        else:
            continue
        candidate = _Priority(specificity, spec.q, spec.index, offered)
        if candidate[:3] > best[:3]:
            best = candidate
    return best


def negotiate_encoding(accept_encoding: str | None, *offered: str) -> str | None:
    """Return the offered coding the client prefers, or None if none is acceptable."""
    specs = parse_accept_encoding(accept_encoding)
    priorities = [_priority(encoding, i, specs) for i, encoding in enumerate(offered)]
    acceptable = [p for p in priorities if p.q > 0]
    if not acceptable:
        return None
    acceptable.sort(key=lambda p: (-p.q, -p.specificity, p.order, p.offered))
    return offered[acceptable[0].offered]
