# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Request path decoding and containment-safe joining.

All functions here are pure: no filesystem access. They turn the raw
request path into an absolute candidate path that is guaranteed to stay
inside the root directory, or raise the HTTPException describing why it
cannot.

Pipeline::

    "/docs/a%20b/"  --strip_root-->  "docs/a%20b/"
                    --decode_path--> "docs/a b/"
                    --(+ index)-->   "docs/a b/index.html"
                    --resolve_path-> "/srv/www/docs/a b/index.html"

Rules enforced by resolve_path:
    - NUL byte anywhere            -> 400 Malicious Path
    - absolute path (posix or win) -> 400 Malicious Path
    - ``..`` left after normalizing -> 403 PathTraversalError
"""

from __future__ import annotations

import ntpath
import os
import posixpath
import re
from pathlib import Path
from urllib.parse import unquote

from .exceptions import HTTPBadRequest, PathTraversalError

__all__ = ["decode_path", "is_hidden", "resolve_path", "strip_root"]

_MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")
_UP_PATH = re.compile(r"(?:^|[\\/])\.\.(?:[\\/]|$)")


def strip_root(path: str) -> str:
    """Remove the leading root marker (and drive, on Windows) from path."""
    _, rest = os.path.splitdrive(path)
    if rest[:1] in ("/", os.sep):
        rest = rest[1:]
    return rest


def decode_path(path: str) -> str:
    """Percent-decode path strictly.

    Raises:
        HTTPBadRequest: on a ``%`` not followed by two hex digits, or on
            escapes that do not decode to valid UTF-8.
    """
    if _MALFORMED_ESCAPE.search(path):
        raise HTTPBadRequest("failed to decode")
    try:
        return unquote(path, encoding="utf-8", errors="strict")
    except UnicodeDecodeError as exc:
        raise HTTPBadRequest("failed to decode", cause=exc) from exc


def resolve_path(root: str, path: str) -> str:
    """Join path onto root, refusing anything that would leave root.

    Args:
        root: Absolute, normalized root directory.
        path: Decoded relative path.

    Returns:
        Normalized absolute path inside root.

    Raises:
        HTTPBadRequest: path contains a NUL byte or is absolute.
        PathTraversalError: path climbs above root.
    """
    if "\0" in path:
        raise HTTPBadRequest("Malicious Path")
    if posixpath.isabs(path) or ntpath.isabs(path):
        raise HTTPBadRequest("Malicious Path")
    if _UP_PATH.search(os.path.normpath("." + os.sep + path)):
        raise PathTraversalError(path)
    return os.path.normpath(os.path.join(root, path))


def is_hidden(root: str, path: str) -> bool:
    """True if any segment of path below root starts with a dot."""
    relative = Path(path).relative_to(root)
    return any(part.startswith(".") for part in relative.parts)
