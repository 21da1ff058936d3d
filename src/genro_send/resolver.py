# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
StaticResolver - maps a request path to a file and prepares the response.

Pipeline (single pass, any stage may stop with NotApplicable or Failed)::

    decode -> join inside root -> hidden check -> precompressed variant
           -> extension fallback -> stat -> [directory index -> stat]
           -> headers + body

Stages
======
decode
    Strip the leading ``/``, percent-decode strictly (400 on malformed
    escapes), append ``index`` when the request ends with ``/``.
join
    Lexical join onto root. NUL bytes and absolute paths are 400, climbing
    above root is 403 (PathTraversalError). No filesystem access before this.
hidden check
    A dot-prefixed segment below root gives NotApplicable unless ``hidden``.
precompressed variant
    ``<path>.br`` if the client prefers br over identity, else ``<path>.gz``
    for gzip. brotli is probed first; gzip is not probed after a br match.
    On a match Content-Encoding is set and Content-Length dropped.
extension fallback
    For an extensionless basename, ``<path><ext>`` for each configured
    extension in order; first existing wins.
stat
    ENOENT, ENAMETOOLONG, ENOTDIR are 404; any other OSError is 500.
    A directory is retried with ``/<index>`` when ``format`` and ``index``
    are set, otherwise NotApplicable.
headers
    ``set_headers`` hook first, then Content-Length (always), Last-Modified,
    Cache-Control and content type (only when absent). The body is a lazily
    opened stream of the final path.

Usage::

    resolver = StaticResolver(root="./public", index="index.html", max_age=3_600_000)
    outcome = await resolver.resolve(context, "/docs/")
    if isinstance(outcome, Resolved):
        ...  # context carries headers and body
    elif isinstance(outcome, Failed):
        ...  # outcome.status_code, outcome.cause
    else:
        ...  # NotApplicable: fall through to other handlers

The one-call helper ``send()`` keeps the classic shape: returns the served
path, None when there is nothing to serve, raises HTTPException on failure.
"""

from __future__ import annotations

import errno
import logging
import mimetypes
import os
import stat
from email.utils import formatdate
from typing import TYPE_CHECKING, Any

from .exceptions import (
    HTTPException,
    HTTPInternalServerError,
    HTTPNotFound,
    ResolverConfigError,
)
from .options import SendOptions
from .outcomes import Failed, NotApplicable, ResolutionOutcome, Resolved
from .paths import decode_path, is_hidden, resolve_path, strip_root
from .storage import LocalStorage

if TYPE_CHECKING:
    from .context import SendContext
    from .storage import StorageBackend

__all__ = ["StaticResolver", "guess_content_type", "send"]

NOT_FOUND_ERRNOS = frozenset({errno.ENOENT, errno.ENAMETOOLONG, errno.ENOTDIR})

# Precompressed variants in priority order: (token, suffix, option name)
ENCODINGS = (("br", ".br", "brotli"), ("gzip", ".gz", "gzip"))

mimetypes.add_type("application/javascript", ".js")
mimetypes.add_type("application/javascript", ".mjs")
mimetypes.add_type("text/css", ".css")
mimetypes.add_type("image/svg+xml", ".svg")
mimetypes.add_type("application/json", ".json")
mimetypes.add_type("application/wasm", ".wasm")
mimetypes.add_type("text/html", ".html")
mimetypes.add_type("text/html", ".htm")


def guess_content_type(path: str, encoding_suffix: str = "") -> str:
    """Content type for path, ignoring the precompressed suffix.

    Text types and JavaScript get ``charset=utf-8``. Unknown extensions
    map to ``application/octet-stream``.

    Example:
        >>> guess_content_type("/srv/app.js.br", ".br")
        'application/javascript; charset=utf-8'
    """
    if encoding_suffix and path.endswith(encoding_suffix):
        path = path[: -len(encoding_suffix)]
    content_type, _ = mimetypes.guess_type(os.path.basename(path))
    if content_type is None:
        return "application/octet-stream"
    if content_type.startswith("text/") or content_type == "application/javascript":
        return f"{content_type}; charset=utf-8"
    return content_type


class StaticResolver:
    """
    Resolve request paths to files under a root directory.

    Stateless between calls: one instance can serve concurrent requests.

    Attributes:
        options: SendOptions in effect.
        storage: StorageBackend used for every filesystem probe.
        logger: Logger receiving per-stage debug records.
        root: Absolute root directory.
    """

    __slots__ = ("options", "storage", "logger", "root")

    def __init__(
        self,
        options: SendOptions | None = None,
        *,
        storage: StorageBackend | None = None,
        logger: logging.Logger | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize resolver.

        Args:
            options: Base options. Keyword arguments override its fields.
            storage: Filesystem capability (default: LocalStorage).
            logger: Logger (default: the silent ``genro_send`` logger).
            **kwargs: SendOptions fields.

        Raises:
            ResolverConfigError: invalid option values.
        """
        self.options = SendOptions.build(options, **kwargs)
        self.storage = storage if storage is not None else LocalStorage()
        self.logger = logger if logger is not None else logging.getLogger("genro_send")
        self.root = self.options.resolved_root

    async def resolve(self, context: SendContext, raw_path: str) -> ResolutionOutcome:
        """
        Resolve raw_path and prepare context for the response.

        Args:
            context: Request/response context (see SendContext).
            raw_path: Request path, still percent-encoded.

        Returns:
            Resolved, NotApplicable or Failed.

        Raises:
            ResolverConfigError: context missing or raw_path empty.
        """
        if context is None:
            raise ResolverConfigError("context required")
        if not raw_path:
            raise ResolverConfigError("pathname required")

        opts = self.options
        self.logger.debug(f"send {raw_path!r} from {self.root!r}")

        trailing_slash = raw_path.endswith("/")
        try:
            path = decode_path(strip_root(raw_path))
            if opts.index and trailing_slash:
                path += opts.index
            path = resolve_path(self.root, path)
        except HTTPException as exc:
            self.logger.debug(f"rejected {raw_path!r}: {exc.status_code} {exc.detail}")
            return Failed(exc)

        if not opts.hidden and is_hidden(self.root, path):
            self.logger.debug(f"hidden path {path!r}")
            return NotApplicable("hidden")

        path, encoding_suffix = await self._negotiate_encoding(context, path)
        path = await self._apply_extensions(path)

        try:
            stats = await self._stat(path)
            if stat.S_ISDIR(stats.st_mode):
                if not (opts.format and opts.index):
                    self.logger.debug(f"directory without index {path!r}")
                    return NotApplicable("directory")
                path = f"{path}{os.sep}{opts.index}"
                stats = await self._stat(path)
                if stat.S_ISDIR(stats.st_mode):
                    self.logger.debug(f"index is a directory {path!r}")
                    return NotApplicable("directory")
        except HTTPException as exc:
            return Failed(exc)

        self._build_headers(context, path, stats, encoding_suffix)
        context.body = self.storage.open(path)
        self.logger.debug(f"resolved {raw_path!r} -> {path!r} ({stats.st_size} bytes)")
        return Resolved(path, stats, encoding_suffix)

    async def _negotiate_encoding(self, context: SendContext, path: str) -> tuple[str, str]:
        """Switch to the best precompressed sibling, if any."""
        for token, suffix, option in ENCODINGS:
            if (
                context.accepts_encodings(token, "identity") == token
                and getattr(self.options, option)
                and await self.storage.exists(path + suffix)
            ):
                context.set_header("Content-Encoding", token)
                context.remove_header("Content-Length")
                self.logger.debug(f"serving {token} variant of {path!r}")
                return path + suffix, suffix
        return path, ""

    async def _apply_extensions(self, path: str) -> str:
        """Try configured extensions on an extensionless path."""
        extensions = self.options.extensions
        if not extensions or "." in os.path.basename(path):
            return path
        for ext in extensions:
            if not ext.startswith("."):
                ext = f".{ext}"
            if await self.storage.exists(path + ext):
                return path + ext
        return path

    async def _stat(self, path: str) -> os.stat_result:
        """Stat path, mapping OSError to 404 or 500."""
        try:
            return await self.storage.stat(path)
        except OSError as exc:
            if exc.errno in NOT_FOUND_ERRNOS:
                self.logger.debug(f"not found {path!r}: {exc}")
                raise HTTPNotFound(cause=exc) from exc
            self.logger.error(f"stat failed for {path!r}: {exc}", exc_info=exc)
            raise HTTPInternalServerError(cause=exc) from exc

    def _build_headers(
        self,
        context: SendContext,
        path: str,
        stats: os.stat_result,
        encoding_suffix: str,
    ) -> None:
        """Apply the hook, then default headers that are still missing."""
        opts = self.options
        if opts.set_headers is not None:
            opts.set_headers(context, path, stats)

        context.set_header("Content-Length", str(stats.st_size))
        if not context.get_header("Last-Modified"):
            context.set_header("Last-Modified", formatdate(stats.st_mtime, usegmt=True))
        if not context.get_header("Cache-Control"):
            directives = [f"max-age={opts.max_age // 1000}"]
            if opts.immutable:
                directives.append("immutable")
            context.set_header("Cache-Control", ",".join(directives))
        if not context.content_type:
            context.content_type = guess_content_type(path, encoding_suffix)

    def __repr__(self) -> str:
        return f"StaticResolver(root={self.root!r}, options={self.options!r})"


async def send(
    context: SendContext,
    path: str,
    options: SendOptions | None = None,
    *,
    storage: StorageBackend | None = None,
    logger: logging.Logger | None = None,
    **kwargs: Any,
) -> str | None:
    """
    Serve path into context in one call.

    Returns:
        The absolute path served, or None when there is nothing to serve.

    Raises:
        HTTPException: 400, 403, 404 or 500 failure (cause preserved).
        ResolverConfigError: invalid options or arguments.

    Example:
        >>> served = await send(context, "/app.js", root="./public", max_age=60_000)
    """
    resolver = StaticResolver(options, storage=storage, logger=logger, **kwargs)
    outcome = await resolver.resolve(context, path)
    if isinstance(outcome, Failed):
        raise outcome.error
    if isinstance(outcome, NotApplicable):
        return None
    return outcome.path
