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
Static file serving ASGI application.

StaticFiles wraps a StaticResolver in an ASGI app. It can be mounted on its
own or in front of another app, which then receives every request the
resolver has nothing to serve for.

Behavior:
- Non-HTTP scopes: passed to ``app`` (ignored when standalone)
- Methods other than GET/HEAD: passed to ``app``, else 405
- Resolved: 200 with resolver headers, body streamed from disk
- NotApplicable (hidden file, directory without index): ``app``, else 404
- Failed: plain-text error with the failure status (400, 403, 404, 500)

Constructor:
    StaticFiles(directory, app=None, *, storage=None, logger=None, **options)

    - directory: Root directory to serve (must exist)
    - app: Optional ASGI app to fall through to
    - options: any SendOptions field except ``root``

Example:
    app = StaticFiles("./public", index="index.html", extensions=("html",))

    # In front of an API app
    app = StaticFiles("./public", app=api_app, max_age=86_400_000, immutable=True)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .context import ResponseContext
from .exceptions import HTTPMethodNotAllowed, HTTPNotFound, ResolverConfigError
from .outcomes import Failed, NotApplicable
from .resolver import StaticResolver

if TYPE_CHECKING:
    from .storage import StorageBackend
    from .types import ASGIApp, Receive, Scope, Send

__all__ = ["StaticFiles"]


class StaticFiles:
    """
    ASGI application serving files through StaticResolver.

    Attributes:
        directory: Absolute root directory.
        app: Fallback ASGI app, or None.
        resolver: The StaticResolver doing the work.
    """

    __slots__ = ("directory", "app", "resolver", "logger")

    def __init__(
        self,
        directory: str | Path,
        app: ASGIApp | None = None,
        *,
        storage: StorageBackend | None = None,
        logger: logging.Logger | None = None,
        **options: Any,
    ) -> None:
        """
        Initialize static file server.

        Args:
            directory: Root directory to serve files from.
            app: ASGI app receiving requests with nothing to serve.
            storage: Filesystem capability passed to the resolver.
            logger: Logger passed to the resolver.
            **options: SendOptions fields (index, max_age, extensions, ...).

        Raises:
            ValueError: directory does not exist.
            ResolverConfigError: invalid options, or ``root`` among them.
        """
        if "root" in options:
            raise ResolverConfigError("option root is given by directory")
        self.directory = Path(directory).resolve()
        if not self.directory.is_dir():
            raise ValueError(f"Directory does not exist: {self.directory}")
        self.app = app
        self.logger = logger if logger is not None else logging.getLogger("genro_send")
        self.resolver = StaticResolver(
            root=self.directory, storage=storage, logger=self.logger, **options
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Handle ASGI request."""
        if scope["type"] != "http":
            if self.app is not None:
                await self.app(scope, receive, send)
            return

        context = ResponseContext(scope)
        if context.method not in ("GET", "HEAD"):
            if self.app is not None:
                await self.app(scope, receive, send)
                return
            context.set_error(HTTPMethodNotAllowed())
            await context(scope, receive, send)
            return

        outcome = await self.resolver.resolve(context, context.raw_path)

        if isinstance(outcome, NotApplicable):
            if self.app is not None:
                await self.app(scope, receive, send)
                return
            context.set_error(HTTPNotFound())
        elif isinstance(outcome, Failed):
            context.set_error(outcome.error)

        await context(scope, receive, send)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"StaticFiles(directory={str(self.directory)!r}, options={self.resolver.options!r})"
