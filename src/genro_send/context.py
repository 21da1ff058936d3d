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
Request/response context handed to the resolver.

The resolver is framework-agnostic. Whatever owns the request lifecycle
passes an object implementing SendContext, which gives the resolver:

- encoding negotiation: ``accepts_encodings(*encodings)``
- response headers: ``get_header``, ``set_header``, ``remove_header``
- the content-type slot: ``content_type``
- the body slot: ``body``

ResponseContext
===============
The implementation shipped with genro-send, built from an ASGI scope. It
doubles as the response: once the resolver has filled it, awaiting it as an
ASGI app streams the result::

    context = ResponseContext(scope)
    outcome = await resolver.resolve(context, scope["path"])
    if outcome:
        await context(scope, receive, send)

Body handling
=============
- ``None``: empty body
- ``bytes``: sent in a single message
- async iterable of bytes (e.g. FileStream): one message per chunk with
  ``more_body=True``, then a closing empty message
- HEAD requests: headers only, the stream is never opened
"""

from __future__ import annotations

from collections.abc import AsyncIterable
from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote

from .datastructures import Headers, MutableHeaders, headers_from_scope
from .exceptions import HTTPException
from .negotiation import negotiate_encoding
from .types import Receive, Scope, Send

__all__ = ["ResponseContext", "SendContext"]

Body = bytes | AsyncIterable[bytes] | None


@runtime_checkable
class SendContext(Protocol):
    """What the resolver needs from the HTTP framework."""

    body: Any

    def accepts_encodings(self, *encodings: str) -> str | None:
        """Return the preferred encoding among ``encodings``, or None."""
        ...

    def get_header(self, name: str) -> str | None:
        """Return a response header value, or None if not set."""
        ...

    def set_header(self, name: str, value: Any) -> None:
        """Set a response header, replacing any previous value."""
        ...

    def remove_header(self, name: str) -> None:
        """Remove a response header if present."""
        ...

    @property
    def content_type(self) -> str | None: ...

    @content_type.setter
    def content_type(self, value: str | None) -> None: ...


class ResponseContext:
    """
    SendContext backed by an ASGI HTTP scope.

    Attributes:
        scope: The ASGI scope of the request.
        request_headers: Case-insensitive request headers.
        headers: Mutable response headers.
        status_code: Response status (default 200).
        body: Response body, see module docstring.
    """

    __slots__ = ("scope", "request_headers", "headers", "status_code", "body")

    charset: str = "utf-8"

    def __init__(
        self,
        scope: Scope,
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
    ) -> None:
        self.scope = scope
        self.request_headers: Headers = headers_from_scope(scope)
        self.headers = MutableHeaders(headers)
        self.status_code = 200
        self.body: Body = None

    @property
    def method(self) -> str:
        return str(self.scope.get("method", "GET")).upper()

    @property
    def path(self) -> str:
        """Decoded request path, as the server put it in the scope."""
        return str(self.scope.get("path", "/"))

    @property
    def raw_path(self) -> str:
        """Request path still percent-encoded, without query string.

        Taken from ``scope["raw_path"]`` when the server provides it,
        otherwise rebuilt by quoting the decoded ``path``.
        """
        raw = self.scope.get("raw_path")
        if raw:
            return raw.decode("latin-1").split("?", 1)[0]
        return quote(self.path, safe="/")

    def accepts_encodings(self, *encodings: str) -> str | None:
        return negotiate_encoding(self.request_headers.get("accept-encoding"), *encodings)

    def get_header(self, name: str) -> str | None:
        return self.headers.get(name)

    def set_header(self, name: str, value: Any) -> None:
        self.headers.set(name, value)

    def remove_header(self, name: str) -> None:
        self.headers.remove(name)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @content_type.setter
    def content_type(self, value: str | None) -> None:
        if value:
            self.headers.set("content-type", value)
        else:
            self.headers.remove("content-type")

    def set_error(self, error: HTTPException) -> None:
        """Turn this context into a plain-text error response.

        Headers set during resolution are discarded; headers carried by the
        error (e.g. ``Allow``) are kept.
        """
        body = f"{error.status_code} {error.detail}".encode(self.charset)
        self.status_code = error.status_code
        self.headers = MutableHeaders(error.headers)
        self.headers.set("content-type", f"text/plain; charset={self.charset}")
        self.headers.set("content-length", len(body))
        self.body = body

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """
        ASGI application interface.

        Sends http.response.start, then the body as one or more
        http.response.body messages.
        """
        await send(
            {
                "type": "http.response.start",
                "status": self.status_code,
                "headers": self.headers.raw(),
            }
        )
        body = self.body
        if self.method == "HEAD" or body is None:
            await send({"type": "http.response.body", "body": b""})
            return
        if isinstance(body, bytes):
            await send({"type": "http.response.body", "body": body})
            return
        chunks = aiter(body)
        try:
            async for chunk in chunks:
                await send({"type": "http.response.body", "body": chunk, "more_body": True})
        finally:
            aclose = getattr(chunks, "aclose", None)
            if aclose is not None:
                await aclose()
        await send({"type": "http.response.body", "body": b""})

    def __repr__(self) -> str:
        return f"ResponseContext(method={self.method!r}, path={self.path!r}, status={self.status_code})"
