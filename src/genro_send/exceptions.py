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
Exception classes for genro-send error handling.

Module Structure
----------------
HTTPException is the single error value carried by a failed resolution.
It holds an HTTP status code, a detail message and, when the failure came
from the filesystem or the decoder, the underlying ``cause``.

Status-specific subclasses::

    HTTPBadRequest          400  malformed percent-encoding, malicious path
    HTTPForbidden           403
    PathTraversalError      403  joined path escapes the root directory
    HTTPNotFound            404  ENOENT, ENAMETOOLONG, ENOTDIR
    HTTPMethodNotAllowed    405  used by the StaticFiles ASGI app
    HTTPInternalServerError 500  any other stat failure

ResolverConfigError is not an HTTP error. It signals a programming mistake
(bad ``set_headers``, non-string extension, missing context) and is raised
synchronously, before any I/O.

Example:
    >>> raise HTTPNotFound(cause=FileNotFoundError(2, "No such file"))
    >>> raise HTTPException(401, detail="Auth required", headers={"WWW-Authenticate": "Bearer"})
"""

from __future__ import annotations

__all__ = [
    "HTTPException",
    "HTTPBadRequest",
    "HTTPForbidden",
    "HTTPNotFound",
    "HTTPMethodNotAllowed",
    "HTTPInternalServerError",
    "PathTraversalError",
    "ResolverConfigError",
]


class HTTPException(Exception):
    """
    HTTP exception with status code, detail and optional cause.

    Attributes:
        status_code: HTTP status code (expected 4xx or 5xx, not validated)
        detail: Error detail message
        headers: Response headers as list of tuples (supports duplicate names)
        cause: Underlying exception, if any. Also set as ``__cause__``.
    """

    def __init__(
        self,
        status_code: int,
        detail: str = "",
        headers: dict[str, str] | list[tuple[str, str]] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        """
        Initialize HTTP exception.

        Args:
            status_code: HTTP status code (4xx, 5xx expected)
            detail: Error detail message (default: "")
            headers: Response headers as dict or list of tuples (default: None).
            cause: Original exception wrapped by this one (default: None).
        """
        self.status_code = status_code
        self.detail = detail
        if headers is None:
            self.headers: list[tuple[str, str]] | None = None
        elif isinstance(headers, dict):
            self.headers = list(headers.items())
        else:
            self.headers = list(headers)
        self.cause = cause
        self.__cause__ = cause
        super().__init__(detail)

    def __repr__(self) -> str:
        """Return detailed string representation."""
        return f"{type(self).__name__}(status_code={self.status_code}, detail={self.detail!r})"


class HTTPBadRequest(HTTPException):
    """HTTP 400 Bad Request exception."""

    def __init__(self, detail: str = "Bad request", cause: BaseException | None = None) -> None:
        super().__init__(400, detail=detail, cause=cause)


class HTTPForbidden(HTTPException):
    """HTTP 403 Forbidden exception."""

    def __init__(self, detail: str = "Forbidden", cause: BaseException | None = None) -> None:
        super().__init__(403, detail=detail, cause=cause)


class PathTraversalError(HTTPForbidden):
    """Joined request path resolves outside the root directory."""

    def __init__(self, path: str) -> None:
        super().__init__(detail="Forbidden")
        self.path = path

    def __repr__(self) -> str:
        return f"PathTraversalError(path={self.path!r})"


class HTTPNotFound(HTTPException):
    """HTTP 404 Not Found exception."""

    def __init__(self, detail: str = "Not found", cause: BaseException | None = None) -> None:
        super().__init__(404, detail=detail, cause=cause)


class HTTPMethodNotAllowed(HTTPException):
    """HTTP 405 Method Not Allowed exception."""

    def __init__(self, allow: str = "GET, HEAD") -> None:
        super().__init__(405, detail="Method Not Allowed", headers={"Allow": allow})


class HTTPInternalServerError(HTTPException):
    """HTTP 500 Internal Server Error exception."""

    def __init__(
        self, detail: str = "Internal server error", cause: BaseException | None = None
    ) -> None:
        super().__init__(500, detail=detail, cause=cause)


class ResolverConfigError(TypeError):
    """Invalid resolver configuration or call arguments. Raised before any I/O."""
