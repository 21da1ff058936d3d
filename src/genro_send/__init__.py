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

"""genro-send - Static file resolution for ASGI servers.

Main components:
    StaticResolver: Request path -> file, with headers and a lazy body stream
    send: One-call helper returning the served path or raising HTTPException
    StaticFiles: ASGI app serving a directory through StaticResolver
    SendOptions: Typed resolver configuration

Resolution covers path decoding and containment, hidden files,
precompressed ``.br``/``.gz`` variants, extension fallback, directory
index and cache headers.

Usage:
    from genro_send import StaticFiles

    app = StaticFiles("./public", index="index.html", max_age=3_600_000)

    # uvicorn module:app, or from the shell:
    #   genro-send serve ./public --index index.html
"""

import logging

__version__ = "0.1.0"

from .context import ResponseContext, SendContext
from .exceptions import (
    HTTPBadRequest,
    HTTPException,
    HTTPForbidden,
    HTTPInternalServerError,
    HTTPMethodNotAllowed,
    HTTPNotFound,
    PathTraversalError,
    ResolverConfigError,
)
from .options import HeaderCustomizer, SendOptions
from .outcomes import Failed, NotApplicable, ResolutionOutcome, Resolved
from .resolver import StaticResolver, send
from .static import StaticFiles
from .storage import FileStream, LocalStorage, StorageBackend

logging.getLogger("genro_send").addHandler(logging.NullHandler())

__all__ = [
    # Resolver
    "StaticResolver",
    "send",
    "SendOptions",
    "HeaderCustomizer",
    # Outcomes
    "Resolved",
    "NotApplicable",
    "Failed",
    "ResolutionOutcome",
    # Context
    "SendContext",
    "ResponseContext",
    # ASGI
    "StaticFiles",
    # Storage
    "StorageBackend",
    "LocalStorage",
    "FileStream",
    # Exceptions
    "HTTPException",
    "HTTPBadRequest",
    "HTTPForbidden",
    "HTTPNotFound",
    "HTTPMethodNotAllowed",
    "HTTPInternalServerError",
    "PathTraversalError",
    "ResolverConfigError",
]
