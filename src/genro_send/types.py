# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""ASGI type definitions for genro-send.

Scope : MutableMapping[str, Any]
    Connection metadata. genro-send reads ``type``, ``method``, ``path``
    and ``headers`` from HTTP scopes.

Message : MutableMapping[str, Any]
    Messages exchanged with the server. genro-send only emits
    ``http.response.start`` and ``http.response.body``.

Receive, Send, ASGIApp
    The standard ASGI callables.

MutableMapping is used instead of TypedDict because ASGI allows
server-specific extensions in both scopes and messages.

References:
    - ASGI Specification: https://asgi.readthedocs.io/en/latest/specs/main.html
    - ASGI HTTP Spec: https://asgi.readthedocs.io/en/latest/specs/www.html
"""

from typing import Any, Awaitable, Callable, MutableMapping

__all__ = ["Scope", "Message", "Receive", "Send", "ASGIApp"]

# ASGI Scope - connection metadata
Scope = MutableMapping[str, Any]

# ASGI Message - sent/received data
Message = MutableMapping[str, Any]

# ASGI Receive - callable to receive messages
Receive = Callable[[], Awaitable[Message]]

# ASGI Send - callable to send messages
Send = Callable[[Message], Awaitable[None]]

# ASGI Application - the main callable
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]
