# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for the StaticFiles ASGI application."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from urllib.parse import unquote

import pytest

from genro_send import ResolverConfigError, StaticFiles


# =============================================================================
# Test Fixtures
# =============================================================================


class MockSend:
    """Capture ASGI send messages for testing."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    async def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    @property
    def start_message(self) -> dict[str, Any]:
        """Get the http.response.start message."""
        return self.messages[0]

    @property
    def status(self) -> int:
        return self.start_message["status"]

    @property
    def headers(self) -> dict[bytes, bytes]:
        return dict(self.start_message["headers"])

    @property
    def body(self) -> bytes:
        return b"".join(m["body"] for m in self.messages if m["type"] == "http.response.body")


async def mock_receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b""}


def http_scope(
    target: str, method: str = "GET", headers: list[tuple[bytes, bytes]] | None = None
) -> dict[str, Any]:
    """Scope as an ASGI server builds it: decoded ``path``, encoded ``raw_path``."""
    return {
        "type": "http",
        "method": method,
        "path": unquote(target),
        "raw_path": target.encode("latin-1"),
        "headers": headers or [],
    }


class FallbackApp:
    """ASGI app recording the scopes it receives."""

    def __init__(self) -> None:
        self.scopes: list[dict[str, Any]] = []

    async def __call__(self, scope: dict[str, Any], receive: Any, send: Any) -> None:
        self.scopes.append(scope)
        if scope["type"] == "http":
            await send({"type": "http.response.start", "status": 299, "headers": []})
            await send({"type": "http.response.body", "body": b"fallback"})


@pytest.fixture
def public(tmp_path: Path) -> Path:
    tmp_path = tmp_path.resolve()
    (tmp_path / "index.html").write_text("<h1>home</h1>")
    (tmp_path / "app.js").write_text("console.log(1);")
    (tmp_path / "app.js.br").write_bytes(b"BRDATA")
    (tmp_path / ".secret").write_text("x")
    (tmp_path / "docs").mkdir()
    (tmp_path / "big.bin").write_bytes(b"z" * 150_000)
    return tmp_path


# =============================================================================
# Tests
# =============================================================================


class TestStaticFilesInit:
    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Directory does not exist"):
            StaticFiles(tmp_path / "nope")

    def test_invalid_options(self, public: Path) -> None:
        with pytest.raises(ResolverConfigError):
            StaticFiles(public, extensions=[1])

    def test_root_option_rejected(self, public: Path) -> None:
        with pytest.raises(ResolverConfigError, match="root"):
            StaticFiles(public, root="/elsewhere")

    def test_repr(self, public: Path) -> None:
        assert "StaticFiles(directory=" in repr(StaticFiles(public))


class TestStaticFilesServe:
    @pytest.mark.asyncio
    async def test_serves_file(self, public: Path) -> None:
        app = StaticFiles(public, max_age=60_000)
        send = MockSend()
        await app(http_scope("/app.js"), mock_receive, send)
        assert send.status == 200
        assert send.headers[b"content-type"] == b"application/javascript; charset=utf-8"
        assert send.headers[b"content-length"] == b"15"
        assert send.headers[b"cache-control"] == b"max-age=60"
        assert b"last-modified" in send.headers
        assert send.body == b"console.log(1);"

    @pytest.mark.asyncio
    async def test_serves_brotli_variant(self, public: Path) -> None:
        app = StaticFiles(public)
        send = MockSend()
        scope = http_scope("/app.js", headers=[(b"accept-encoding", b"br, gzip")])
        await app(scope, mock_receive, send)
        assert send.status == 200
        assert send.headers[b"content-encoding"] == b"br"
        assert send.headers[b"content-length"] == b"6"
        assert send.body == b"BRDATA"

    @pytest.mark.asyncio
    async def test_streams_in_chunks(self, public: Path) -> None:
        app = StaticFiles(public)
        send = MockSend()
        await app(http_scope("/big.bin"), mock_receive, send)
        body_messages = [m for m in send.messages if m["type"] == "http.response.body"]
        assert len(body_messages) > 2
        assert body_messages[0]["more_body"] is True
        assert body_messages[-1] == {"type": "http.response.body", "body": b""}
        assert len(send.body) == 150_000

    @pytest.mark.asyncio
    async def test_head_has_no_body(self, public: Path) -> None:
        app = StaticFiles(public)
        send = MockSend()
        await app(http_scope("/app.js", method="HEAD"), mock_receive, send)
        assert send.status == 200
        assert send.headers[b"content-length"] == b"15"
        assert send.body == b""

    @pytest.mark.asyncio
    async def test_index(self, public: Path) -> None:
        app = StaticFiles(public, index="index.html")
        send = MockSend()
        await app(http_scope("/"), mock_receive, send)
        assert send.status == 200
        assert send.body == b"<h1>home</h1>"


class TestStaticFilesEncodedPaths:
    @pytest.mark.asyncio
    async def test_percent_in_filename(self, public: Path) -> None:
        (public / "100%.txt").write_text("full")
        send = MockSend()
        await StaticFiles(public)(http_scope("/100%25.txt"), mock_receive, send)
        assert send.status == 200
        assert send.body == b"full"

    @pytest.mark.asyncio
    async def test_literal_escape_not_decoded_twice(self, public: Path) -> None:
        (public / "a%20b.txt").write_text("literal")
        (public / "a b.txt").write_text("space")
        send = MockSend()
        await StaticFiles(public)(http_scope("/a%2520b.txt"), mock_receive, send)
        assert send.body == b"literal"

    @pytest.mark.asyncio
    async def test_encoded_space(self, public: Path) -> None:
        (public / "a b.txt").write_text("space")
        send = MockSend()
        await StaticFiles(public)(http_scope("/a%20b.txt"), mock_receive, send)
        assert send.body == b"space"

    @pytest.mark.asyncio
    async def test_without_raw_path(self, public: Path) -> None:
        (public / "100%.txt").write_text("full")
        scope = http_scope("/100%25.txt")
        del scope["raw_path"]
        send = MockSend()
        await StaticFiles(public)(scope, mock_receive, send)
        assert send.status == 200
        assert send.body == b"full"


class TestStaticFilesErrors:
    @pytest.mark.asyncio
    async def test_not_found(self, public: Path) -> None:
        send = MockSend()
        await StaticFiles(public)(http_scope("/missing.txt"), mock_receive, send)
        assert send.status == 404
        assert send.headers[b"content-type"] == b"text/plain; charset=utf-8"
        assert send.body == b"404 Not found"

    @pytest.mark.asyncio
    async def test_bad_request(self, public: Path) -> None:
        send = MockSend()
        await StaticFiles(public)(http_scope("/bad%zz"), mock_receive, send)
        assert send.status == 400
        assert send.body == b"400 failed to decode"

    @pytest.mark.asyncio
    async def test_traversal(self, public: Path) -> None:
        send = MockSend()
        await StaticFiles(public)(http_scope("/../etc/passwd"), mock_receive, send)
        assert send.status == 403

    @pytest.mark.asyncio
    async def test_hidden_is_404_standalone(self, public: Path) -> None:
        send = MockSend()
        await StaticFiles(public)(http_scope("/.secret"), mock_receive, send)
        assert send.status == 404

    @pytest.mark.asyncio
    async def test_error_discards_encoding_header(self, public: Path) -> None:
        (public / "gone.js.br").mkdir()
        send = MockSend()
        scope = http_scope("/gone.js", headers=[(b"accept-encoding", b"br")])
        await StaticFiles(public)(scope, mock_receive, send)
        assert send.status == 404
        assert b"content-encoding" not in send.headers

    @pytest.mark.asyncio
    async def test_method_not_allowed(self, public: Path) -> None:
        send = MockSend()
        await StaticFiles(public)(http_scope("/app.js", method="POST"), mock_receive, send)
        assert send.status == 405
        assert send.headers[b"allow"] == b"GET, HEAD"


class TestStaticFilesFallthrough:
    @pytest.mark.asyncio
    async def test_hidden_falls_through(self, public: Path) -> None:
        fallback = FallbackApp()
        send = MockSend()
        await StaticFiles(public, app=fallback)(http_scope("/.secret"), mock_receive, send)
        assert send.status == 299
        assert len(fallback.scopes) == 1

    @pytest.mark.asyncio
    async def test_directory_falls_through(self, public: Path) -> None:
        fallback = FallbackApp()
        send = MockSend()
        await StaticFiles(public, app=fallback)(http_scope("/docs"), mock_receive, send)
        assert send.body == b"fallback"

    @pytest.mark.asyncio
    async def test_post_falls_through(self, public: Path) -> None:
        fallback = FallbackApp()
        send = MockSend()
        await StaticFiles(public, app=fallback)(
            http_scope("/app.js", method="POST"), mock_receive, send
        )
        assert send.status == 299

    @pytest.mark.asyncio
    async def test_not_found_does_not_fall_through(self, public: Path) -> None:
        fallback = FallbackApp()
        send = MockSend()
        await StaticFiles(public, app=fallback)(http_scope("/missing"), mock_receive, send)
        assert send.status == 404
        assert fallback.scopes == []

    @pytest.mark.asyncio
    async def test_non_http_scope(self, public: Path) -> None:
        fallback = FallbackApp()
        send = MockSend()
        await StaticFiles(public, app=fallback)({"type": "lifespan"}, mock_receive, send)
        assert fallback.scopes == [{"type": "lifespan"}]
        assert send.messages == []

    @pytest.mark.asyncio
    async def test_non_http_scope_standalone(self, public: Path) -> None:
        send = MockSend()
        await StaticFiles(public)({"type": "websocket", "path": "/"}, mock_receive, send)
        assert send.messages == []
