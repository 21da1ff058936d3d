# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for path decoding and containment helpers."""

import os

import pytest

from genro_send.exceptions import HTTPBadRequest, PathTraversalError
from genro_send.paths import decode_path, is_hidden, resolve_path, strip_root

ROOT = os.path.normpath("/srv/www")


class TestStripRoot:
    def test_leading_slash(self) -> None:
        assert strip_root("/a/b") == "a/b"

    def test_only_one_slash(self) -> None:
        assert strip_root("//a") == "/a"

    def test_relative(self) -> None:
        assert strip_root("a/b") == "a/b"

    def test_root(self) -> None:
        assert strip_root("/") == ""


class TestDecodePath:
    def test_plain(self) -> None:
        assert decode_path("docs/index.html") == "docs/index.html"

    def test_escapes(self) -> None:
        assert decode_path("a%20b/%C3%A8.txt") == "a b/è.txt"

    def test_encoded_slash_decoded(self) -> None:
        assert decode_path("a%2Fb") == "a/b"

    @pytest.mark.parametrize("value", ["%", "%2", "%zz", "a%g0", "%E0%A4%A"])
    def test_malformed(self, value: str) -> None:
        with pytest.raises(HTTPBadRequest) as exc_info:
            decode_path(value)
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "failed to decode"

    def test_invalid_utf8(self) -> None:
        with pytest.raises(HTTPBadRequest) as exc_info:
            decode_path("%FF")
        assert isinstance(exc_info.value.cause, UnicodeDecodeError)


class TestResolvePath:
    def test_join(self) -> None:
        assert resolve_path(ROOT, "css/app.css") == os.path.join(ROOT, "css", "app.css")

    def test_empty_is_root(self) -> None:
        assert resolve_path(ROOT, "") == ROOT

    def test_normalizes_inside_root(self) -> None:
        assert resolve_path(ROOT, "a/./b/../c.txt") == os.path.join(ROOT, "a", "c.txt")

    @pytest.mark.parametrize("value", ["..", "../etc/passwd", "a/../../b", "a/b/../../../c"])
    def test_traversal(self, value: str) -> None:
        with pytest.raises(PathTraversalError) as exc_info:
            resolve_path(ROOT, value)
        assert exc_info.value.status_code == 403
        assert exc_info.value.path == value

    @pytest.mark.parametrize("value", ["/etc/passwd", "\\windows", "C:\\boot.ini"])
    def test_absolute(self, value: str) -> None:
        with pytest.raises(HTTPBadRequest, match="Malicious Path"):
            resolve_path(ROOT, value)

    def test_nul_byte(self) -> None:
        with pytest.raises(HTTPBadRequest, match="Malicious Path"):
            resolve_path(ROOT, "a\0b")

    def test_dotdot_in_name_is_fine(self) -> None:
        assert resolve_path(ROOT, "a..b") == os.path.join(ROOT, "a..b")


class TestIsHidden:
    def test_visible(self) -> None:
        assert is_hidden(ROOT, os.path.join(ROOT, "a", "b.txt")) is False

    def test_hidden_file(self) -> None:
        assert is_hidden(ROOT, os.path.join(ROOT, "a", ".b")) is True

    def test_hidden_directory(self) -> None:
        assert is_hidden(ROOT, os.path.join(ROOT, ".git", "config")) is True

    def test_root_itself(self) -> None:
        assert is_hidden(ROOT, ROOT) is False

    def test_only_below_root(self) -> None:
        root = os.path.normpath("/home/.user/site")
        assert is_hidden(root, os.path.join(root, "page.html")) is False
