# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Tests for the genro-send command line."""

from pathlib import Path

import pytest

from genro_send import __version__
from genro_send.__main__ import build_app, main
from genro_send.config import ConfigError


@pytest.fixture(autouse=True)
def no_config_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("GENRO_SEND_CONFIG", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


class TestBuildApp:
    def test_directory_and_flags(self, tmp_path: Path) -> None:
        app, host, port = build_app(
            [str(tmp_path), "--index", "index.html", "--ext", "html, htm",
             "--maxage", "60000", "--immutable", "--no-brotli", "--port", "9001"]
        )
        options = app.resolver.options
        assert app.directory == tmp_path.resolve()
        assert options.index == "index.html"
        assert options.extensions == ("html", "htm")
        assert options.max_age == 60000
        assert options.immutable is True
        assert options.brotli is False
        assert options.gzip is True
        assert (host, port) == ("127.0.0.1", 9001)

    def test_config_file(self, tmp_path: Path) -> None:
        site = tmp_path / "site"
        site.mkdir()
        config = tmp_path / "conf.toml"
        config.write_text(
            f'[server]\nhost = "0.0.0.0"\nport = 8123\n\n[send]\nroot = "{site.as_posix()}"\n'
            'hidden = true\n'
        )
        app, host, port = build_app(["--config", str(config), "--no-format"])
        assert app.directory == site.resolve()
        assert app.resolver.options.hidden is True
        assert app.resolver.options.format is False
        assert (host, port) == ("0.0.0.0", 8123)

    def test_no_directory(self) -> None:
        with pytest.raises(ConfigError, match="No directory"):
            build_app([])


class TestMain:
    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--version"]) == 0
        assert __version__ in capsys.readouterr().out

    def test_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main([]) == 0
        assert "Usage" in capsys.readouterr().out

    def test_unknown_subcommand(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["run"]) == 1
        assert "unknown subcommand" in capsys.readouterr().err

    def test_serve_missing_directory(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert main(["serve", str(tmp_path / "nope")]) == 1
        assert "Directory does not exist" in capsys.readouterr().err
