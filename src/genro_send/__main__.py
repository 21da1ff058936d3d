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
genro-send CLI entry point.

Usage:
    genro-send serve ./public                         # Serve a directory
    genro-send serve ./public --index index.html --ext html,htm
    genro-send serve --config genro-send.toml --port 9000

Options given on the command line win over the config file.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from .config import ConfigError, find_config_file, load_config, options_from_config
from .exceptions import ResolverConfigError
from .static import StaticFiles

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="genro-send serve", description="Serve static files")
    parser.add_argument("directory", nargs="?", help="Directory to serve (default: config root)")
    parser.add_argument("--config", help="TOML config file")
    parser.add_argument("--host", help=f"Server host (default: {DEFAULT_HOST})")
    parser.add_argument("--port", type=int, help=f"Server port (default: {DEFAULT_PORT})")
    parser.add_argument("--index", help="Index file for directory requests")
    parser.add_argument("--maxage", type=int, help="Cache max-age in milliseconds")
    parser.add_argument("--immutable", action="store_true", default=None, help="Add immutable directive")
    parser.add_argument("--hidden", action="store_true", default=None, help="Serve dot-files")
    parser.add_argument("--no-format", dest="format", action="store_false", default=None,
                        help="Do not serve index for directories without trailing slash")
    parser.add_argument("--ext", help="Comma-separated fallback extensions, e.g. html,htm")
    parser.add_argument("--no-brotli", dest="brotli", action="store_false", default=None,
                        help="Disable .br variants")
    parser.add_argument("--no-gzip", dest="gzip", action="store_false", default=None,
                        help="Disable .gz variants")
    parser.add_argument("--log-level", default="INFO", help="Log level (default: INFO)")
    return parser


def build_app(argv: list[str]) -> tuple[StaticFiles, str, int]:
    """Parse argv and build the StaticFiles app with host and port.

    Raises:
        ConfigError: bad config file or no directory given.
    """
    args = _parser().parse_args(argv)

    config_path = args.config or find_config_file()
    config: dict[str, Any] = load_config(config_path) if config_path else {}
    server = config.get("server", {})

    overrides: dict[str, Any] = {}
    if args.index is not None:
        overrides["index"] = args.index
    if args.maxage is not None:
        overrides["max_age"] = args.maxage
    if args.ext is not None:
        overrides["extensions"] = tuple(e.strip() for e in args.ext.split(",") if e.strip())
    for name in ("immutable", "hidden", "format", "brotli", "gzip"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value

    options = options_from_config(config, **overrides)
    directory = args.directory or options.root
    if not directory:
        raise ConfigError("No directory given and no 'send.root' in config")

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    params = {name: getattr(options, name) for name in options.__dataclass_fields__}
    params.pop("root")
    app = StaticFiles(directory, **params)
    host = args.host or server.get("host", DEFAULT_HOST)
    port = args.port or int(server.get("port", DEFAULT_PORT))
    return app, host, port


def cmd_serve(argv: list[str]) -> int:
    """Run the static file server on uvicorn."""
    try:
        app, host, port = build_app(argv)
    except (ConfigError, ResolverConfigError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    import uvicorn

    print("genro-send starting...", flush=True)
    print(f"Directory: {app.directory}", flush=True)
    print(f"Server: http://{host}:{port}", flush=True)
    print(flush=True)

    try:
        uvicorn.run(app, host=host, port=port, log_config=None)
    except KeyboardInterrupt:
        print("\nShutdown.")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)

    if "--version" in argv or "-v" in argv:
        from . import __version__

        print(f"genro-send {__version__}")
        return 0

    if not argv or argv[0] in ("--help", "-h"):
        print("Usage: genro-send serve [directory] [options]")
        print()
        print("Run 'genro-send serve --help' for the list of options.")
        return 0

    subcommand = argv[0]
    if subcommand != "serve":
        print(f"Error: unknown subcommand '{subcommand}'", file=sys.stderr)
        return 1

    return cmd_serve(argv[1:])


if __name__ == "__main__":
    sys.exit(main())
