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
Configuration file support for genro-send.

Options can be given in a TOML file instead of code or CLI flags. Key
constraints:
- TOML keys CANNOT contain underscore (_); use single words (``maxage``)
- String values may reference environment variables: ``${VAR}`` (required)
  or ``${VAR:-default}``

Example TOML structure:
    [server]
    host = "127.0.0.1"
    port = 8080

    [send]
    root = "${SITE_ROOT:-./public}"
    index = "index.html"
    maxage = 86400000
    immutable = true
    extensions = ["html", "htm"]

``options_from_config`` turns the ``[send]`` table into SendOptions.
"""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path
from typing import Any

from .options import SendOptions

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

__all__ = [
    "ConfigError",
    "find_config_file",
    "load_config",
    "options_from_config",
    "validate_keys",
]

# TOML key -> SendOptions field
OPTION_KEYS: dict[str, str] = {
    "root": "root",
    "index": "index",
    "maxage": "max_age",
    "immutable": "immutable",
    "hidden": "hidden",
    "format": "format",
    "extensions": "extensions",
    "brotli": "brotli",
    "gzip": "gzip",
}


class ConfigError(Exception):
    """Configuration error."""


_ENV_REF = re.compile(r"\$\{(?P<name>[^}:]+)(?::-(?P<default>[^}]*))?\}")


def validate_keys(data: Any, path: str = "") -> None:
    """Reject keys containing ``_`` anywhere in the tree.

    Raises:
        ConfigError: naming the dotted path of the first offending key.
    """
    if isinstance(data, list):
        for i, item in enumerate(data):
            validate_keys(item, f"{path}[{i}]")
        return
    if not isinstance(data, dict):
        return
    for key, value in data.items():
        dotted = f"{path}.{key}" if path else key
        if "_" in key:
            raise ConfigError(
                f"Invalid key '{dotted}': use single words without '_' (e.g. 'maxage')"
            )
        validate_keys(value, dotted)


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Read a TOML config file.

    Keys are validated before environment references in values are
    expanded.

    Raises:
        ConfigError: missing file, TOML syntax error, bad key or unset
            required environment variable.
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse TOML {path}: {e}") from e

    validate_keys(data)
    return _expand(data)


def _expand(value: Any) -> Any:
    if isinstance(value, str):
        return _ENV_REF.sub(_lookup_env, value)
    if isinstance(value, dict):
        return {key: _expand(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand(item) for item in value]
    return value


def _lookup_env(match: re.Match[str]) -> str:
    name, default = match.group("name"), match.group("default")
    value = os.environ.get(name, default)
    if value is None:
        raise ConfigError(f"Required environment variable not set: {name}")
    return value


def options_from_config(config: dict[str, Any], **overrides: Any) -> SendOptions:
    """
    Build SendOptions from the ``[send]`` table of a loaded config.

    Args:
        config: Result of load_config (or any dict with a "send" table).
        **overrides: SendOptions fields that win over the file.

    Raises:
        ConfigError: unknown key in ``[send]``.
        ResolverConfigError: invalid option values.
    """
    section = config.get("send", {})
    if not isinstance(section, dict):
        raise ConfigError("[send] must be a table")
    values: dict[str, Any] = {}
    for key, value in section.items():
        if key not in OPTION_KEYS:
            raise ConfigError(f"Unknown option 'send.{key}'")
        values[OPTION_KEYS[key]] = value
    if isinstance(values.get("extensions"), list):
        values["extensions"] = tuple(values["extensions"])
    values.update(overrides)
    return SendOptions(**values)


def find_config_file() -> Path | None:
    """First existing of $GENRO_SEND_CONFIG, ./genro-send.toml, ~/.config/genro-send/config.toml."""
    candidates = [Path.cwd() / "genro-send.toml", Path.home() / ".config" / "genro-send" / "config.toml"]
    explicit = os.environ.get("GENRO_SEND_CONFIG")
    if explicit:
        candidates.insert(0, Path(explicit))
    return next((path for path in candidates if path.is_file()), None)
