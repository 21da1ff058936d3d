# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Resolver options.

SendOptions is the explicit, typed configuration of a StaticResolver. Every
field has a stated default; nothing is coerced from truthiness. Invalid
values raise ResolverConfigError when the options are built, so a bad
configuration never reaches request handling.

    SendOptions(root="./public", index="index.html", max_age=86_400_000,
                immutable=True, extensions=("html", "htm"))

``max_age`` is in milliseconds; ``Cache-Control`` carries it in seconds.
"""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

from .exceptions import ResolverConfigError

if TYPE_CHECKING:
    from .context import SendContext

__all__ = ["HeaderCustomizer", "SendOptions"]


class HeaderCustomizer(Protocol):
    """Hook called once a file is resolved, before default headers are set.

    Headers set here win over the resolver defaults, except Content-Length.
    """

    def __call__(self, response: SendContext, path: str, stats: os.stat_result) -> None: ...


def _normalize_extensions(value: Any) -> tuple[str, ...] | None:
    if value is None or value is False:
        return None
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
        raise ResolverConfigError("option extensions must be array of strings or false")
    for ext in value:
        if not isinstance(ext, str):
            raise ResolverConfigError("option extensions must be array of strings or false")
    return tuple(value)


@dataclass(frozen=True)
class SendOptions:
    """Validated resolver configuration.

    Attributes:
        root: Directory files are served from. None means the process cwd.
        index: File served for directory requests.
        max_age: Cache lifetime in milliseconds.
        immutable: Add the ``immutable`` Cache-Control directive.
        hidden: Serve dot-files and files inside dot-directories.
        format: Serve the index for a directory requested without trailing slash.
        extensions: Suffixes tried, in order, for extensionless paths.
        brotli: Serve ``.br`` siblings to clients accepting br.
        gzip: Serve ``.gz`` siblings to clients accepting gzip.
        set_headers: Optional HeaderCustomizer.
    """

    root: str | Path | None = None
    index: str | None = None
    max_age: int = 0
    immutable: bool = False
    hidden: bool = False
    format: bool = True
    extensions: tuple[str, ...] | None = None
    brotli: bool = True
    gzip: bool = True
    set_headers: HeaderCustomizer | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.set_headers is not None and not callable(self.set_headers):
            raise ResolverConfigError("option setHeaders must be function")
        if isinstance(self.max_age, bool) or not isinstance(self.max_age, int):
            raise ResolverConfigError("option max_age must be an integer (milliseconds)")
        if self.max_age < 0:
            raise ResolverConfigError("option max_age must not be negative")
        if self.index is not None and not isinstance(self.index, str):
            raise ResolverConfigError("option index must be a string")
        object.__setattr__(self, "extensions", _normalize_extensions(self.extensions))

    @property
    def resolved_root(self) -> str:
        """Absolute, normalized root directory."""
        root = Path(self.root) if self.root else Path.cwd()
        return os.path.normpath(str(root.resolve()))

    @classmethod
    def build(cls, options: SendOptions | None = None, **kwargs: Any) -> SendOptions:
        """Return options, or new options with kwargs applied on top.

        Example:
            >>> SendOptions.build(index="index.html").index
            'index.html'
        """
        if options is None:
            return cls(**kwargs)
        if not kwargs:
            return options
        values = {name: getattr(options, name) for name in cls.__dataclass_fields__}
        values.update(kwargs)
        return cls(**values)
