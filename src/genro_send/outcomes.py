# Copyright 2025 Softwell S.r.l.
# Licensed under the Apache License, Version 2.0

"""Resolution outcomes.

StaticResolver.resolve() always returns exactly one of:

    Resolved       a file was found; headers and body are set on the context
    NotApplicable  nothing to serve here, the caller falls through (falsy)
    Failed         the request must end with ``error.status_code``

Failures detected before or after an await are reported the same way.
Only configuration errors are raised instead of returned.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Union

from .exceptions import HTTPException

__all__ = ["Failed", "NotApplicable", "Resolved", "ResolutionOutcome"]


@dataclass(frozen=True)
class Resolved:
    """The request maps to ``path``.

    Attributes:
        path: Absolute path of the file served (with encoding suffix).
        stats: Stat of that file.
        encoding_suffix: ``""``, ``".br"`` or ``".gz"``.
    """

    path: str
    stats: os.stat_result
    encoding_suffix: str = ""


@dataclass(frozen=True)
class NotApplicable:
    """Nothing to serve: hidden file or directory without index."""

    reason: str = ""

    def __bool__(self) -> bool:
        return False


@dataclass(frozen=True)
class Failed:
    """Resolution failed with an HTTP error."""

    error: HTTPException

    @property
    def status_code(self) -> int:
        return self.error.status_code

    @property
    def cause(self) -> BaseException | None:
        return self.error.cause

    def __bool__(self) -> bool:
        return False


ResolutionOutcome = Union[Resolved, NotApplicable, Failed]
