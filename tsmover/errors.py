"""
Error kinds raised while moving a TypeScript file and rewriting imports.

``NoExportsFound`` and ``MoveFailed`` abort the whole operation.
``ParseFailure`` and ``WriteFailure`` are local to one workspace file; the
move coordinator records them in its report and carries on with the rest of
the batch.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

__all__ = [
    "TsMoverError",
    "NoExportsFound",
    "MoveFailed",
    "TargetExists",
    "ParseFailure",
    "WriteFailure",
]


class TsMoverError(Exception):
    """Base class for every error raised by :mod:`tsmover`."""


class NoExportsFound(TsMoverError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"No exported declarations found in {path}")
        self.path = path


class MoveFailed(TsMoverError):
    def __init__(self, source: Path, target: Path, reason: str) -> None:
        super().__init__(f"Could not move {source} to {target}: {reason}")
        self.source = source
        self.target = target
        self.reason = reason


class TargetExists(MoveFailed):
    def __init__(self, source: Path, target: Path) -> None:
        super().__init__(source, target, "target already exists")


class ParseFailure(TsMoverError):
    def __init__(self, path: Optional[Path], reason: str) -> None:
        where = str(path) if path is not None else "<source>"
        super().__init__(f"Could not parse {where}: {reason}")
        self.path = path
        self.reason = reason


class WriteFailure(TsMoverError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not write {path}: {reason}")
        self.path = path
        self.reason = reason
