"""Error types raised while pairing, compositing and writing sprites."""
from __future__ import annotations

from os import PathLike
from pathlib import Path


class SpriteError(RuntimeError):
    """Base class for every failure that aborts a sprite batch.

    ``exit_code`` is what the CLI returns when the error ends a run.
    """

    exit_code = 1

    def __init__(self, message: str, path: str | PathLike[str] | None = None) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class DirectoryUnreadableError(SpriteError):
    exit_code = 3


class UnreadableFileError(SpriteError):
    exit_code = 4


class UnrecognizedFormatError(SpriteError):
    exit_code = 5


class CompositionFailedError(SpriteError):
    exit_code = 6


class PathNotWritableError(SpriteError):
    exit_code = 7


class EncodeFailedError(SpriteError):
    exit_code = 8


class WriteFailedError(SpriteError):
    exit_code = 9
