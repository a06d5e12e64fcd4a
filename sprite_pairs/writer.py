"""Persist a composited sprite and consume its hover-state source."""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from PIL import Image

from .errors import PathNotWritableError, WriteFailedError
from .image_codec import ImageFormat, encode_image


logger = logging.getLogger(__name__)

NEW_FILE_MODE = 0o644


def _is_writable(path: Path) -> bool:
    return os.access(path, os.W_OK)


def _atomic_write_bytes(data: bytes, path: Path) -> None:
    """Write ``data`` to a temp file beside ``path`` and swap it in.

    The existing file keeps its permission bits; on failure it is untouched
    and the temp file is removed.
    """

    mode = path.stat().st_mode & 0o7777 if path.is_file() else NEW_FILE_MODE
    temp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb",
            prefix=f".{path.name}.",
            suffix=".tmp",
            dir=path.parent,
            delete=False,
        ) as f:
            temp_path = Path(f.name)
            f.write(data)
        temp_path.chmod(mode)
        # replace() overwrites an existing file on all platforms
        temp_path.replace(path)
    except OSError:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise


def write_sprite(
    image: Image.Image,
    output_path: Path,
    secondary_path: Path,
    fmt: ImageFormat,
) -> Path:
    """Encode ``image`` as ``fmt`` over ``output_path`` then delete ``secondary_path``.

    The output format is never inferred from ``output_path``; a PNG sprite
    written over ``logo.jpg`` keeps the ``.jpg`` name. The primary is only
    replaced once the whole sprite is on disk, and nothing is deleted unless
    that succeeded. A secondary that is already gone is not an error.
    """

    output_path = Path(output_path)
    secondary_path = Path(secondary_path)
    if output_path.exists() and not _is_writable(output_path):
        raise PathNotWritableError(f"{output_path} is not writable!", output_path)

    data = encode_image(image, fmt)
    try:
        _atomic_write_bytes(data, output_path)
    except OSError as exc:
        raise WriteFailedError(f"Cannot write {output_path}: {exc}", output_path) from exc
    logger.debug("Wrote %s bytes=%s format=%s", output_path, len(data), fmt.value)

    try:
        secondary_path.unlink(missing_ok=True)
    except OSError as exc:
        raise WriteFailedError(f"Cannot delete {secondary_path}: {exc}", secondary_path) from exc
    logger.debug("Deleted %s", secondary_path)
    return output_path
