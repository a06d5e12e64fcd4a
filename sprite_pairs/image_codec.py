"""Decode/encode helpers for the three formats sprites are built from."""
from __future__ import annotations

import io
import logging
import os
from enum import Enum
from pathlib import Path
from typing import Dict

from PIL import Image

from .errors import EncodeFailedError, UnreadableFileError, UnrecognizedFormatError


logger = logging.getLogger(__name__)


class ImageFormat(Enum):
    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"

    @property
    def pillow_format(self) -> str:
        return self.name

    @property
    def suffix(self) -> str:
        return ".jpg" if self is ImageFormat.JPEG else f".{self.value}"


EXTENSION_FORMATS: Dict[str, ImageFormat] = {
    ".jpg": ImageFormat.JPEG,
    ".jpeg": ImageFormat.JPEG,
    ".jpe": ImageFormat.JPEG,
    ".png": ImageFormat.PNG,
    ".gif": ImageFormat.GIF,
}

_FORMAT_ALIASES: Dict[str, ImageFormat] = {
    "jpeg": ImageFormat.JPEG,
    "jpg": ImageFormat.JPEG,
    "png": ImageFormat.PNG,
    "gif": ImageFormat.GIF,
}

DEFAULT_OUTPUT_FORMAT = ImageFormat.PNG


def parse_output_format(value: ImageFormat | str) -> ImageFormat:
    if isinstance(value, ImageFormat):
        return value
    key = str(value).strip().lower().lstrip(".")
    try:
        return _FORMAT_ALIASES[key]
    except KeyError:
        raise ValueError(
            f"Unsupported output format {value!r} (expected jpeg, png or gif)"
        ) from None


def format_for_path(path: Path) -> ImageFormat:
    """Return the decoder for ``path`` based on its extension alone."""

    fmt = EXTENSION_FORMATS.get(path.suffix.lower())
    if fmt is None:
        raise UnrecognizedFormatError(f"Unable to recognize {path}'s image type", path)
    return fmt


def decode_image(path: Path) -> Image.Image:
    """Load ``path`` fully into memory and return the decoded image.

    The caller owns the returned image and should close it when done.
    """

    path = Path(path)
    if not path.is_file() or not os.access(path, os.R_OK):
        raise UnreadableFileError(f"Unable to read {path}", path)
    fmt = format_for_path(path)
    try:
        with Image.open(path, formats=[fmt.pillow_format]) as img:
            img.load()
            decoded = img.copy()
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise UnreadableFileError(f"Cannot open {path}: {exc}", path) from exc
    logger.debug("Decoded %s format=%s mode=%s size=%s", path, fmt.value, decoded.mode, decoded.size)
    return decoded


def encode_image(image: Image.Image, fmt: ImageFormat) -> bytes:
    working = image
    if fmt is ImageFormat.JPEG and image.mode not in {"RGB", "L", "CMYK"}:
        working = image.convert("RGB")
    buffer = io.BytesIO()
    try:
        working.save(buffer, format=fmt.pillow_format)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeFailedError(f"Cannot encode sprite as {fmt.value}: {exc}") from exc
    finally:
        if working is not image:
            working.close()
    data = buffer.getvalue()
    logger.debug("Encoded %s image size=%s bytes=%s", fmt.value, image.size, len(data))
    return data
