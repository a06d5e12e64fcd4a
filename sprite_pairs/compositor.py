"""Vertical two-frame sprite compositing."""
from __future__ import annotations

import logging
from typing import Tuple

from PIL import Image

from .errors import CompositionFailedError


logger = logging.getLogger(__name__)

CANVAS_MODE = "RGB"
CANVAS_FILL: Tuple[int, int, int] = (0, 0, 0)


def sprite_size(first: Tuple[int, int], second: Tuple[int, int]) -> Tuple[int, int]:
    """Return the ``(width, height)`` of ``first`` stacked above ``second``."""

    return max(first[0], second[0]), first[1] + second[1]


def _as_truecolor(image: Image.Image) -> Image.Image:
    if image.mode == CANVAS_MODE:
        return image
    return image.convert(CANVAS_MODE)


def compose_sprite(first: Image.Image, second: Image.Image) -> Image.Image:
    """Stack ``first`` above ``second`` on a new truecolor canvas.

    Both frames are pasted at x=0 without alpha blending: source pixels
    replace the canvas outright and any columns right of a narrower frame
    keep ``CANVAS_FILL``. The inputs are left open for the caller to close.
    """

    width, height = sprite_size(first.size, second.size)
    if width <= 0 or height <= 0:
        raise CompositionFailedError(f"Unable to create sprite: invalid canvas size {width}x{height}")
    logger.debug(
        "compose_sprite first=%sx%s second=%sx%s canvas=%sx%s",
        first.width,
        first.height,
        second.width,
        second.height,
        width,
        height,
    )
    try:
        canvas = Image.new(CANVAS_MODE, (width, height), CANVAS_FILL)
    except (MemoryError, ValueError, OSError) as exc:
        raise CompositionFailedError(f"Unable to create sprite canvas {width}x{height}: {exc}") from exc
    try:
        for frame, offset_y in ((first, 0), (second, first.height)):
            if frame.width == 0 or frame.height == 0:
                continue
            source = _as_truecolor(frame)
            try:
                canvas.paste(source, (0, offset_y))
            finally:
                if source is not frame:
                    source.close()
    except (MemoryError, ValueError, OSError) as exc:
        canvas.close()
        raise CompositionFailedError(f"Unable to create sprite: {exc}") from exc
    return canvas
