"""High-level sprite batch pipeline: decode, stack, write, delete."""
from __future__ import annotations

import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Sequence

from PIL import Image

from .compositor import compose_sprite
from .errors import SpriteError
from .file_scanner import DEFAULT_PATTERN_RULE, ImagePair, PatternRule
from .image_codec import DEFAULT_OUTPUT_FORMAT, ImageFormat, decode_image, parse_output_format
from .writer import write_sprite


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SpriteOptions:
    output_format: ImageFormat = DEFAULT_OUTPUT_FORMAT
    keep_going: bool = False
    rule: PatternRule = DEFAULT_PATTERN_RULE
    dry_run: bool = False

    def __post_init__(self) -> None:
        self.output_format = parse_output_format(self.output_format)


@dataclass(slots=True)
class PairResult:
    pair: ImagePair
    output_path: Path | None = None
    size: tuple[int, int] | None = None
    error: SpriteError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class BatchResult:
    results: List[PairResult] = field(default_factory=list)

    @property
    def succeeded(self) -> List[PairResult]:
        return [result for result in self.results if result.ok]

    @property
    def failed(self) -> List[PairResult]:
        return [result for result in self.results if not result.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


def generate_sprite(first_path: Path, second_path: Path) -> Image.Image:
    """Decode both frames and return the stacked sprite.

    Decoded frames are closed before returning, including when the second
    frame fails to decode.
    """

    # Image.__exit__ only closes the file pointer, so release pixel data explicitly.
    with ExitStack() as stack:
        first = decode_image(first_path)
        stack.callback(first.close)
        second = decode_image(second_path)
        stack.callback(second.close)
        return compose_sprite(first, second)


def process_pair(pair: ImagePair, output_format: ImageFormat = DEFAULT_OUTPUT_FORMAT) -> PairResult:
    sprite = generate_sprite(pair.primary, pair.secondary)
    try:
        size = sprite.size
        output_path = write_sprite(sprite, pair.primary, pair.secondary, output_format)
    finally:
        sprite.close()
    logger.debug("Processed %s <- %s size=%s", pair.primary, pair.secondary, size)
    return PairResult(pair=pair, output_path=output_path, size=size)


def batch_sprites(
    pairs: Iterable[ImagePair | Sequence[str]],
    output_format: ImageFormat | str = DEFAULT_OUTPUT_FORMAT,
    *,
    keep_going: bool = False,
    on_result: Callable[[PairResult], None] | None = None,
) -> BatchResult:
    """Process ``pairs`` strictly in order.

    By default the first failure propagates and stops the batch; pairs
    already processed stay written. With ``keep_going`` failures are recorded
    in the result and the remaining pairs still run. ``on_result`` sees every
    pair's outcome, including the failure that stops a fail-fast batch.
    """

    fmt = parse_output_format(output_format)
    batch = BatchResult()
    for raw in pairs:
        pair = ImagePair.coerce(raw)
        try:
            result = process_pair(pair, fmt)
        except SpriteError as exc:
            result = PairResult(pair=pair, error=exc)
            if on_result is not None:
                on_result(result)
            if not keep_going:
                raise
            logger.warning("Sprite %s failed: %s", pair.primary, exc)
            batch.results.append(result)
            continue
        if on_result is not None:
            on_result(result)
        batch.results.append(result)
    logger.debug(
        "Batch finished succeeded=%s failed=%s format=%s",
        len(batch.succeeded),
        len(batch.failed),
        fmt.value,
    )
    return batch
