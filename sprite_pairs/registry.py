"""Pair bookkeeping: explicit pair lists or pairs discovered in a directory."""
from __future__ import annotations

import logging
import os
from collections import abc
from pathlib import Path
from typing import Callable, Iterable, List, Sequence

from .errors import DirectoryUnreadableError
from .file_scanner import DEFAULT_PATTERN_RULE, ImagePair, PatternRule, discover_pairs
from .image_codec import DEFAULT_OUTPUT_FORMAT, ImageFormat, parse_output_format
from .processing import BatchResult, PairResult, batch_sprites


logger = logging.getLogger(__name__)

PairInput = ImagePair | Sequence[str | os.PathLike[str]]
UnpairedCallback = Callable[[str, Path], None]


class PairRegistry:
    """Ordered set of sprite pairs plus the format they are written in."""

    def __init__(
        self,
        pairs: Iterable[PairInput] | None = None,
        output_format: ImageFormat | str = DEFAULT_OUTPUT_FORMAT,
    ) -> None:
        self._pairs: List[ImagePair] = []
        self.output_format = parse_output_format(output_format)
        if pairs is not None:
            self.set_pairs(pairs)

    @classmethod
    def from_input(
        cls,
        value: str | os.PathLike[str] | Iterable[PairInput],
        rule: PatternRule = DEFAULT_PATTERN_RULE,
        output_format: ImageFormat | str = DEFAULT_OUTPUT_FORMAT,
        *,
        on_unpaired: UnpairedCallback | None = None,
    ) -> "PairRegistry":
        """Build a registry from either a list of pairs or a directory to scan."""

        registry = cls(output_format=output_format)
        if isinstance(value, (str, os.PathLike)):
            path = Path(value)
            if not path.is_dir():
                raise DirectoryUnreadableError(f"Unable to auto-detect {str(value)!r}", path)
            registry.set_directory(path, rule, on_unpaired=on_unpaired)
        elif isinstance(value, abc.Iterable):
            registry.set_pairs(value)
        else:
            raise DirectoryUnreadableError(f"Unable to auto-detect {value!r}")
        return registry

    @property
    def pairs(self) -> List[ImagePair]:
        return list(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def set_pairs(self, pairs: Iterable[PairInput]) -> None:
        self._pairs = [ImagePair.coerce(pair) for pair in pairs]

    def set_directory(
        self,
        directory: Path,
        rule: PatternRule = DEFAULT_PATTERN_RULE,
        *,
        on_unpaired: UnpairedCallback | None = None,
    ) -> None:
        self._pairs = discover_pairs(Path(directory), rule, on_unpaired=on_unpaired)
        logger.debug("Registry loaded %s pair(s) from %s", len(self._pairs), directory)

    def batch_sprites(
        self,
        *,
        keep_going: bool = False,
        on_result: Callable[[PairResult], None] | None = None,
    ) -> BatchResult:
        return batch_sprites(
            self._pairs,
            self.output_format,
            keep_going=keep_going,
            on_result=on_result,
        )
