"""Directory scanning helpers that group image files into sprite pairs."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Sequence

from .errors import DirectoryUnreadableError


logger = logging.getLogger(__name__)

DEFAULT_PRIMARY_PATTERN = re.compile(r"^([a-z0-9]+)\.(jpg|jpeg|jpe|png|gif)$", re.IGNORECASE)
DEFAULT_SECONDARY_PATTERN = re.compile(
    r"^([a-z0-9]+)_over\.(jpg|jpeg|jpe|png|gif)$", re.IGNORECASE
)


@dataclass(frozen=True, slots=True)
class ImagePair:
    """A default-state image and the hover-state image stacked under it.

    ``primary`` is overwritten with the sprite; ``secondary`` is deleted.
    """

    primary: Path
    secondary: Path

    def __post_init__(self) -> None:
        for name in ("primary", "secondary"):
            value = getattr(self, name)
            if value is None or str(value) == "":
                raise ValueError(f"ImagePair.{name} must be a non-empty path")
            object.__setattr__(self, name, Path(value))
        if self.primary == self.secondary:
            raise ValueError(f"ImagePair paths must differ (got {self.primary} twice)")

    @classmethod
    def coerce(cls, value: "ImagePair | Sequence[str | os.PathLike[str]]") -> "ImagePair":
        if isinstance(value, ImagePair):
            return value
        if isinstance(value, (str, bytes, os.PathLike)) or len(value) != 2:
            raise ValueError(f"Expected a (primary, secondary) pair, got {value!r}")
        primary, secondary = value
        return cls(primary, secondary)


def _compile(pattern: re.Pattern[str] | str) -> re.Pattern[str]:
    compiled = re.compile(pattern, re.IGNORECASE) if isinstance(pattern, str) else pattern
    if compiled.groups < 1:
        raise ValueError(f"Pattern {compiled.pattern!r} needs a capture group for the base name")
    return compiled


@dataclass(frozen=True, slots=True)
class PatternRule:
    primary: re.Pattern[str]
    secondary: re.Pattern[str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "primary", _compile(self.primary))
        object.__setattr__(self, "secondary", _compile(self.secondary))

    @classmethod
    def from_strings(cls, primary: str | None = None, secondary: str | None = None) -> "PatternRule":
        return cls(
            primary=primary if primary else DEFAULT_PRIMARY_PATTERN,
            secondary=secondary if secondary else DEFAULT_SECONDARY_PATTERN,
        )

    def classify(self, name: str) -> tuple[int, str] | None:
        """Return ``(slot, base_key)`` for ``name`` or ``None`` when it matches neither."""

        match = self.primary.search(name)
        if match:
            return 1, match.group(1)
        match = self.secondary.search(name)
        if match:
            return 2, match.group(1)
        return None


DEFAULT_PATTERN_RULE = PatternRule(DEFAULT_PRIMARY_PATTERN, DEFAULT_SECONDARY_PATTERN)


def discover_pairs(
    directory: Path,
    rule: PatternRule = DEFAULT_PATTERN_RULE,
    *,
    on_unpaired: Callable[[str, Path], None] | None = None,
) -> List[ImagePair]:
    """Group the files of ``directory`` into pairs keyed by their base name.

    Keys missing either side are skipped and logged; ``on_unpaired`` receives
    the key and the one path that was found.
    """

    directory = Path(directory).expanduser()
    if not directory.is_dir():
        raise DirectoryUnreadableError(f"Unable to open directory {directory}", directory)
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        raise DirectoryUnreadableError(f"Unable to open directory {directory}: {exc}", directory) from exc

    slots: Dict[str, List[Path | None]] = {}
    for path in entries:
        if not path.is_file():
            continue
        classified = rule.classify(path.name)
        if classified is None:
            logger.debug("Ignoring %s (matches neither pattern)", path.name)
            continue
        slot, key = classified
        logger.debug("Matched %s as slot %s key=%s", path.name, slot, key)
        slots.setdefault(key, [None, None])[slot - 1] = path

    pairs: List[ImagePair] = []
    for key, (primary, secondary) in slots.items():
        if primary is None or secondary is None:
            found = primary or secondary
            missing = "secondary" if secondary is None else "primary"
            logger.warning("Skipping %r: no matching %s image for %s", key, missing, found)
            if on_unpaired is not None:
                on_unpaired(key, found)
            continue
        pairs.append(ImagePair(primary, secondary))
    logger.debug("Discovered %s pair(s) in %s", len(pairs), directory)
    return pairs
