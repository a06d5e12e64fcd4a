"""Command-line interface for hover-sprite batch generation."""
from __future__ import annotations

import argparse
import os
import re
from pathlib import Path

from .debug_log import setup_debug_logging
from .errors import SpriteError
from .file_scanner import PatternRule
from .image_codec import DEFAULT_OUTPUT_FORMAT
from .processing import PairResult, SpriteOptions
from .registry import PairRegistry


FORMAT_ENV = "SPRITE_PAIRS_FORMAT"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Stack each image over its _over counterpart into a single sprite. "
            "The primary file is overwritten and the _over file is deleted."
        )
    )
    parser.add_argument(
        "directory",
        nargs="?",
        type=Path,
        default=None,
        help="Folder to scan for name.ext / name_over.ext pairs",
    )
    parser.add_argument(
        "--pair",
        nargs=2,
        action="append",
        type=Path,
        default=None,
        metavar=("PRIMARY", "SECONDARY"),
        help="Explicit pair to merge (repeatable, instead of a folder)",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=("jpeg", "png", "gif"),
        default=os.environ.get(FORMAT_ENV, DEFAULT_OUTPUT_FORMAT.value).lower(),
        help="Encoding of the written sprite (default: png)",
    )
    parser.add_argument(
        "--primary-pattern",
        default=None,
        help="Regex for default-state files; group 1 is the base name",
    )
    parser.add_argument(
        "--secondary-pattern",
        default=None,
        help="Regex for hover-state files; group 1 is the base name",
    )
    parser.add_argument(
        "--keep-going",
        action="store_true",
        help="Continue with the next pair after a failure",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the pairs that would be merged without touching any file",
    )
    return parser


def _report_unpaired(key: str, path: Path) -> None:
    print(f"[SKIP] {path.name}: no partner for '{key}'")


def _report_result(result: PairResult) -> None:
    pair = result.pair
    if result.ok:
        width, height = result.size
        print(f"[OK] {pair.primary.name} <- {pair.secondary.name} ({width}x{height})")
    else:
        print(f"[FAIL] {pair.primary}: {result.error}")


def _build_registry(args: argparse.Namespace, options: SpriteOptions) -> PairRegistry:
    source = [tuple(pair) for pair in args.pair] if args.pair else args.directory
    return PairRegistry.from_input(
        source,
        options.rule,
        options.output_format,
        on_unpaired=_report_unpaired,
    )


def main(argv: list[str] | None = None) -> int:
    setup_debug_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.directory is None and not args.pair:
        parser.error("Pass a folder to scan or at least one --pair")
    if args.directory is not None and args.pair:
        parser.error("Pass either a folder or --pair options, not both")

    try:
        options = SpriteOptions(
            output_format=args.output_format,
            keep_going=args.keep_going,
            rule=PatternRule.from_strings(args.primary_pattern, args.secondary_pattern),
            dry_run=args.dry_run,
        )
    except (re.error, ValueError) as exc:
        parser.error(str(exc))

    try:
        registry = _build_registry(args, options)
    except ValueError as exc:
        parser.error(str(exc))
    except SpriteError as exc:
        print(f"[FAIL] {exc}")
        return exc.exit_code

    if not registry.pairs:
        print("No image pairs found.")
        return 0

    if options.dry_run:
        for pair in registry.pairs:
            print(f"[DRY] {pair.primary} <- {pair.secondary}")
        print(f"Would merge {len(registry)} pair(s) as {options.output_format.value}.")
        return 0

    try:
        batch = registry.batch_sprites(keep_going=options.keep_going, on_result=_report_result)
    except SpriteError as exc:
        print("Stopped at the first failure; earlier sprites were written.")
        return exc.exit_code

    print(f"Completed {len(batch.succeeded)} sprite(s), {len(batch.failed)} failure(s).")
    return 0 if batch.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
