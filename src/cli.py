"""Command-line interface for modulize."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

from emit.write import EmitError
from logger import level_for, setup_logger
from pipeline import convert
from rules.config import ConfigError, ConvertConfig, load_config
from rules.conflicts import DuplicateDefinitionError
from verify.verify import verify_determinism


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Directory of scripts to convert (default: .)",
    )


def _add_logging_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Detailed output",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Very detailed output",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="modulize")
    subparsers = parser.add_subparsers(dest="command", required=True)

    convert_parser = subparsers.add_parser(
        "convert", help="Convert concatenated scripts into ES modules"
    )
    _add_common_paths(convert_parser)
    convert_parser.add_argument(
        "--dest",
        "-d",
        default=None,
        help="Destination directory (default: config dest; none = analyse only)",
    )
    convert_parser.add_argument(
        "--max-size",
        type=int,
        default=None,
        help="Split files into partitions of at most this many bytes",
    )
    convert_parser.add_argument(
        "--strip-comments",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Remove comments before partitioning",
    )
    convert_parser.add_argument(
        "--rename-dups",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Rename files whose name was already used by a file or directory",
    )
    convert_parser.add_argument(
        "--combine",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Merge files assigning a global into the file declaring it",
    )
    convert_parser.add_argument(
        "--indexjs",
        default=None,
        help="Name of the generated aggregator file (default: index.js)",
    )
    convert_parser.add_argument(
        "--file",
        dest="files",
        action="append",
        default=None,
        help="Input file relative to root, in concatenation order (repeatable)",
    )
    convert_parser.add_argument(
        "--duplicate-definitions",
        choices=["last", "first", "error"],
        default=None,
        help="Policy when two files declare the same global (default: last)",
    )
    convert_parser.add_argument(
        "--fixpoint",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Repeat merging until no further merges happen",
    )
    convert_parser.add_argument(
        "--max-passes",
        type=int,
        default=None,
        help="Upper bound on passes with --fixpoint (default: 10)",
    )
    convert_parser.add_argument(
        "--report",
        default=None,
        help="Write a JSON report of the symbol and file tables",
    )
    _add_logging_flags(convert_parser)

    verify_parser = subparsers.add_parser(
        "verify", help="Verify that a previous conversion is reproducible"
    )
    _add_common_paths(verify_parser)
    verify_parser.add_argument(
        "--dest",
        "-d",
        default=None,
        help="Directory of a previous conversion (default: config dest)",
    )
    _add_logging_flags(verify_parser)

    return parser


_OVERRIDES = (
    "max_size",
    "strip_comments",
    "rename_dups",
    "combine",
    "indexjs",
    "files",
    "duplicate_definitions",
    "fixpoint",
    "max_passes",
    "verbose",
    "debug",
)


def _apply_overrides(config: ConvertConfig, args: argparse.Namespace) -> ConvertConfig:
    """Layer explicitly given CLI options over the file configuration."""
    data: dict[str, Any] = config.model_dump()
    for name in _OVERRIDES:
        value = getattr(args, name, None)
        if value is not None:
            data[name] = value
    report = getattr(args, "report", None)
    if report is not None:
        data["report"] = str(Path(report).expanduser().resolve())
    try:
        return ConvertConfig.model_validate(data)
    except ValueError as exc:
        msg = f"Invalid option: {exc}"
        raise ConfigError(msg) from exc


def _resolve_dest(dest: str | None) -> Path | None:
    if dest is None:
        return None
    return Path(dest).expanduser().resolve()


def _configure_logging(config: ConvertConfig) -> None:
    setup_logger(level=level_for(verbose=config.verbose, debug=config.debug))


def _handle_convert(root: Path, args: argparse.Namespace) -> int:
    try:
        config = _apply_overrides(load_config(root), args)
        _configure_logging(config)
        convert(root=root, config=config, dest=_resolve_dest(args.dest))
    except (ConfigError, DuplicateDefinitionError, EmitError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1
    return 0


def _handle_verify(root: Path, args: argparse.Namespace) -> int:
    try:
        config = _apply_overrides(load_config(root), args)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1
    _configure_logging(config)

    dest = _resolve_dest(args.dest)
    if dest is None:
        if not config.dest:
            sys.stderr.write("error: no destination given (use --dest)\n")
            return 2
        dest = (root / config.dest).resolve()

    try:
        result = verify_determinism(root=root, dest=dest, config=config)
    except (FileNotFoundError, NotADirectoryError) as exc:
        sys.stderr.write(f"dest: {dest}\n")
        sys.stderr.write(f"error: {exc}\n")
        return 2
    except (ConfigError, DuplicateDefinitionError, EmitError) as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 1
    if not result.ok:
        for label, paths in (
            ("missing", result.missing),
            ("extra", result.extra),
            ("mismatches", result.mismatches),
        ):
            for path in paths:
                sys.stderr.write(f"{label}: {path}\n")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    root = Path(args.root).expanduser().resolve()

    if args.command == "convert":
        return _handle_convert(root, args)

    if args.command == "verify":
        return _handle_verify(root, args)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
