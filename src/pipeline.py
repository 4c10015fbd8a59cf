"""End-to-end conversion of a script tree into ES modules."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from emit.report import write_report
from emit.write import write_modules
from logger import get_logger
from merge.combine import ResolutionSummary, resolve
from rules.config import ConvertConfig, load_config, resolve_dest
from scan.files import find_script_files, iter_directory_segments, resolve_file_list
from scan.names import NameRegistry
from symbols.models import ConversionState
from symbols.table import build_symbol_table

logger = get_logger(__name__)


@dataclass
class ConversionResult:
    state: ConversionState
    resolution: ResolutionSummary
    dest: Path | None = None
    written: list[Path] = field(default_factory=list)

    def summary(self) -> dict[str, object]:
        return {
            "symbol_count": len(self.state.symbols),
            "file_count": len(self.state.files),
            "rename_count": len(self.state.renames),
            "merge_count": self.resolution.merge_count,
            "skipped": list(self.state.skipped),
            "written": [str(path) for path in self.written],
        }


def collect_inputs(
    root: Path,
    config: ConvertConfig,
    *,
    skip_dirs: tuple[Path, ...] = (),
) -> list[Path]:
    """Return input files in concatenation order."""
    if config.files:
        return resolve_file_list(root, config.files)
    return list(
        find_script_files(
            root,
            extensions=config.extensions,
            skip_dirs=skip_dirs,
            include_patterns=config.include,
            exclude_patterns=config.exclude,
            nested_gitignore=config.nested_gitignore,
        )
    )


def _resolve_report_path(root: Path, report: str) -> Path:
    path = Path(report).expanduser()
    return path if path.is_absolute() else root / path


def convert(
    *,
    root: Path,
    config: ConvertConfig | None = None,
    dest: Path | None = None,
    ignore_dirs: tuple[Path, ...] = (),
) -> ConversionResult:
    """Convert the scripts under ``root`` into modules.

    Args:
        root: Directory holding the legacy scripts
        config: Conversion options; loaded from ``modulize.toml`` when omitted
        dest: Output directory overriding ``config.dest``; with neither set
            the run only analyses and writes no modules
        ignore_dirs: Further directories never scanned for input

    Returns:
        ConversionResult with the final tables, merge summary and written paths.
    """
    if config is None:
        config = load_config(root)

    if dest is not None:
        dest = resolve_dest(root, str(dest))
    elif config.dest:
        dest = resolve_dest(root, config.dest)

    skip_dirs = tuple(path.resolve() for path in ignore_dirs)
    if dest is not None:
        skip_dirs = (dest, *skip_dirs)

    logger.info("Processing %s", root)

    registry = NameRegistry(enabled=config.rename_dups)
    if config.rename_dups:
        registry.seed_directories(iter_directory_segments(root, skip_dirs=skip_dirs))

    paths = collect_inputs(root, config, skip_dirs=skip_dirs)

    state = build_symbol_table(
        ConversionState(),
        root,
        paths,
        registry=registry,
        strip=config.strip_comments,
        max_size=config.max_size,
        policy=config.duplicate_definitions,
    )

    logger.info("Found %d symbols in %d files", len(state.symbols), len(state.files))
    if registry.rename_count:
        logger.info("Renamed %d files", registry.rename_count)
    logger.debug("Symbols are %s", ", ".join(state.symbols))

    resolution = resolve(
        state,
        combine=config.combine,
        fixpoint=config.fixpoint,
        max_passes=config.max_passes,
        max_size=config.max_size,
    )

    written: list[Path] = []
    if dest is not None:
        written = write_modules(state, dest, indexjs=config.indexjs)

    if config.report:
        report_path = _resolve_report_path(root, config.report)
        write_report(report_path, state, resolution)
        logger.info("Wrote report %s", report_path)

    return ConversionResult(state=state, resolution=resolution, dest=dest, written=written)


__all__ = ["ConversionResult", "collect_inputs", "convert"]
