"""Determinism verification for converted module trees."""

from __future__ import annotations

import filecmp
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from pipeline import convert
from rules.config import ConvertConfig, load_config


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    mismatches: tuple[str, ...] = field(default_factory=tuple)
    missing: tuple[str, ...] = field(default_factory=tuple)
    extra: tuple[str, ...] = field(default_factory=tuple)


def _list_files(root: Path) -> set[Path]:
    return {path for path in root.rglob("*") if path.is_file()}


def _list_relative_files(root: Path) -> set[Path]:
    return {path.relative_to(root) for path in _list_files(root)}


def verify_determinism(
    *,
    root: Path,
    dest: Path,
    config: ConvertConfig | None = None,
) -> DeterminismResult:
    """Verify that converting ``root`` again reproduces ``dest`` exactly.

    Regenerates the module tree into a temporary directory and compares it
    byte-for-byte against the existing output directory. File set
    comparisons are performed on relative paths.

    Args:
        root: Directory holding the legacy scripts.
        dest: Directory containing a previous conversion.
        config: Conversion options; loaded from ``modulize.toml`` when omitted.

    Returns:
        DeterminismResult with ok status and lists of missing, extra, and
        mismatched relative paths.

    Raises:
        FileNotFoundError: If dest does not exist.
        NotADirectoryError: If dest is not a directory.
    """
    if not dest.exists():
        msg = f"Output directory does not exist: {dest}"
        raise FileNotFoundError(msg)
    if not dest.is_dir():
        msg = f"Output path is not a directory: {dest}"
        raise NotADirectoryError(msg)

    if config is None:
        config = load_config(root)
    config = config.model_copy(update={"report": None})

    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir) / "out"
        convert(
            root=root,
            config=config,
            dest=temp_path,
            ignore_dirs=(dest,),
        )

        original_files = _list_relative_files(dest)
        regenerated_files = _list_relative_files(temp_path)

        missing = sorted(str(path) for path in original_files - regenerated_files)
        extra = sorted(str(path) for path in regenerated_files - original_files)

        mismatches: list[str] = []
        for path in sorted(original_files & regenerated_files):
            regenerated_path = temp_path / path
            original_path = dest / path
            if not filecmp.cmp(original_path, regenerated_path, shallow=False):
                mismatches.append(str(path))

    ok = not missing and not extra and not mismatches
    return DeterminismResult(
        ok=ok,
        mismatches=tuple(mismatches),
        missing=tuple(missing),
        extra=tuple(extra),
    )
