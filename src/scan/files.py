"""Input enumeration for modulize."""

from __future__ import annotations

from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

from rules.config import ConfigError
from utils import to_posix

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


def _should_include_file(
    path: Path,
    directory: Path,
    extensions: list[str],
    gitignore_matches: Callable[[str], bool] | None,
    include_patterns: list[str] | None,
    exclude_patterns: list[str] | None,
) -> bool:
    """Check if a file should be included based on all filtering rules."""
    if not path.is_file() or path.is_symlink():
        return False

    if path.suffix not in extensions:
        return False

    if not _is_within_root(path, directory):
        return False

    try:
        rel_path = path.relative_to(directory)
    except ValueError:
        return False

    rel_path_str = rel_path.as_posix()

    if gitignore_matches is not None and gitignore_matches(str(path)):
        return False

    if include_patterns and not any(
        fnmatch(rel_path_str, pat) for pat in include_patterns
    ):
        return False

    has_excluded_match = exclude_patterns and any(
        fnmatch(rel_path_str, pat) for pat in exclude_patterns
    )
    return not has_excluded_match


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        root_resolved = root.resolve()
        path_resolved = path.resolve()
    except OSError:
        return False

    try:
        path_resolved.relative_to(root_resolved)
    except ValueError:
        return False

    return True


def _is_skipped_dir(path: Path, skip_dirs: tuple[Path, ...]) -> bool:
    if path.is_symlink():
        return True
    try:
        resolved = path.resolve()
    except OSError:
        return True
    return resolved in skip_dirs


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return sorted list of .gitignore files under root (including root)."""
    gitignore_paths = [root / ".gitignore"]
    gitignore_paths.extend(root.rglob(".gitignore"))
    unique_paths = {path for path in gitignore_paths if path.is_file()}
    return sorted(unique_paths, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    gitignore_paths = _iter_gitignore_files(root)
    if not gitignore_paths:
        return None

    matchers = [parse_gitignore(path) for path in gitignore_paths]

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                continue
        return False

    return matches


def _walk_sorted(directory: Path, skip_dirs: tuple[Path, ...]) -> Iterator[Path]:
    """Yield files depth-first, visiting each directory's entries by name.

    This reproduces the order a sorted recursive ``readdir`` walk gives,
    which is the concatenation order legacy build scripts relied on.
    """
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            if not _is_skipped_dir(entry, skip_dirs):
                yield from _walk_sorted(entry, skip_dirs)
        else:
            yield entry


def find_script_files(
    directory: Path,
    *,
    extensions: list[str] | None = None,
    skip_dirs: tuple[Path, ...] = (),
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Find all script files below a directory, respecting .gitignore.

    Args:
        directory: Directory to search
        extensions: File suffixes to pick up (default ``[".js"]``)
        skip_dirs: Resolved directories never descended into (e.g. the
            destination when it lives under the root)
        include_patterns: Optional list of fnmatch patterns; if provided,
            files must match at least one pattern to be included
        exclude_patterns: Optional list of fnmatch patterns; files matching
            any pattern are excluded

    Yields:
        Path objects in depth-first, name-sorted order.
    """
    suffixes = extensions if extensions is not None else [".js"]
    gitignore_matches = _build_gitignore_matcher(
        directory,
        nested_gitignore=nested_gitignore,
    )

    for path in _walk_sorted(directory, skip_dirs):
        if _should_include_file(
            path,
            directory,
            suffixes,
            gitignore_matches,
            include_patterns,
            exclude_patterns,
        ):
            yield path


def iter_directory_segments(
    directory: Path,
    *,
    skip_dirs: tuple[Path, ...] = (),
) -> Iterator[str]:
    """Yield the name of every directory below ``directory``, depth-first."""
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.is_dir() and not _is_skipped_dir(entry, skip_dirs):
            yield entry.name
            yield from iter_directory_segments(entry, skip_dirs=skip_dirs)


def resolve_file_list(directory: Path, files: list[str]) -> list[Path]:
    """Turn an explicit ordered list of relative paths into input paths.

    The order of ``files`` is kept; it is the original concatenation order.

    Raises:
        ConfigError: If an entry is absolute, escapes the root, repeats an
            earlier entry or does not name a file.
    """
    resolved: list[Path] = []
    seen: set[str] = set()
    for entry in files:
        rel = to_posix(entry)
        if not rel or Path(entry).is_absolute():
            msg = f"Input file '{entry}' must be a path relative to {directory}"
            raise ConfigError(msg)

        path = directory / rel
        if not _is_within_root(path, directory):
            msg = f"Input file '{entry}' escapes the source root"
            raise ConfigError(msg)
        if not path.is_file():
            msg = f"Input file '{entry}' does not exist under {directory}"
            raise ConfigError(msg)
        if rel in seen:
            msg = f"Input file '{entry}' is listed more than once"
            raise ConfigError(msg)

        seen.add(rel)
        resolved.append(path)

    return resolved


__all__ = [
    "_should_include_file",
    "find_script_files",
    "iter_directory_segments",
    "resolve_file_list",
]
