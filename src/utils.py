"""Shared utilities for modulize."""

from __future__ import annotations

import posixpath
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

K = TypeVar("K")
V = TypeVar("V")


def to_posix(file_path: str | Path) -> str:
    """Normalize a relative path to forward slashes without a leading ``./``.

    Examples:
        >>> to_posix("lib\\\\util.js")
        'lib/util.js'
        >>> to_posix("./lib/util.js")
        'lib/util.js'
    """
    path_str = file_path.as_posix() if isinstance(file_path, Path) else str(file_path)
    parts = [part for part in path_str.replace("\\", "/").split("/") if part and part != "."]
    return "/".join(parts)


def modify_filename(file_path: str, transform: Callable[[str], str]) -> str:
    """Rewrite the stem of a relative path, keeping its directory and extension.

    Examples:
        >>> modify_filename("lib/util.js", lambda stem: stem + "000")
        'lib/util000.js'
        >>> modify_filename("main.js", lambda stem: stem + ".1")
        'main.1.js'
    """
    path = PurePosixPath(to_posix(file_path))
    return path.with_name(transform(path.stem) + path.suffix).as_posix()


def path_depth(file_path: str) -> int:
    """Return how many directories a relative path sits below the output root.

    Examples:
        >>> path_depth("foo.js")
        0
        >>> path_depth("./lib/foo.js")
        1
    """
    return len(PurePosixPath(to_posix(file_path)).parts) - 1


def relative_specifier(from_path: str, to_path: str) -> str:
    """Build an ES module specifier that resolves ``to_path`` from ``from_path``.

    Both arguments are paths relative to the same output root. The result
    always starts with ``./`` or ``../`` so it is never a bare specifier.

    Examples:
        >>> relative_specifier("b.js", "a.js")
        './a.js'
        >>> relative_specifier("lib/b.js", "a.js")
        '../a.js'
        >>> relative_specifier("a.js", "lib/deep/c.js")
        './lib/deep/c.js'
    """
    start = posixpath.dirname(to_posix(from_path)) or "."
    rel = posixpath.relpath(to_posix(to_path), start=start)
    if rel.startswith("../"):
        return rel
    return f"./{rel}"


def group_by(items: Iterable[V], key_fn: Callable[[V], K]) -> dict[K, list[V]]:
    """Group items by key, keeping keys and members in first-seen order."""
    grouped: dict[K, list[V]] = {}
    for item in items:
        grouped.setdefault(key_fn(item), []).append(item)
    return grouped
