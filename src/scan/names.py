"""Case-insensitive output name registry.

Some consumers of the generated tree treat file and directory names as one
namespace and compare them without regard to case. The registry remembers
every stem and directory segment handed out and renames files that would
collide.
"""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from logger import get_logger
from utils import modify_filename

if TYPE_CHECKING:
    from collections.abc import Container, Iterable

logger = get_logger(__name__)

SUFFIX_WIDTH = 3


def _stem_key(rel_path: str) -> str:
    return PurePosixPath(rel_path).stem.lower()


class NameRegistry:
    """Registry of lower-cased file stems and directory segments."""

    def __init__(self, *, enabled: bool = True) -> None:
        self.enabled = enabled
        self.names: set[str] = set()
        self.renames: list[tuple[str, str]] = []
        self._counter = 0

    def seed_directories(self, segments: Iterable[str]) -> None:
        """Reserve directory names so no file can take one of them."""
        for segment in segments:
            self.names.add(segment.lower())

    def _collides(self, rel_path: str, taken: Container[str]) -> bool:
        return rel_path in taken or (self.enabled and _stem_key(rel_path) in self.names)

    def claim(self, rel_path: str, *, taken: Container[str] = ()) -> str:
        """Return the output path for ``rel_path``, renaming it on collision.

        The renamed stem gets a zero-padded counter shared by the whole run
        (``util.js`` becomes ``util000.js``, the next rename ``util001``...).
        Paths in ``taken`` are always avoided, even when the registry is
        disabled, since two files can never share an output path.
        """
        claimed = rel_path
        if self._collides(claimed, taken):
            while self._collides(claimed, taken):
                suffix = str(self._counter).zfill(SUFFIX_WIDTH)
                self._counter += 1
                claimed = modify_filename(rel_path, lambda stem, s=suffix: stem + s)
            self.renames.append((rel_path, claimed))
            logger.debug("Renaming duplicate %s to %s", rel_path, claimed)

        self.names.add(_stem_key(claimed))
        return claimed

    def claim_partition(self, key: str, index: int, *, taken: Container[str] = ()) -> str:
        """Return the output path of partition ``index`` of ``key``.

        Partition ``i`` of ``main.js`` is ``main.i.js``. When that path is
        already used the number is raised until it is free.
        """
        number = index
        claimed = modify_filename(key, lambda stem, n=number: f"{stem}.{n}")
        while self._collides(claimed, taken):
            number += 1
            claimed = modify_filename(key, lambda stem, n=number: f"{stem}.{n}")

        if number != index:
            logger.debug("Numbering partition %d of %s as %s", index, key, claimed)
        self.names.add(_stem_key(claimed))
        return claimed

    @property
    def rename_count(self) -> int:
        return len(self.renames)


__all__ = ["SUFFIX_WIDTH", "NameRegistry"]
