"""Comment removal and size-bounded partitioning of parsed sources.

Both operate on byte offsets reported by the parser. Comment removal edits
an immutable buffer by excising spans from the highest offset to the lowest,
so every span still points at the text it was computed from. Partitioning
never splits a statement: it only chooses at which top-level statement or
comment a new output unit starts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from parse.treesitter_js import Span, Statement

_WHITESPACE = b" \t\r\n\f\v"


def _comment_replacement(source: bytes, span: Span) -> bytes:
    """Pick the text that takes a comment's place.

    A comment spanning a line break still terminates the line; one wedged
    between two non-blank characters keeps them apart.
    """
    if b"\n" in source[span.start : span.end]:
        return b"\n"
    before = source[span.start - 1 : span.start]
    after = source[span.end : span.end + 1]
    if before and after and before not in _WHITESPACE and after not in _WHITESPACE:
        return b" "
    return b""


def strip_comments(source: bytes, comments: Sequence[Span]) -> bytes:
    """Return ``source`` with every comment span removed."""
    parts: list[bytes] = []
    cursor = len(source)
    for span in sorted(comments, key=lambda s: s.start, reverse=True):
        if span.end > cursor:
            continue
        parts.append(source[span.end : cursor])
        parts.append(_comment_replacement(source, span))
        cursor = span.start
    parts.append(source[:cursor])
    return b"".join(reversed(parts))


def _line_end(source: bytes, pos: int) -> int:
    """Advance past blanks and one line break following ``pos``, if any."""
    i = pos
    while i < len(source) and source[i] in b" \t":
        i += 1
    if source.startswith(b"\r\n", i):
        return i + 2
    if source.startswith(b"\n", i):
        return i + 1
    return pos


def partition_boundaries(
    source: bytes,
    units: Sequence[Statement],
    max_size: int | None,
) -> list[int]:
    """Return the byte offsets at which each partition starts.

    ``units`` are the top-level statements and comments in source order.
    The first partition always starts at 0. A partition closes after the
    line ending of its last unit, and the last unit also takes the trailing
    blanks up to the end of the source. A unit opens a new partition when
    keeping it would push the current partition past ``max_size`` bytes and
    the current partition already holds a unit, so only a single unit larger
    than ``max_size`` can overflow.
    """
    boundaries = [0]
    if max_size is None:
        return boundaries

    previous_end: int | None = None
    last = len(units) - 1
    for index, unit in enumerate(units):
        end = len(source) if index == last else _line_end(source, unit.end)
        if previous_end is not None and end - boundaries[-1] > max_size:
            boundaries.append(previous_end)
        previous_end = end
    return boundaries


def split_source(source: bytes, boundaries: Sequence[int]) -> list[bytes]:
    """Cut ``source`` at ``boundaries``; the last piece runs to the end."""
    ends = [*boundaries[1:], len(source)]
    return [source[start:end] for start, end in zip(boundaries, ends, strict=True)]


__all__ = ["partition_boundaries", "split_source", "strip_comments"]
