"""Ingestion and symbol table construction.

Files are read one at a time in input order. Each file is parsed, optionally
stripped of comments and split into partitions; every partition becomes a
file key whose program-level declarations and free identifiers are folded
into the shared symbol table.
"""

from __future__ import annotations

import codecs
from typing import TYPE_CHECKING

from logger import get_logger
from parse.partition import partition_boundaries, split_source, strip_comments
from parse.scopes import analyze_scopes
from parse.treesitter_js import ParsedSource, ParseError, parse_source
from rules.conflicts import choose_owner

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from rules.conflicts import DuplicatePolicy
    from scan.names import NameRegistry
    from symbols.models import ConversionState

logger = get_logger(__name__)


def add_definition(
    state: ConversionState,
    name: str,
    key: str,
    policy: DuplicatePolicy = "last",
) -> None:
    """Record that ``key`` declares ``name``, applying the duplicate policy."""
    entry = state.entry(name)
    if entry.definition is None or entry.definition == key:
        entry.definition = key
        return

    owner = choose_owner(policy, name, entry.definition, key)
    logger.error(
        "Name %s in %s already declared in %s; %s keeps it",
        name,
        key,
        entry.definition,
        owner,
    )
    entry.definition = owner


def add_partition(
    state: ConversionState,
    key: str,
    text: str,
    parsed: ParsedSource,
    *,
    source_path: str,
    policy: DuplicatePolicy = "last",
) -> None:
    """Register one partition and fold its symbols into the table."""
    if key in state.files:
        msg = f"Partition {key} of {source_path} clashes with an existing file"
        raise ValueError(msg)

    state.files[key] = text
    state.sources[key] = source_path

    analysis = analyze_scopes(parsed.root)

    for name in analysis.declarations:
        add_definition(state, name, key, policy)

    for name in analysis.globals:
        entry = state.entry(name.name)
        if name.is_assigned:
            entry.assignments.add(key)
            logger.info("Found global assignment to %s in %s", name.name, key)
        if not all(occ.is_assignment for occ in name.occurrences):
            entry.references.add(key)


def _read_source(path: Path, rel_path: str) -> bytes | None:
    source = path.read_bytes()
    if source.startswith(codecs.BOM_UTF8):
        source = source[len(codecs.BOM_UTF8) :]
    try:
        source.decode("utf-8")
    except UnicodeDecodeError as exc:
        logger.error("Cannot decode %s as UTF-8: %s", rel_path, exc)
        return None
    return source


def _parse_or_skip(state: ConversionState, rel_path: str, source: bytes) -> ParsedSource | None:
    try:
        return parse_source(source)
    except ParseError as exc:
        logger.error("Parse error in %s: %s\n%s", rel_path, exc, exc.excerpt)
        state.skipped.append(rel_path)
        return None


def ingest_file(
    state: ConversionState,
    root: Path,
    path: Path,
    *,
    registry: NameRegistry,
    strip: bool = False,
    max_size: int | None = None,
    policy: DuplicatePolicy = "last",
) -> list[str]:
    """Read, parse and partition one file into the state.

    Returns the file keys created, or an empty list when the file was
    skipped because it could not be decoded or parsed.
    """
    rel_path = path.relative_to(root).as_posix()
    key = registry.claim(rel_path, taken=state.files)

    source = _read_source(path, rel_path)
    if source is None:
        state.skipped.append(rel_path)
        return []

    parsed = _parse_or_skip(state, rel_path, source)
    if parsed is None:
        return []

    if strip and parsed.comments:
        source = strip_comments(source, parsed.comments)
        parsed = _parse_or_skip(state, rel_path, source)
        if parsed is None:
            return []

    boundaries = partition_boundaries(source, parsed.units, max_size)
    pieces = split_source(source, boundaries)

    parsed_pieces = [parsed]
    if len(pieces) > 1:
        parsed_pieces = []
        for piece in pieces:
            part_parsed = _parse_or_skip(state, rel_path, piece)
            if part_parsed is None:
                return []
            parsed_pieces.append(part_parsed)

    keys: list[str] = []
    for index, (piece, part_parsed) in enumerate(zip(pieces, parsed_pieces, strict=True)):
        part_key = key
        if index > 0:
            part_key = registry.claim_partition(key, index, taken=state.files)
        add_partition(
            state,
            part_key,
            piece.decode("utf-8"),
            part_parsed,
            source_path=rel_path,
            policy=policy,
        )
        keys.append(part_key)

    if len(keys) > 1:
        logger.debug("Split %s into %d partitions", rel_path, len(keys))

    return keys


def purge_external_symbols(state: ConversionState) -> list[str]:
    """Drop names never declared in any file; they belong to the environment."""
    removed = [name for name, entry in state.symbols.items() if entry.definition is None]
    for name in removed:
        del state.symbols[name]
    state.purged.extend(removed)

    logger.info("Removed %d global symbols", len(removed))
    if removed:
        logger.debug("Removed global symbols were %s", ", ".join(removed))
    return removed


def build_symbol_table(
    state: ConversionState,
    root: Path,
    paths: Iterable[Path],
    *,
    registry: NameRegistry,
    strip: bool = False,
    max_size: int | None = None,
    policy: DuplicatePolicy = "last",
) -> ConversionState:
    """Ingest every path in order, then purge environment globals."""
    for path in paths:
        logger.debug("Reading %s", path)
        ingest_file(
            state,
            root,
            path,
            registry=registry,
            strip=strip,
            max_size=max_size,
            policy=policy,
        )

    state.renames.extend(registry.renames)
    purge_external_symbols(state)
    return state


__all__ = [
    "add_definition",
    "add_partition",
    "build_symbol_table",
    "ingest_file",
    "purge_external_symbols",
]
