"""File merging: declaration/assignment reconciliation and cycle breaking.

Imported bindings are read-only, so a file that assigns a global declared
elsewhere cannot become its own module; it is folded into the declaring
file. Two files that would import from each other are folded together as
well. Both cases use :func:`merge_file`, which keeps the surviving key in
its original position so the aggregator order is unchanged.

Resolution is single pass unless ``fixpoint`` is requested: a merge can
create a new declare/assign split or a new cycle that is not revisited.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from graph.algos import build_import_graph, find_cycles, is_mutual
from logger import get_logger
from symbols.models import MergeRecord

if TYPE_CHECKING:
    from symbols.models import ConversionState, MergeReason

logger = get_logger(__name__)


@dataclass
class ResolutionSummary:
    assignment_merges: int = 0
    circular_merges: int = 0
    passes: int = 0
    residual_cycles: list[list[str]] = field(default_factory=list)

    @property
    def merge_count(self) -> int:
        return self.assignment_merges + self.circular_merges


def merge_file(
    state: ConversionState,
    survivor: str,
    retired: str,
    *,
    reason: MergeReason,
    symbol: str | None = None,
) -> bool:
    """Append ``retired``'s text to ``survivor`` and forget ``retired``.

    Every mention of the retired key across the symbol table (assignments,
    references and definitions) is rewritten to the survivor.

    Returns:
        False when there was nothing to merge (same key or a key already
        merged away), True otherwise.
    """
    if survivor == retired or retired not in state.files or survivor not in state.files:
        logger.debug("Nothing to merge for %s into %s", retired, survivor)
        return False

    state.files[survivor] = state.files[survivor] + state.files.pop(retired)
    state.sources.pop(retired, None)

    replacement_count = 0
    for entry in state.symbols.values():
        if entry.replace_file(retired, survivor):
            replacement_count += 1

    state.merges.append(MergeRecord(survivor, retired, reason, symbol))
    logger.debug("Remapped %d references to combined file", replacement_count)
    return True


def combine_files(state: ConversionState) -> int:
    """Merge every file assigning a global into the file declaring it.

    Symbols are visited in table order; for each one the assigning files
    are merged in file-table order.

    Returns:
        Number of merges performed.
    """
    order = state.file_order()
    count = 0

    for name in list(state.symbols):
        entry = state.symbols[name]
        if entry.definition is None:
            continue

        others = sorted(
            entry.foreign_assignments(),
            key=lambda key: (order.get(key, len(order)), key),
        )
        for other in others:
            definition = entry.definition
            logger.info(
                "Combining %s into %s because of symbol %s", other, definition, name
            )
            if merge_file(state, definition, other, reason="assignment", symbol=name):
                count += 1

    return count


def resolve_circular(state: ConversionState) -> int:
    """Merge file pairs that import from each other.

    Files are visited from last-inserted to first-inserted and each one is
    compared with every file inserted after it. On a mutual import the
    later file is merged into the earlier one. The import graph is rebuilt
    after each merge.

    Returns:
        Number of merges performed.
    """
    keys = list(state.files)
    graph = build_import_graph(state)
    count = 0

    for index in range(len(keys) - 1, -1, -1):
        earlier = keys[index]
        if earlier not in state.files:
            continue
        for later in keys[index + 1 :]:
            if later not in state.files or not is_mutual(graph, earlier, later):
                continue
            logger.info(
                "Combining %s into %s because they import each other", later, earlier
            )
            if merge_file(state, earlier, later, reason="circular"):
                count += 1
                graph = build_import_graph(state)

    return count


def find_residual_cycles(state: ConversionState) -> list[list[str]]:
    """Return import cycles still present, each in file-table order."""
    order = state.file_order()
    cycles = [
        sorted(cycle, key=order.__getitem__)
        for cycle in find_cycles(build_import_graph(state))
    ]
    cycles.sort(key=lambda cycle: order[cycle[0]])
    return cycles


def resolve(
    state: ConversionState,
    *,
    combine: bool = False,
    fixpoint: bool = False,
    max_passes: int = 10,
    max_size: int | None = None,
) -> ResolutionSummary:
    """Run the merger (when ``combine``) and the circular resolver.

    With ``fixpoint`` the two stages repeat until a pass merges nothing,
    at most ``max_passes`` times. Otherwise exactly one pass runs.
    """
    summary = ResolutionSummary()

    while True:
        summary.passes += 1
        merged = 0
        if combine:
            assignment_merges = combine_files(state)
            summary.assignment_merges += assignment_merges
            merged += assignment_merges
        circular_merges = resolve_circular(state)
        summary.circular_merges += circular_merges
        merged += circular_merges

        if not fixpoint or merged == 0:
            break
        if summary.passes >= max_passes:
            logger.warning(
                "Stopped resolving after %d passes; merges were still happening",
                summary.passes,
            )
            break

    summary.residual_cycles = find_residual_cycles(state)
    for cycle in summary.residual_cycles:
        logger.warning("Unresolved import cycle: %s", " -> ".join(cycle))

    if max_size is not None:
        for key, text in state.files.items():
            size = len(text.encode("utf-8"))
            if size > max_size:
                logger.debug("%s is %d bytes, over the %d byte limit", key, size, max_size)

    logger.info(
        "Performed %d merges in %d passes", summary.merge_count, summary.passes
    )
    return summary


__all__ = [
    "ResolutionSummary",
    "combine_files",
    "find_residual_cycles",
    "merge_file",
    "resolve",
    "resolve_circular",
]
