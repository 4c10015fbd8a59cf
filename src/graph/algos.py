"""Graph algorithms for modulize"""

from __future__ import annotations

from typing import TYPE_CHECKING

from utils import group_by

if TYPE_CHECKING:
    from collections.abc import Iterator

    from symbols.models import ConversionState


def build_import_graph(state: ConversionState) -> dict[str, set[str]]:
    """Build the file-level import graph from the symbol table.

    Every file that reads or assigns a name declared elsewhere depends on
    the declaring file.

    Returns:
        Dictionary mapping every file key to the set of file keys it would
        import from (never itself)
    """
    graph: dict[str, set[str]] = {key: set() for key in state.files}

    for entry in state.symbols.values():
        definition = entry.definition
        if definition is None:
            continue
        for user in entry.users():
            if user != definition and user in graph:
                graph[user].add(definition)

    return graph


def imports_for(state: ConversionState, key: str) -> dict[str, list[str]]:
    """Return the names ``key`` imports, grouped by declaring file.

    Groups and names follow symbol-table order, so the result is stable
    across runs.
    """
    used = [
        (name, entry.definition)
        for name, entry in state.symbols.items()
        if entry.definition is not None
        and entry.definition != key
        and key in entry.references
    ]
    grouped = group_by(used, lambda pair: pair[1])
    return {
        definition: [name for name, _ in pairs]
        for definition, pairs in grouped.items()
        if definition is not None
    }


def is_mutual(graph: dict[str, set[str]], a: str, b: str) -> bool:
    """Return True when ``a`` and ``b`` import from each other."""
    return b in graph.get(a, set()) and a in graph.get(b, set())


class _TarjanState:
    """Mutable state container for Tarjan's SCC algorithm."""

    def __init__(self) -> None:
        self.index = 0
        self.indices: dict[str, int] = {}
        self.low_link: dict[str, int] = {}
        self.on_stack: set[str] = set()
        self.stack: list[str] = []
        self.sccs: list[list[str]] = []


def _extract_scc(state: _TarjanState, root: str) -> list[str]:
    """Extract a strongly connected component from the stack."""
    scc: list[str] = []
    while state.stack:
        w = state.stack.pop()
        state.on_stack.remove(w)
        scc.append(w)
        if w == root:
            break
    if root not in scc:
        msg = (
            f"Tarjan algorithm invariant violated: root node {root!r} "
            "not found in stack during SCC extraction."
        )
        raise RuntimeError(msg)
    return scc


def _visit(node: str, state: _TarjanState) -> None:
    state.indices[node] = state.index
    state.low_link[node] = state.index
    state.index += 1
    state.stack.append(node)
    state.on_stack.add(node)


def _strongconnect(node: str, graph: dict[str, set[str]], state: _TarjanState) -> None:
    """Process a node in Tarjan's algorithm.

    The depth-first walk keeps its own stack of pending neighbor iterators,
    so long import chains do not hit the interpreter's recursion limit.
    """
    _visit(node, state)
    work: list[tuple[str, Iterator[str]]] = [(node, iter(sorted(graph.get(node, set()))))]

    while work:
        current, neighbors = work[-1]
        descended = False
        for neighbor in neighbors:
            if neighbor not in state.indices:
                _visit(neighbor, state)
                work.append((neighbor, iter(sorted(graph.get(neighbor, set())))))
                descended = True
                break
            if neighbor in state.on_stack:
                state.low_link[current] = min(state.low_link[current], state.indices[neighbor])
        if descended:
            continue

        work.pop()
        if work:
            parent = work[-1][0]
            state.low_link[parent] = min(state.low_link[parent], state.low_link[current])

        if state.low_link[current] == state.indices[current]:
            scc = _extract_scc(state, current)
            if len(scc) > 1 or current in graph.get(current, set()):
                state.sccs.append(scc)


def find_cycles(graph: dict[str, set[str]]) -> list[list[str]]:
    """Find cycles in a directed graph using Tarjan's algorithm.

    Args:
        graph: Dictionary representing the graph

    Returns:
        List of cycles, where each cycle is a list of nodes
    """
    state = _TarjanState()

    for node in graph:
        if node not in state.indices:
            _strongconnect(node, graph, state)

    return state.sccs


__all__ = [
    "_TarjanState",
    "_extract_scc",
    "_strongconnect",
    "build_import_graph",
    "find_cycles",
    "imports_for",
    "is_mutual",
]
