from __future__ import annotations

from graph.algos import build_import_graph, find_cycles, imports_for, is_mutual
from symbols.models import ConversionState, SymbolEntry


def _state() -> ConversionState:
    state = ConversionState()
    for key in ("a.js", "lib/b.js", "c.js"):
        state.files[key] = ""
    state.symbols["alpha"] = SymbolEntry("a.js", set(), {"lib/b.js", "c.js"})
    state.symbols["beta"] = SymbolEntry("lib/b.js", set(), {"c.js"})
    state.symbols["gamma"] = SymbolEntry("a.js", {"c.js"}, set())
    state.symbols["delta"] = SymbolEntry("a.js", set(), {"c.js", "a.js"})
    return state


def test_import_graph_counts_reads_and_writes_but_not_self_use() -> None:
    graph = build_import_graph(_state())

    assert graph == {
        "a.js": set(),
        "lib/b.js": {"a.js"},
        "c.js": {"a.js", "lib/b.js"},
    }


def test_imports_group_referenced_names_by_declaring_file() -> None:
    state = _state()

    assert imports_for(state, "c.js") == {"a.js": ["alpha", "delta"], "lib/b.js": ["beta"]}
    assert imports_for(state, "lib/b.js") == {"a.js": ["alpha"]}
    assert imports_for(state, "a.js") == {}


def test_is_mutual() -> None:
    graph = {"a": {"b"}, "b": {"a", "c"}, "c": set()}

    assert is_mutual(graph, "a", "b")
    assert is_mutual(graph, "b", "a")
    assert not is_mutual(graph, "b", "c")
    assert not is_mutual(graph, "a", "missing")


def test_find_cycles_reports_strongly_connected_components() -> None:
    graph = {
        "a": {"b"},
        "b": {"c"},
        "c": {"a"},
        "d": {"a"},
        "e": {"e"},
    }

    cycles = [sorted(cycle) for cycle in find_cycles(graph)]

    assert sorted(cycles) == [["a", "b", "c"], ["e"]]


def test_find_cycles_on_acyclic_graph() -> None:
    assert find_cycles({"a": {"b"}, "b": set()}) == []


def test_find_cycles_handles_chains_deeper_than_the_recursion_limit() -> None:
    keys = [f"f{index:05d}.js" for index in range(5000)]
    chain = {key: {following} for key, following in zip(keys, keys[1:])}
    chain[keys[-1]] = set()

    assert find_cycles(chain) == []

    chain[keys[-1]] = {keys[0]}
    cycles = find_cycles(chain)

    assert len(cycles) == 1
    assert sorted(cycles[0]) == keys


def test_find_cycles_keeps_separate_components_apart() -> None:
    graph = {"a": {"b"}, "b": {"a", "c"}, "c": {"d"}, "d": {"c"}}

    cycles = [sorted(cycle) for cycle in find_cycles(graph)]

    assert cycles == [["c", "d"], ["a", "b"]]
