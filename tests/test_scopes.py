from __future__ import annotations

from parse.scopes import ScopeAnalysis, analyze_scopes
from parse.treesitter_js import parse_source


def _analyze(source: str) -> ScopeAnalysis:
    return analyze_scopes(parse_source(source.encode("utf-8")).root)


def _globals(analysis: ScopeAnalysis) -> dict[str, bool]:
    return {name.name: name.is_assigned for name in analysis.globals}


def test_program_level_var_and_function_are_declarations() -> None:
    analysis = _analyze(
        "var a = 1, b;\n"
        "function f() {}\n"
        "var g = function named() {};\n"
    )

    assert analysis.declarations == ("a", "b", "f", "g")
    assert analysis.globals == ()


def test_free_identifiers_in_first_use_order_with_assignment_flag() -> None:
    analysis = _analyze(
        "var a = 1;\n"
        "function f(p) {\n"
        "  var local = p + b;\n"
        "  c = local;\n"
        "  return arguments.length;\n"
        "}\n"
        "try { d(); } catch (e) { e.message; }\n"
        "for (var k in obj) {}\n"
        "x++;\n"
    )

    assert analysis.declarations == ("a", "f", "k")
    assert list(_globals(analysis)) == ["b", "c", "d", "obj", "x"]
    assert _globals(analysis) == {
        "b": False,
        "c": True,
        "d": False,
        "obj": False,
        "x": True,
    }


def test_member_properties_and_object_keys_are_not_identifiers() -> None:
    analysis = _analyze("window.onload = start;\nvar o = {key: value};\n")

    assert _globals(analysis) == {"window": False, "start": False, "value": False}


def test_compound_assignment_counts_as_assignment() -> None:
    analysis = _analyze("total += 1;\n")

    assert _globals(analysis) == {"total": True}


def test_read_and_write_of_same_name_keeps_both_occurrences() -> None:
    analysis = _analyze("count = count + 1;\n")

    (count,) = analysis.globals
    assert count.is_assigned
    assert [occ.is_assignment for occ in count.occurrences] == [True, False]


def test_bare_for_in_target_is_an_assignment() -> None:
    analysis = _analyze("for (key in table) {}\n")

    assert _globals(analysis) == {"key": True, "table": False}


def test_destructuring_declarations_bind_every_name() -> None:
    analysis = _analyze("var {p, q: r} = src;\nvar [s, ...t] = list;\n")

    assert analysis.declarations == ("p", "r", "s", "t")
    assert list(_globals(analysis)) == ["src", "list"]


def test_function_scopes_hide_parameters_and_locals() -> None:
    analysis = _analyze(
        "var add = (m) => m + n;\n"
        "function outer(arg) {\n"
        "  function inner() { return arg + hoisted; }\n"
        "  var hoisted = 2;\n"
        "  return inner();\n"
        "}\n"
    )

    assert analysis.declarations == ("add", "outer")
    assert _globals(analysis) == {"n": False}


def test_named_function_expression_binds_its_own_name_only_inside() -> None:
    analysis = _analyze("var g = function again() { again(); };\nagain();\n")

    assert analysis.declarations == ("g",)
    assert _globals(analysis) == {"again": False}


def test_block_scoped_declarations_are_local_but_not_shared() -> None:
    analysis = _analyze("let t = 1;\nconst u = t;\nclass K {}\nnew K(u);\n")

    assert analysis.declarations == ()
    assert analysis.globals == ()


def test_var_inside_top_level_block_is_hoisted_to_program() -> None:
    analysis = _analyze("if (ready) { var flag = true; }\nfor (var i = 0; i < 3; i++) {}\n")

    assert analysis.declarations == ("flag", "i")
    assert _globals(analysis) == {"ready": False}
