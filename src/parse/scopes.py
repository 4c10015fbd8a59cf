"""Free identifier extraction for script sources.

Finds every identifier that is used but never declared inside a piece of
source text, the way it would be shared with other scripts through the
global object once the scripts are concatenated. Each use is tagged as an
assignment target or a plain read.

Scoping is coarse: functions (declarations, expressions,
generators, arrows and methods) and ``catch`` clauses open scopes, and every
declaration kind binds in the nearest function scope. Only ``var`` and
function declarations at program level count as shared definitions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tree_sitter import Node

_FUNCTION_TYPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)
_DECLARED_FUNCTION_TYPES = frozenset(
    {"function_declaration", "generator_function_declaration"}
)
_SELF_NAMED_TYPES = frozenset(
    {"function_expression", "function", "generator_function", "class"}
)
_REFERENCE_TYPES = frozenset({"identifier", "shorthand_property_identifier"})
_ASSIGNMENT_TYPES = frozenset(
    {"assignment_expression", "augmented_assignment_expression"}
)

SHARED_KINDS = frozenset({"var", "function"})


@dataclass
class Scope:
    parent: Scope | None = None
    names: dict[str, str] = field(default_factory=dict)

    def declare(self, name: str, kind: str) -> None:
        self.names.setdefault(name, kind)

    def resolves(self, name: str) -> bool:
        scope: Scope | None = self
        while scope is not None:
            if name in scope.names:
                return True
            scope = scope.parent
        return False


@dataclass(frozen=True)
class Occurrence:
    """One syntactic use of a free identifier."""

    start: int
    end: int
    is_assignment: bool


@dataclass(frozen=True)
class GlobalName:
    name: str
    occurrences: tuple[Occurrence, ...]

    @property
    def is_assigned(self) -> bool:
        return any(occ.is_assignment for occ in self.occurrences)


@dataclass(frozen=True)
class ScopeAnalysis:
    """Result of analysing one source text.

    Attributes:
        declarations: Program-level ``var``/function names in source order.
        globals: Free identifiers in order of first use.
    """

    declarations: tuple[str, ...]
    globals: tuple[GlobalName, ...]


def _text(node: Node) -> str:
    return (node.text or b"").decode("utf8")


def _same(a: Node | None, b: Node) -> bool:
    return a is not None and a.id == b.id


def binding_names(node: Node) -> list[str]:
    """Return the names bound by an identifier or destructuring pattern."""
    names: list[str] = []
    stack = [node]
    while stack:
        current = stack.pop()
        kind = current.type
        if kind in ("identifier", "shorthand_property_identifier_pattern"):
            names.append(_text(current))
        elif kind in ("assignment_pattern", "object_assignment_pattern"):
            left = current.child_by_field_name("left")
            if left is not None:
                stack.append(left)
        elif kind == "pair_pattern":
            value = current.child_by_field_name("value")
            if value is not None:
                stack.append(value)
        elif kind in ("object_pattern", "array_pattern", "rest_pattern", "formal_parameters"):
            stack.extend(reversed(current.named_children))
    return names


def _declare_function(node: Node, enclosing: Scope, scope: Scope) -> None:
    if node.type in _DECLARED_FUNCTION_TYPES:
        name = node.child_by_field_name("name")
        if name is not None:
            enclosing.declare(_text(name), "function")

    params = node.child_by_field_name("parameters")
    if params is None:
        params = node.child_by_field_name("parameter")
    if params is not None:
        for name in binding_names(params):
            scope.declare(name, "param")

    if node.type in _SELF_NAMED_TYPES:
        name = node.child_by_field_name("name")
        if name is not None:
            scope.declare(_text(name), "self")

    if node.type != "arrow_function":
        scope.declare("arguments", "implicit")


def _build_scopes(root: Node) -> dict[int, Scope]:
    """Create a scope per scope-opening node and record every declaration."""
    program = Scope()
    scopes: dict[int, Scope] = {root.id: program}
    stack: list[tuple[Node, Scope, Scope]] = [
        (child, program, program) for child in reversed(root.children)
    ]

    while stack:
        node, function_scope, current = stack.pop()
        kind = node.type

        if kind in _FUNCTION_TYPES:
            scope = Scope(parent=current)
            scopes[node.id] = scope
            _declare_function(node, function_scope, scope)
            function_scope = current = scope
        elif kind == "class":
            name = node.child_by_field_name("name")
            if name is not None:
                scope = Scope(parent=current)
                scope.declare(_text(name), "self")
                scopes[node.id] = scope
                current = scope
        elif kind == "class_declaration":
            name = node.child_by_field_name("name")
            if name is not None:
                function_scope.declare(_text(name), "class")
        elif kind in ("variable_declaration", "lexical_declaration"):
            decl_kind = "var"
            if kind == "lexical_declaration":
                keyword = node.child_by_field_name("kind")
                decl_kind = _text(keyword) if keyword is not None else "let"
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                target = declarator.child_by_field_name("name")
                if target is not None:
                    for name in binding_names(target):
                        function_scope.declare(name, decl_kind)
        elif kind == "for_in_statement":
            keyword = node.child_by_field_name("kind")
            target = node.child_by_field_name("left")
            if keyword is not None and target is not None:
                for name in binding_names(target):
                    function_scope.declare(name, _text(keyword))
        elif kind == "catch_clause":
            scope = Scope(parent=current)
            param = node.child_by_field_name("parameter")
            if param is not None:
                for name in binding_names(param):
                    scope.declare(name, "catch")
            scopes[node.id] = scope
            current = scope

        stack.extend(
            (child, function_scope, current) for child in reversed(node.children)
        )

    return scopes


def is_assignment_target(node: Node, parent: Node | None) -> bool:
    """Return True when ``node`` is written rather than read.

    Covers the left side of ``=`` and compound assignments, the operand of
    ``++``/``--`` and the target of a ``for (x in ...)`` without a
    declaration keyword.
    """
    if parent is None:
        return False
    if parent.type in _ASSIGNMENT_TYPES:
        return _same(parent.child_by_field_name("left"), node)
    if parent.type == "update_expression":
        return _same(parent.child_by_field_name("argument"), node)
    if parent.type == "for_in_statement" and parent.child_by_field_name("kind") is None:
        return _same(parent.child_by_field_name("left"), node)
    return False


def analyze_scopes(root: Node) -> ScopeAnalysis:
    """Collect program-level declarations and free identifiers of a tree."""
    scopes = _build_scopes(root)
    program = scopes[root.id]

    found: dict[str, list[Occurrence]] = {}
    stack: list[tuple[Node, Node | None, Scope]] = [(root, None, program)]

    while stack:
        node, parent, scope = stack.pop()
        scope = scopes.get(node.id, scope)

        if node.type in _REFERENCE_TYPES:
            name = _text(node)
            if not scope.resolves(name):
                found.setdefault(name, []).append(
                    Occurrence(
                        start=node.start_byte,
                        end=node.end_byte,
                        is_assignment=node.type == "identifier"
                        and is_assignment_target(node, parent),
                    )
                )
            continue

        stack.extend((child, node, scope) for child in reversed(node.children))

    declarations = tuple(
        name for name, kind in program.names.items() if kind in SHARED_KINDS
    )
    free = tuple(GlobalName(name, tuple(occs)) for name, occs in found.items())
    return ScopeAnalysis(declarations=declarations, globals=free)


__all__ = [
    "SHARED_KINDS",
    "GlobalName",
    "Occurrence",
    "Scope",
    "ScopeAnalysis",
    "analyze_scopes",
    "binding_names",
    "is_assignment_target",
]
