"""Tree-sitter based parsing of legacy script files."""

from __future__ import annotations

from dataclasses import dataclass

from tree_sitter import Language, Node, Parser, Tree
from tree_sitter_javascript import language as get_javascript_language

_PARSER: Parser | None = None

COMMENT_TYPES = frozenset({"comment", "html_comment"})

EXCERPT_LENGTH = 100


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with JavaScript language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_javascript_language())
        _PARSER = Parser(lang)

    return _PARSER


class ParseError(Exception):
    """Raised when a source does not parse cleanly."""

    def __init__(self, message: str, *, line: int, column: int, excerpt: str) -> None:
        self.line = line
        self.column = column
        self.excerpt = excerpt
        super().__init__(message)


@dataclass(frozen=True)
class Span:
    """Half-open byte range ``[start, end)`` into a source buffer."""

    start: int
    end: int


@dataclass(frozen=True)
class Statement:
    """A top-level statement and its byte range."""

    type: str
    start: int
    end: int


@dataclass(frozen=True)
class ParsedSource:
    source: bytes
    tree: Tree
    statements: tuple[Statement, ...]
    units: tuple[Statement, ...]
    comments: tuple[Span, ...]

    @property
    def root(self) -> Node:
        return self.tree.root_node


def _first_error_node(root: Node) -> Node | None:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return None


def _collect_comments(root: Node) -> tuple[Span, ...]:
    spans: list[Span] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type in COMMENT_TYPES:
            spans.append(Span(node.start_byte, node.end_byte))
            continue
        stack.extend(reversed(node.children))
    return tuple(sorted(spans, key=lambda s: s.start))


def parse_source(source: bytes) -> ParsedSource:
    """Parse a script and index its top-level statements and comments.

    ``units`` lists every top-level statement and comment in source order;
    ``statements`` is the same list without the comments.

    Raises:
        ParseError: If the tree contains an ``ERROR`` or missing node. The
            error carries the 1-based position of the first bad node and an
            excerpt of the start of the source.
    """
    parser = _get_parser()
    tree = parser.parse(source)
    root = tree.root_node

    if root.has_error:
        bad = _first_error_node(root) or root
        line = bad.start_point[0] + 1
        column = bad.start_point[1] + 1
        excerpt = source[:EXCERPT_LENGTH].decode("utf8", errors="replace")
        kind = "missing token" if bad.is_missing else "syntax error"
        msg = f"{kind} at line {line}, column {column}"
        raise ParseError(msg, line=line, column=column, excerpt=excerpt)

    units = tuple(
        Statement(child.type, child.start_byte, child.end_byte)
        for child in root.named_children
        if child.type != "hash_bang_line"
    )
    statements = tuple(unit for unit in units if unit.type not in COMMENT_TYPES)

    return ParsedSource(
        source=source,
        tree=tree,
        statements=statements,
        units=units,
        comments=_collect_comments(root),
    )


__all__ = [
    "COMMENT_TYPES",
    "EXCERPT_LENGTH",
    "ParseError",
    "ParsedSource",
    "Span",
    "Statement",
    "parse_source",
]
