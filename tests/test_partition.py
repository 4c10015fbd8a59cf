from __future__ import annotations

import pytest

from parse.partition import partition_boundaries, split_source, strip_comments
from parse.treesitter_js import ParseError, parse_source


def _partition(source: bytes, max_size: int | None) -> list[bytes]:
    parsed = parse_source(source)
    return split_source(source, partition_boundaries(source, parsed.units, max_size))


def test_parse_source_lists_top_level_statements_without_comments() -> None:
    parsed = parse_source(b"// head\nvar a = 1;\nfoo();\n")

    assert [s.type for s in parsed.statements] == ["variable_declaration", "expression_statement"]
    assert [u.type for u in parsed.units] == ["comment", "variable_declaration", "expression_statement"]
    assert [(c.start, c.end) for c in parsed.comments] == [(0, 7)]


def test_parse_source_reports_position_and_excerpt() -> None:
    with pytest.raises(ParseError) as exc_info:
        parse_source(b"var ok = 1;\nvar = ;\n")

    assert exc_info.value.line == 2
    assert exc_info.value.excerpt.startswith("var ok = 1;")


def test_strip_comments_keeps_tokens_and_line_breaks_apart() -> None:
    source = b"var a = 1; // note\nvar/**/b = 2;\n/* multi\nline */\nvar c;\n"
    parsed = parse_source(source)

    stripped = strip_comments(source, parsed.comments)

    assert stripped == b"var a = 1; \nvar b = 2;\n\n\nvar c;\n"
    assert parse_source(stripped).comments == ()


def test_strip_comments_ignores_comment_like_strings() -> None:
    source = b'var url = "http://example.com"; /* x */\n'
    parsed = parse_source(source)

    assert strip_comments(source, parsed.comments) == b'var url = "http://example.com"; \n'


def test_unbounded_size_keeps_one_partition() -> None:
    source = b"var a = 1;\nvar b = 2;\n"

    assert _partition(source, None) == [source]


def test_partitions_split_after_line_endings() -> None:
    source = b"var a = 1;\nvar b = 2;\nvar c = 3;\n"

    assert _partition(source, 15) == [b"var a = 1;\n", b"var b = 2;\n", b"var c = 3;\n"]
    assert _partition(source, 22) == [b"var a = 1;\nvar b = 2;\n", b"var c = 3;\n"]


def test_partitions_never_exceed_max_size_unless_single_statement() -> None:
    source = (
        b"// leading comment\n"
        b"var first = 1;\n"
        b"function big() { return 'a long function body that is large'; }\n"
        b"var second = 2;\n"
        b"var third = 3;\n"
    )

    pieces = _partition(source, 40)

    assert b"".join(pieces) == source
    oversized = [piece for piece in pieces if len(piece) > 40]
    assert oversized == [b"function big() { return 'a long function body that is large'; }\n"]


def test_statements_sharing_a_line_split_at_statement_end() -> None:
    source = b"var a = 1; var b = 2;\n"

    assert _partition(source, 12) == [b"var a = 1;", b" var b = 2;\n"]


def test_trailing_comment_opens_its_own_partition() -> None:
    source = b"var a = 1;\nvar b = 2;\n// a long trailing comment here\n"

    assert _partition(source, 34) == [
        b"var a = 1;\nvar b = 2;\n",
        b"// a long trailing comment here\n",
    ]


@pytest.mark.parametrize(
    ("source", "max_size"),
    [
        (b"var a = 1;\nvar b = 2;\n// note\n", 12),
        (b"/* header */\nvar a = 1;\n\n\nvar b = 2;\n// end\n\n", 16),
        (b"var a = 1; // one\nvar b = 2; // two\n\n\n", 12),
    ],
)
def test_partitions_fit_when_every_statement_and_comment_fits(
    source: bytes, max_size: int
) -> None:
    pieces = _partition(source, max_size)

    assert b"".join(pieces) == source
    assert len(pieces) > 1
    assert all(len(piece) <= max_size for piece in pieces)
