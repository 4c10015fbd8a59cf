from __future__ import annotations

import pytest

from utils import group_by, modify_filename, path_depth, relative_specifier, to_posix


def test_to_posix_normalizes_separators() -> None:
    assert to_posix("lib\\util.js") == "lib/util.js"
    assert to_posix("./lib//util.js") == "lib/util.js"


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("main.js", "main.1.js"),
        ("lib/main.js", "lib/main.1.js"),
        ("lib/jquery.min.js", "lib/jquery.min.1.js"),
    ],
)
def test_modify_filename_rewrites_the_stem_only(path: str, expected: str) -> None:
    assert modify_filename(path, lambda stem: f"{stem}.1") == expected


def test_path_depth() -> None:
    assert path_depth("a.js") == 0
    assert path_depth("lib/a.js") == 1
    assert path_depth("lib/deep/a.js") == 2


@pytest.mark.parametrize(
    ("from_path", "to_path", "expected"),
    [
        ("b.js", "a.js", "./a.js"),
        ("lib/b.js", "a.js", "../a.js"),
        ("lib/deep/b.js", "a.js", "../../a.js"),
        ("a.js", "lib/b.js", "./lib/b.js"),
        ("lib/a.js", "lib/b.js", "./b.js"),
        ("lib/a.js", "ui/b.js", "../ui/b.js"),
    ],
)
def test_relative_specifier_is_never_bare(from_path: str, to_path: str, expected: str) -> None:
    assert relative_specifier(from_path, to_path) == expected


def test_group_by_keeps_first_seen_order() -> None:
    grouped = group_by(["b1", "a1", "b2", "c1", "a2"], lambda item: item[0])

    assert list(grouped) == ["b", "a", "c"]
    assert grouped["b"] == ["b1", "b2"]
