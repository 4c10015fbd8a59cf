from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from pipeline import convert
from rules.config import ConvertConfig
from verify.verify import DeterminismResult, verify_determinism

if TYPE_CHECKING:
    from pathlib import Path


def _write_minimal_repo(root: Path) -> None:
    (root / "lib").mkdir(parents=True, exist_ok=True)
    (root / "lib" / "a.js").write_text("var a = 1;\n", encoding="utf-8")
    (root / "main.js").write_text("console.log(a);\n", encoding="utf-8")


def test_verify_determinism_requires_dest(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_repo(repo_root)

    missing_dir = tmp_path / "missing"
    with pytest.raises(FileNotFoundError, match="Output directory does not exist"):
        verify_determinism(root=repo_root, dest=missing_dir)


def test_verify_determinism_rejects_file_dest(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_repo(repo_root)

    not_a_dir = tmp_path / "out.js"
    not_a_dir.write_text("", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        verify_determinism(root=repo_root, dest=not_a_dir)


def test_verify_determinism_relative_paths_and_sorted_mismatches(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_repo(repo_root)

    dest = tmp_path / "out"
    dest.mkdir()

    for rel_path, content in (
        ("b.js", "b-original"),
        ("a.js", "a-original"),
        ("gone.js", "gone"),
    ):
        path = dest / rel_path
        path.write_text(content, encoding="utf-8")

    def _fake_convert(
        *,
        root: Path,
        config: ConvertConfig,
        dest: Path,
        ignore_dirs: tuple[Path, ...],
    ) -> None:
        dest.mkdir(parents=True)
        (dest / "a.js").write_text("a-original", encoding="utf-8")
        (dest / "b.js").write_text("b-regenerated", encoding="utf-8")
        (dest / "new.js").write_text("new", encoding="utf-8")

    monkeypatch.setattr("verify.verify.convert", _fake_convert)

    result = verify_determinism(root=repo_root, dest=dest, config=ConvertConfig())

    assert result == DeterminismResult(
        ok=False,
        mismatches=("b.js",),
        missing=("gone.js",),
        extra=("new.js",),
    )


def test_verify_determinism_accepts_fresh_conversion(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_repo(repo_root)
    config = ConvertConfig(dest="build")

    result = convert(root=repo_root, config=config)
    assert result.dest is not None

    assert verify_determinism(root=repo_root, dest=result.dest, config=config) == (
        DeterminismResult(ok=True)
    )


def test_verify_determinism_ignores_report_setting(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    _write_minimal_repo(repo_root)
    report = tmp_path / "report.json"
    config = ConvertConfig(report=str(report))

    convert(root=repo_root, config=config, dest=tmp_path / "out")
    report.unlink()

    assert verify_determinism(root=repo_root, dest=tmp_path / "out", config=config).ok
    assert not report.exists()
