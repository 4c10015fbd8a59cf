from __future__ import annotations

from typing import TYPE_CHECKING

import orjson

from emit.report import ReportRecord, build_report, write_report
from merge.combine import ResolutionSummary
from symbols.models import ConversionState, MergeRecord, SymbolEntry

if TYPE_CHECKING:
    from pathlib import Path


def _state() -> ConversionState:
    state = ConversionState()
    state.files["a.js"] = "var x = 1;\n"
    state.files["lib/util000.js"] = "use(x);\n"
    state.symbols["x"] = SymbolEntry("a.js", {"b.js", "a.js"}, {"lib/util000.js"})
    state.merges.append(MergeRecord("a.js", "b.js", "assignment", "x"))
    state.renames.append(("lib/util.js", "lib/util000.js"))
    state.skipped.append("broken.js")
    state.purged.append("window")
    return state


def test_report_file_matches_schema(tmp_path: Path) -> None:
    path = tmp_path / "reports" / "run.json"
    resolution = ResolutionSummary(assignment_merges=1, passes=2, residual_cycles=[["c.js", "d.js"]])

    write_report(path, _state(), resolution)

    raw = orjson.loads(path.read_bytes())
    report = ReportRecord.model_validate(raw)
    assert report.files == ["a.js", "lib/util000.js"]
    assert report.symbols["x"].assignments == ["a.js", "b.js"]
    assert report.merges[0].reason == "assignment"
    assert report.passes == 2
    assert report.residual_cycles == [["c.js", "d.js"]]
    assert raw["renames"] == [{"from": "lib/util.js", "to": "lib/util000.js"}]
    assert raw["skipped"] == ["broken.js"]
    assert raw["purged"] == ["window"]
    assert raw["symbol_count"] == 1
    assert raw["file_count"] == 2


def test_report_without_resolution_has_no_passes() -> None:
    report = build_report(_state())

    assert report.passes == 0
    assert report.residual_cycles == []
    assert report.renames[0].from_ == "lib/util.js"
