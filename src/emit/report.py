"""JSON report of the final symbol and file tables."""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from typing import TYPE_CHECKING

import orjson
from pydantic import BaseModel, ConfigDict, Field

from symbols.models import MergeReason

if TYPE_CHECKING:
    from pathlib import Path

    from merge.combine import ResolutionSummary
    from symbols.models import ConversionState


class SymbolReport(BaseModel):
    """Final owner and users of one symbol."""

    definition: str | None
    assignments: list[str]
    references: list[str]


class MergeReport(BaseModel):
    """One retired file and the file that absorbed it."""

    survivor: str
    retired: str
    reason: MergeReason
    symbol: str | None = None


class RenameReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str


class ReportRecord(BaseModel):
    """Schema for the run report."""

    files: list[str]
    symbols: dict[str, SymbolReport]
    merges: list[MergeReport]
    renames: list[RenameReport]
    skipped: list[str]
    purged: list[str]
    symbol_count: int
    file_count: int
    passes: int = 0
    residual_cycles: list[list[str]] = Field(default_factory=list)


def _to_dict(obj: object) -> object:
    """Convert object to dict for JSON serialization."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(by_alias=True)
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    return obj


def build_report(
    state: ConversionState,
    resolution: ResolutionSummary | None = None,
) -> ReportRecord:
    """Summarize a run. Sets are emitted sorted; ``files`` keeps table order."""
    symbols = {
        name: SymbolReport(
            definition=entry.definition,
            assignments=sorted(entry.assignments),
            references=sorted(entry.references),
        )
        for name, entry in state.symbols.items()
    }
    report = ReportRecord(
        files=list(state.files),
        symbols=symbols,
        merges=[MergeReport.model_validate(_to_dict(record)) for record in state.merges],
        renames=[RenameReport(from_=old, to=new) for old, new in state.renames],
        skipped=list(state.skipped),
        purged=list(state.purged),
        symbol_count=len(state.symbols),
        file_count=len(state.files),
    )
    if resolution is not None:
        report.passes = resolution.passes
        report.residual_cycles = [list(cycle) for cycle in resolution.residual_cycles]
    return report


def write_report(
    path: Path,
    state: ConversionState,
    resolution: ResolutionSummary | None = None,
) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    opts = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2
    path.write_bytes(orjson.dumps(_to_dict(build_report(state, resolution)), option=opts))


__all__ = [
    "MergeReport",
    "RenameReport",
    "ReportRecord",
    "SymbolReport",
    "build_report",
    "write_report",
]
