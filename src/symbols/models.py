"""In-memory tables shared by every conversion stage."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

MergeReason = Literal["assignment", "circular"]


def _replace_in_set(values: set[str], old: str, new: str) -> bool:
    if old in values:
        values.discard(old)
        values.add(new)
        return True
    return False


@dataclass
class SymbolEntry:
    """Where a global name is declared, assigned and read.

    ``assignments`` and ``references`` hold file keys. They are only ever
    used for membership tests, never iterated to produce output.
    """

    definition: str | None = None
    assignments: set[str] = field(default_factory=set)
    references: set[str] = field(default_factory=set)

    def users(self) -> set[str]:
        return self.assignments | self.references

    def foreign_assignments(self) -> set[str]:
        """Files assigning this name without declaring it."""
        return {key for key in self.assignments if key != self.definition}

    def replace_file(self, old: str, new: str) -> bool:
        """Repoint every mention of ``old`` to ``new``.

        Returns True when ``old`` was among the references.
        """
        _replace_in_set(self.assignments, old, new)
        replaced = _replace_in_set(self.references, old, new)
        if self.definition == old:
            self.definition = new
        return replaced


@dataclass(frozen=True)
class MergeRecord:
    survivor: str
    retired: str
    reason: MergeReason
    symbol: str | None = None


@dataclass
class ConversionState:
    """Symbol table and file table for one run.

    ``files`` maps output keys to source text. Its insertion order is the
    original concatenation order and is what the aggregator reproduces, so
    merges always keep the surviving key in place.
    """

    symbols: dict[str, SymbolEntry] = field(default_factory=dict)
    files: dict[str, str] = field(default_factory=dict)
    sources: dict[str, str] = field(default_factory=dict)
    merges: list[MergeRecord] = field(default_factory=list)
    renames: list[tuple[str, str]] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    purged: list[str] = field(default_factory=list)

    def entry(self, name: str) -> SymbolEntry:
        """Return the entry for ``name``, creating an empty one if needed."""
        existing = self.symbols.get(name)
        if existing is None:
            existing = self.symbols[name] = SymbolEntry()
        return existing

    def file_order(self) -> dict[str, int]:
        return {key: index for index, key in enumerate(self.files)}

    def defined_in(self, key: str) -> list[str]:
        """Names owned by ``key``, in symbol-table order."""
        return [name for name, entry in self.symbols.items() if entry.definition == key]


__all__ = ["ConversionState", "MergeReason", "MergeRecord", "SymbolEntry"]
