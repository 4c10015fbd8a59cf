"""Symbol and file tables for modulize"""

from symbols.models import ConversionState, MergeRecord, SymbolEntry
from symbols.table import (
    add_definition,
    add_partition,
    build_symbol_table,
    ingest_file,
    purge_external_symbols,
)

__all__ = [
    "ConversionState",
    "MergeRecord",
    "SymbolEntry",
    "add_definition",
    "add_partition",
    "build_symbol_table",
    "ingest_file",
    "purge_external_symbols",
]
