"""Module emission: import/export synthesis and the aggregator entry point."""

from __future__ import annotations

import shutil
from typing import TYPE_CHECKING

from graph.algos import imports_for
from logger import get_logger
from utils import relative_specifier, to_posix

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from symbols.models import ConversionState

logger = get_logger(__name__)

GENERATED_HEADER = "// Automatically generated by modulize\n\n"


class EmitError(Exception):
    """Raised when the output tree cannot be laid out as requested."""


def render_imports(state: ConversionState, key: str) -> str:
    """One import statement per declaring file, then a blank line."""
    statements = [
        f"import {{{', '.join(names)}}} from '{relative_specifier(key, definition)}';\n"
        for definition, names in imports_for(state, key).items()
    ]
    if not statements:
        return ""
    return "".join(statements) + "\n"


def render_exports(state: ConversionState, key: str) -> str:
    names = state.defined_in(key)
    if not names:
        return ""
    return f"\n\nexport {{{', '.join(names)}}};\n"


def render_module(state: ConversionState, key: str) -> str:
    """Return the full module text for ``key``: imports, body, exports."""
    return render_imports(state, key) + state.files[key] + render_exports(state, key)


def render_aggregator(keys: Iterable[str], index_key: str = "index.js") -> str:
    """Import every module for its side effects, in the given order.

    Specifiers are relative to ``index_key`` so an aggregator placed in a
    subdirectory still reaches modules above it.
    """
    imports = "".join(
        f"import '{relative_specifier(index_key, key)}';\n" for key in keys
    )
    return GENERATED_HEADER + imports


def write_modules(state: ConversionState, dest: Path, *, indexjs: str) -> list[Path]:
    """Write every surviving file and the aggregator below ``dest``.

    Any previous tree at ``dest`` is removed first so two runs over the same
    input produce the same tree. I/O errors propagate and abort the run.

    Returns:
        Written paths, modules in file-table order followed by the aggregator.

    Raises:
        EmitError: If the aggregator name equals a module's output path.
    """
    index_key = to_posix(indexjs)
    if index_key in state.files:
        msg = (
            f"Aggregator file '{indexjs}' would overwrite the module of the same "
            "name; choose another indexjs"
        )
        raise EmitError(msg)

    if dest.exists():
        shutil.rmtree(dest)

    written: list[Path] = []
    for key in state.files:
        dest_path = dest / key
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        dest_path.write_bytes(render_module(state, key).encode("utf-8"))
        written.append(dest_path)
        logger.debug("Wrote %s", dest_path)

    index_path = dest / index_key
    index_path.parent.mkdir(parents=True, exist_ok=True)
    index_path.write_bytes(render_aggregator(state.files, index_key).encode("utf-8"))
    written.append(index_path)
    logger.info("Wrote index file %s", index_path)

    return written


__all__ = [
    "GENERATED_HEADER",
    "EmitError",
    "render_aggregator",
    "render_exports",
    "render_imports",
    "render_module",
    "write_modules",
]
