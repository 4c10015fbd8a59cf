"""Policy for globals declared in more than one file."""

from __future__ import annotations

from typing import Literal

DuplicatePolicy = Literal["last", "first", "error"]


class DuplicateDefinitionError(Exception):
    """Raised under the ``error`` policy when two files declare one global."""

    def __init__(self, name: str, existing: str, duplicate: str) -> None:
        self.name = name
        self.existing = existing
        self.duplicate = duplicate
        super().__init__(
            f"Name {name} in {duplicate} already declared in {existing}"
        )


def choose_owner(
    policy: DuplicatePolicy,
    name: str,
    existing: str,
    duplicate: str,
) -> str:
    """Return which file keeps ownership of ``name``.

    ``last`` lets the later-scanned declaration win, ``first`` keeps the
    earlier one, and ``error`` refuses to pick.
    """
    if policy == "error":
        raise DuplicateDefinitionError(name, existing, duplicate)
    if policy == "first":
        return existing
    return duplicate


__all__ = ["DuplicateDefinitionError", "DuplicatePolicy", "choose_owner"]
