from __future__ import annotations

from pathlib import Path
from typing import Any

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

from rules.conflicts import DuplicatePolicy

CONFIG_FILENAME = "modulize.toml"

DEFAULT_INDEXJS = "index.js"


class ConvertConfig(BaseModel):
    """Options for converting a tree of concatenated scripts into ES modules.

    Keys may be spelled in snake_case or camelCase (``maxSize``,
    ``stripComments``, ...).
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    dest: str | None = Field(
        default=None,
        description="Output root; when unset the run performs analysis only",
    )
    max_size: int | None = Field(
        default=None,
        alias="maxSize",
        gt=0,
        description="Byte threshold for partitioning files (default: unbounded)",
    )
    strip_comments: bool = Field(
        default=False,
        alias="stripComments",
        description="Remove comments before partitioning and emission",
    )
    rename_dups: bool = Field(
        default=False,
        alias="renameDups",
        description="Rename files whose case-insensitive name was already seen",
    )
    combine: bool = Field(
        default=False,
        description="Merge files assigning a global into the file declaring it",
    )
    indexjs: str = Field(
        default=DEFAULT_INDEXJS,
        description="Name of the generated aggregator file",
    )
    files: list[str] = Field(
        default_factory=list,
        description="Explicit ordered list of input files (empty = enumerate root)",
    )
    extensions: list[str] = Field(
        default_factory=lambda: [".js"],
        description="File suffixes picked up when enumerating the root",
    )
    include: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to include (empty = all script files)",
    )
    exclude: list[str] = Field(
        default_factory=list,
        description="Glob patterns for files to exclude",
    )
    nested_gitignore: bool = Field(
        default=False,
        alias="nestedGitignore",
        description="Enable nested .gitignore composition (default: root only)",
    )
    duplicate_definitions: DuplicatePolicy = Field(
        default="last",
        alias="duplicateDefinitions",
        description="What to do when two files declare the same global",
    )
    fixpoint: bool = Field(
        default=False,
        description="Repeat merge and cycle resolution until nothing changes",
    )
    max_passes: int = Field(
        default=10,
        alias="maxPasses",
        ge=1,
        description="Upper bound on resolution passes when fixpoint is enabled",
    )
    report: str | None = Field(
        default=None,
        description="Optional path of a JSON report of the final tables",
    )
    verbose: bool = Field(default=False, description="Detailed output")
    debug: bool = Field(default=False, description="Very detailed output")

    @field_validator("indexjs")
    @classmethod
    def validate_indexjs(cls, v: str) -> str:
        if not v or v.startswith(("/", "~")) or ".." in Path(v).parts:
            msg = "indexjs must be a relative file name inside the destination"
            raise ValueError(msg)
        return v

    @field_validator("extensions", mode="before")
    @classmethod
    def validate_extensions(cls, v: Any) -> Any:
        """Accept ``js`` as shorthand for ``.js``."""
        if isinstance(v, list):
            return [
                ext if not isinstance(ext, str) or ext.startswith(".") else f".{ext}"
                for ext in v
            ]
        return v


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""


def resolve_dest(root: Path, dest: str) -> Path:
    """Resolve the destination directory against the source root.

    The emitter clears the destination before writing, so a destination that
    is the root itself or one of its ancestors is rejected.
    """
    if not dest:
        msg = "dest must be a non-empty path"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_dest = (resolved_root / Path(dest).expanduser()).resolve()
    except OSError as exc:
        msg = f"Failed to resolve dest '{dest}': {exc}"
        raise ConfigError(msg) from exc

    if resolved_dest == resolved_root or resolved_dest in resolved_root.parents:
        msg = f"dest '{dest}' would overwrite the source root"
        raise ConfigError(msg)

    return resolved_dest


def load_config(root: Path) -> ConvertConfig:
    """Load configuration from modulize.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return ConvertConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return ConvertConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg) from e
