"""Conversion options and conflict rules for modulize."""

from rules.config import (
    ConfigError,
    ConvertConfig,
    load_config,
    resolve_dest,
)
from rules.conflicts import DuplicateDefinitionError, DuplicatePolicy, choose_owner

__all__ = [
    "ConfigError",
    "ConvertConfig",
    "DuplicateDefinitionError",
    "DuplicatePolicy",
    "choose_owner",
    "load_config",
    "resolve_dest",
]
