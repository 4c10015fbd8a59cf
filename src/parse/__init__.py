"""Parsing utilities for modulize"""

from parse.partition import partition_boundaries, split_source, strip_comments
from parse.scopes import GlobalName, Occurrence, ScopeAnalysis, analyze_scopes
from parse.treesitter_js import ParseError, ParsedSource, Span, Statement, parse_source

__all__ = [
    "GlobalName",
    "Occurrence",
    "ParseError",
    "ParsedSource",
    "ScopeAnalysis",
    "Span",
    "Statement",
    "analyze_scopes",
    "parse_source",
    "partition_boundaries",
    "split_source",
    "strip_comments",
]
