"""pathsfilter Rules System.

This module provides filter compilation and matching:
- compile_glob: Glob patterns compiled into path tests
- RuleCompiler: Filter documents compiled into rule tables
- RuleEngine: Changed files classified into named filters

Filters decide which logical areas of a repository a change set touched,
based on glob patterns and optional change-status constraints.
"""

from .compiler import (
    GroupItem,
    PatternItem,
    RuleCompiler,
    RuleItem,
    StatusPatternItem,
    decode_item,
    load_filters,
    parse_status_spec,
)
from .engine import FilterRule, MatchResult, Predicate, RuleEngine, RuleTable, is_match, match_files
from .patterns import GlobCompiler, GlobPattern, compile_glob

__all__ = [
    # Glob compilation
    "GlobCompiler",
    "GlobPattern",
    "compile_glob",
    # Rule compilation
    "PatternItem",
    "StatusPatternItem",
    "GroupItem",
    "RuleItem",
    "RuleCompiler",
    "decode_item",
    "load_filters",
    "parse_status_spec",
    # Matching
    "Predicate",
    "FilterRule",
    "RuleTable",
    "MatchResult",
    "RuleEngine",
    "is_match",
    "match_files",
]
