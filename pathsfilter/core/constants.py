"""
pathsfilter Core: Constants and Type Definitions

This module provides system-wide constants, error codes, and the record types
shared by the rule engine, change detection and output layers.
"""
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import TypeAlias

# Version information
PATHSFILTER_VERSION = "1.0.0"

# Git uses this SHA for a ref that does not exist yet (first push)
NULL_SHA = "0" * 40
HEAD = "HEAD"

# Name of the aggregate output listing every filter that matched
CHANGES_OUTPUT = "changes"


class ErrorCode(IntEnum):
    """Standardized error codes for pathsfilter operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad filter document, invalid configuration
    NOT_FOUND = 2  # File or ref doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    CONFLICT = 4  # Output name collision
    DEPENDENCY_ERROR = 5  # git failed or is missing
    INTERNAL_ERROR = 6  # Bug in pathsfilter


# Type aliases for clarity
FilePath: TypeAlias = str
Pattern: TypeAlias = str
FilterName: TypeAlias = str


class ChangeStatus(Enum):
    """How a file differs between two revisions."""

    ADDED = "added"
    COPIED = "copied"
    DELETED = "deleted"
    MODIFIED = "modified"
    RENAMED = "renamed"
    UNMERGED = "unmerged"

    @classmethod
    def from_git_letter(cls, letter: str) -> "ChangeStatus":
        """Map a `git diff --name-status` letter to a status.

        Raises:
            KeyError: If the letter has no corresponding status
        """
        return _GIT_STATUS_LETTERS[letter]


_GIT_STATUS_LETTERS = {
    "A": ChangeStatus.ADDED,
    "C": ChangeStatus.COPIED,
    "D": ChangeStatus.DELETED,
    "M": ChangeStatus.MODIFIED,
    "R": ChangeStatus.RENAMED,
    "U": ChangeStatus.UNMERGED,
}


@dataclass(frozen=True)
class ChangedFile:
    """One file touched by the change set."""

    path: FilePath  # Repository-relative, forward-slash separated
    status: ChangeStatus

    def __str__(self) -> str:
        return f"{self.path} [{self.status.value}]"


class PredicateQuantifier(Enum):
    """How the predicates of one filter combine when testing a file."""

    SOME = "some"  # At least one predicate must hold (logical OR)
    EVERY = "every"  # All predicates must hold (logical AND)


class ExportFormat(Enum):
    """Encodings for the per-filter list of matched files."""

    NONE = "none"  # No file list output
    CSV = "csv"  # Comma separated, RFC 4180 quoting
    JSON = "json"  # JSON array of paths
    SHELL = "shell"  # Space separated, minimal shell quoting
    ESCAPE = "escape"  # Space separated, backslash escaping


class Limits:
    """Resource limits and default values."""

    DEFAULT_FETCH_DEPTH = 100
    MAX_FETCH_DEPTH = 2**53 - 1

    # Seconds allowed for a single git invocation
    GIT_TIMEOUT = 300


class ConfigKey:
    """Configuration key constants."""

    FILTERS = "filters"
    LIST_FILES = "list_files"
    PREDICATE_QUANTIFIER = "predicate_quantifier"
    BASE = "base"
    REF = "ref"
    BEFORE = "before"
    DEFAULT_BRANCH = "default_branch"
    WORKING_DIRECTORY = "working_directory"
    INITIAL_FETCH_DEPTH = "initial_fetch_depth"
    PR_FILES = "pr_files"
    OUTPUT_FILE = "output_file"
    LOGGING = "logging"


# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.FILTERS: "",
    ConfigKey.LIST_FILES: ExportFormat.NONE.value,
    ConfigKey.PREDICATE_QUANTIFIER: PredicateQuantifier.SOME.value,
    ConfigKey.BASE: "",
    ConfigKey.REF: "",
    ConfigKey.BEFORE: "",
    ConfigKey.DEFAULT_BRANCH: "",
    ConfigKey.WORKING_DIRECTORY: "",
    ConfigKey.INITIAL_FETCH_DEPTH: Limits.DEFAULT_FETCH_DEPTH,
    ConfigKey.PR_FILES: "",
    ConfigKey.OUTPUT_FILE: "",
    ConfigKey.LOGGING: {
        "level": "INFO",
        "file": "",
    },
}
