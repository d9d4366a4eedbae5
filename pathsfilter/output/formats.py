#!/usr/bin/env python3
"""Textual encodings for lists of matched files.

- csv: comma separated, values quoted per RFC 4180 when needed
- json: JSON array of paths
- shell: space separated, quoted for a POSIX shell with as few quotes as possible
- escape: space separated, every unsafe character backslash-escaped

Example:
    >>> shell_escape("file with spaces.txt")
    "'file with spaces.txt'"
    >>> csv_escape('file "quoted".txt')
    '"file ""quoted"".txt"'
"""

import json
import re
from typing import Iterable, List

from pathsfilter.core.constants import ChangedFile, ExportFormat

_CSV_SAFE = re.compile(r"[a-zA-Z0-9._+:@%/-]+")
_SHELL_SAFE = re.compile(r"[a-zA-Z0-9,._+:@%/-]+")
_SHELL_SAFE_WITH_QUOTES = re.compile(r"[a-zA-Z0-9,._+:@%/'\s-]+")
_SHELL_UNSAFE_CHAR = re.compile(r"([^a-zA-Z0-9,._+:@%/-])")


def csv_escape(value: str) -> str:
    """Escape a value for one CSV field.

    Values made only of safe characters are returned unchanged; anything
    else is wrapped in double quotes with inner quotes doubled.
    """
    if value == "":
        return value

    if _CSV_SAFE.fullmatch(value):
        return value

    return '"' + value.replace('"', '""') + '"'


def backslash_escape(value: str) -> str:
    """Escape every character outside the safe set with a backslash."""
    return _SHELL_UNSAFE_CHAR.sub(r"\\\1", value)


def shell_escape(value: str) -> str:
    """Quote a value for use as a shell argument.

    1. Only safe characters: returned as-is
    2. Single quotes plus safe characters and whitespace: double quotes
    3. Single quotes plus other unsafe characters: each quote-free piece is
       escaped on its own and the pieces are joined with ``\\'``
    4. Otherwise: single quotes
    """
    if value == "":
        return value

    if _SHELL_SAFE.fullmatch(value):
        return value

    if "'" in value:
        if _SHELL_SAFE_WITH_QUOTES.fullmatch(value):
            return f'"{value}"'
        return "\\'".join(shell_escape(part) for part in value.split("'"))

    return f"'{value}'"


def to_json(value) -> str:
    """Serialize compactly, the way JavaScript's JSON.stringify does."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def serialize_files(files: Iterable[ChangedFile], fmt: ExportFormat) -> str:
    """Render the paths of matched files in the requested format.

    Args:
        files: Matched files, in order
        fmt: Export format

    Returns:
        Encoded file list (empty for ExportFormat.NONE)
    """
    paths: List[str] = [file.path for file in files]

    if fmt is ExportFormat.CSV:
        return ",".join(csv_escape(path) for path in paths)
    if fmt is ExportFormat.JSON:
        return to_json(paths)
    if fmt is ExportFormat.ESCAPE:
        return " ".join(backslash_escape(path) for path in paths)
    if fmt is ExportFormat.SHELL:
        return " ".join(shell_escape(path) for path in paths)
    return ""
