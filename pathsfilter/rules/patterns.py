#!/usr/bin/env python3
r"""Glob compilation for repository paths.

This module turns glob patterns into compiled path tests:
- ``*`` and ``?`` never cross a ``/``
- ``**`` as a whole segment spans any number of directories
- ``[...]`` character classes, ``{a,b}`` brace alternation, ``\`` escapes
- A leading ``!`` negates the pattern
- Dotfiles are matched like any other name
- Matching is case-sensitive and anchored to the whole path

Example:
    >>> is_source = compile_glob("src/**/*.{ts,tsx}")
    >>> is_source("src/app/main.tsx")
    True
    >>> is_source("docs/index.md")
    False
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, List, Optional, Pattern, Tuple

from pathsfilter.core.validators import FilterFormatError

# Compiles a glob pattern string into a path test
GlobCompiler = Callable[[str], Callable[[str], bool]]


@dataclass(frozen=True)
class GlobPattern:
    """A compiled glob pattern.

    Instances are immutable and callable with a repository-relative path.
    """

    pattern: str
    regex: Pattern
    negated: bool = False

    def matches(self, path: str) -> bool:
        """Check if path matches this pattern.

        Args:
            path: Repository-relative path, forward-slash separated

        Returns:
            True if path matches (or, for a negated pattern, does not match)
        """
        return (self.regex.fullmatch(path) is not None) != self.negated

    __call__ = matches


@lru_cache(maxsize=1024)
def compile_glob(pattern: str) -> GlobPattern:
    """Compile glob pattern into a GlobPattern.

    Args:
        pattern: Glob pattern (e.g., "src/**", "**/*.md", "!docs/**")

    Returns:
        Compiled pattern

    Raises:
        FilterFormatError: If the pattern cannot be compiled
    """
    body, negated = _split_negation(pattern)

    source = _translate(body)

    try:
        regex = re.compile(source, re.DOTALL)
    except re.error as e:
        raise FilterFormatError(f"Invalid glob pattern '{pattern}': {e}")

    return GlobPattern(pattern=pattern, regex=regex, negated=negated)


def _split_negation(pattern: str) -> Tuple[str, bool]:
    """Strip leading ``!`` characters; each one toggles negation."""
    negated = False
    while pattern.startswith("!"):
        negated = not negated
        pattern = pattern[1:]
    return pattern, negated


def _translate(pattern: str, at_start: bool = True, at_end: bool = True) -> str:
    """Translate a glob pattern into a regular expression.

    Args:
        pattern: Glob pattern without the negation prefix
        at_start: Whether the text before ``pattern`` ends a path segment
        at_end: Whether the text after ``pattern`` starts a path segment
    """
    parts: List[str] = []
    i, n = 0, len(pattern)

    while i < n:
        c = pattern[i]

        if c == "\\":
            if i + 1 < n:
                parts.append(re.escape(pattern[i + 1]))
                i += 2
            else:
                parts.append(re.escape(c))
                i += 1

        elif c == "*":
            j = i
            while j < n and pattern[j] == "*":
                j += 1
            segment_start = pattern[i - 1] == "/" if i > 0 else at_start
            segment_end = pattern[j] == "/" if j < n else at_end

            if j - i >= 2 and segment_start and segment_end:
                if j < n:
                    # "**/" spans zero or more directories
                    parts.append("(?:[^/]*/)*")
                    j += 1
                elif parts and parts[-1] == "/":
                    # trailing "/**" also matches the directory itself
                    parts[-1] = "(?:/.*)?"
                else:
                    parts.append(".*")
            else:
                parts.append("[^/]*")
            i = j

        elif c == "{":
            group = _match_brace(pattern, i)
            if group is None:
                parts.append(re.escape(c))
                i += 1
                continue

            end, alternatives = group
            starts = pattern[i - 1] == "/" if i > 0 else at_start
            ends = pattern[end + 1] == "/" if end + 1 < n else at_end
            translated = [_translate(alt, starts, ends) for alt in alternatives]
            parts.append("(?:" + "|".join(dict.fromkeys(translated)) + ")")
            i = end + 1

        elif c == "?":
            parts.append("[^/]")
            i += 1

        elif c == "[":
            j = i + 1
            if j < n and pattern[j] in "!^":
                j += 1
            if j < n and pattern[j] == "]":
                j += 1
            while j < n and pattern[j] != "]":
                j += 1

            if j >= n:
                parts.append(re.escape(c))
                i += 1
                continue

            body = pattern[i + 1:j]
            negate = body[:1] in ("!", "^")
            if negate:
                body = body[1:]
            body = body.replace("\\", "\\\\").replace("[", "\\[")
            body = re.sub(r"([&~|])", r"\\\1", body)
            parts.append("[^" + body + "/]" if negate else "(?!/)[" + body + "]")
            i = j + 1

        else:
            parts.append(re.escape(c))
            i += 1

    return "".join(parts)


def _match_brace(pattern: str, start: int) -> Optional[Tuple[int, List[str]]]:
    """Find the group opened by the ``{`` at ``start``.

    Returns:
        Index of the closing ``}`` and the top-level alternatives, or None
        when the group is unclosed or has no top-level comma
    """
    depth = 0
    bounds = [start]
    j, n = start, len(pattern)
    while j < n:
        c = pattern[j]
        if c == "\\":
            j += 2
            continue
        if c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                break
        elif c == "," and depth == 1:
            bounds.append(j)
        j += 1

    if j >= n or len(bounds) == 1:
        return None

    bounds.append(j)
    return j, [pattern[a + 1:b] for a, b in zip(bounds, bounds[1:])]
