#!/usr/bin/env python3
"""Compilation of filter documents into rule tables.

A filter document maps filter names to rule items. A rule item is one of:
- a glob string: ``"src/**"``
- a status mapping: ``{"added|modified": "src/**"}`` or
  ``{"deleted": ["a/**", "b/**"]}``
- a list of rule items, nested arbitrarily (YAML anchors expand into these)

Items are first decoded into a closed set of variants (PatternItem,
StatusPatternItem, GroupItem) and then compiled into a flat tuple of
predicates. Any malformed node aborts the whole document.

Example:
    >>> table = load_filters('''
    ... shared: &shared
    ...   - 'common/**'
    ... backend:
    ...   - *shared
    ...   - added|modified: 'api/**'
    ... ''')
    >>> len(table["backend"])
    2
"""

import re
from dataclasses import dataclass
from typing import Any, FrozenSet, Iterator, Tuple, Union

import yaml

from pathsfilter.core.constants import ChangeStatus
from pathsfilter.core.validators import (
    FilterFormatError,
    describe_type,
    validate_change_status,
    validate_filter_name,
    validate_pattern,
)
from pathsfilter.rules.engine import FilterRule, Predicate, RuleTable
from pathsfilter.rules.patterns import GlobCompiler, compile_glob


class FilterLoader(yaml.SafeLoader):
    """SafeLoader that reads only true/false as booleans, as YAML 1.2 does.

    Keys such as ``on``, ``off``, ``yes`` and ``no`` stay strings so they can name filters.
    """


FilterLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
FilterLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


@dataclass(frozen=True)
class PatternItem:
    """A single glob accepting files of any status."""

    pattern: str


@dataclass(frozen=True)
class StatusPatternItem:
    """Globs restricted to a set of change statuses."""

    statuses: FrozenSet[ChangeStatus]
    patterns: Tuple[str, ...]


@dataclass(frozen=True)
class GroupItem:
    """An ordered group of rule items."""

    items: Tuple["RuleItem", ...]


RuleItem = Union[PatternItem, StatusPatternItem, GroupItem]


def parse_status_spec(spec: str) -> FrozenSet[ChangeStatus]:
    """Parse a status-spec such as ``"added | Modified"``.

    Tokens are separated by ``|``, trimmed and compared case-insensitively.
    Empty tokens are discarded; a spec without tokens accepts any status.

    Raises:
        FilterFormatError: If a token names no known status
    """
    tokens = (token.strip().lower() for token in spec.split("|"))
    return frozenset(validate_change_status(token) for token in tokens if token)


def decode_item(node: Any) -> RuleItem:
    """Decode a generic YAML node into a rule item.

    Args:
        node: Decoded YAML value

    Returns:
        Rule item variant

    Raises:
        FilterFormatError: If node (or anything nested in it) has an unsupported shape
    """
    if isinstance(node, str):
        return PatternItem(validate_pattern(node))

    if isinstance(node, list):
        return GroupItem(tuple(decode_item(child) for child in node))

    if isinstance(node, dict):
        return GroupItem(tuple(_decode_status_entry(key, value) for key, value in node.items()))

    raise FilterFormatError(f"Unexpected element type '{describe_type(node)}'")


def _decode_status_entry(key: Any, value: Any) -> StatusPatternItem:
    if not isinstance(key, str) or not isinstance(value, (str, list)):
        raise FilterFormatError(
            f"Expected [key:string]= pattern:string | string[], but "
            f"[{key}:{describe_type(key)}]= {value}:{describe_type(value)} found"
        )

    patterns = [value] if isinstance(value, str) else value
    return StatusPatternItem(
        statuses=parse_status_spec(key),
        patterns=tuple(validate_pattern(pattern) for pattern in patterns),
    )


class RuleCompiler:
    """Compiles filter documents into rule tables.

    The glob compiler is injected so the compiler does not depend on one
    particular path-matching implementation.
    """

    def __init__(self, glob_compiler: GlobCompiler = compile_glob):
        """Initialize rule compiler.

        Args:
            glob_compiler: Turns a glob string into a ``(path) -> bool`` test
        """
        self._glob_compiler = glob_compiler

    def compile_item(self, node: Any) -> Tuple[Predicate, ...]:
        """Compile one rule item into predicates in declaration order.

        Raises:
            FilterFormatError: If the item is malformed
        """
        return tuple(self._compile(decode_item(node)))

    def _compile(self, item: RuleItem) -> Iterator[Predicate]:
        if isinstance(item, PatternItem):
            yield Predicate(path_test=self._glob_compiler(item.pattern), pattern=item.pattern)
        elif isinstance(item, StatusPatternItem):
            for pattern in item.patterns:
                yield Predicate(
                    path_test=self._glob_compiler(pattern),
                    statuses=item.statuses,
                    pattern=pattern,
                )
        else:
            for child in item.items:
                yield from self._compile(child)

    def compile(self, document: Any) -> RuleTable:
        """Compile a decoded filter document.

        Entries are compiled in document order; a repeated name replaces the
        earlier rule.

        Args:
            document: Mapping of filter name to rule item

        Returns:
            Compiled rule table

        Raises:
            FilterFormatError: If the root is not a mapping or any item is malformed
        """
        if not isinstance(document, dict):
            raise FilterFormatError(
                f"Root element is not an object, but {describe_type(document)} found"
            )

        rules = {}
        for name, node in document.items():
            validate_filter_name(name)
            rules[name] = FilterRule(name=name, predicates=self.compile_item(node))
        return RuleTable(rules)

    def load(self, text: str) -> RuleTable:
        """Decode YAML text and compile it.

        Empty text yields an empty rule table.

        Raises:
            FilterFormatError: If the YAML cannot be parsed or has an unsupported shape
        """
        if not text:
            return RuleTable()

        try:
            document = yaml.load(text, Loader=FilterLoader)
        except yaml.YAMLError as e:
            raise FilterFormatError(f"Unable to parse YAML: {e}")

        return self.compile(document)


def load_filters(text: str, glob_compiler: GlobCompiler = compile_glob) -> RuleTable:
    """Compile YAML filter definitions into a rule table.

    Args:
        text: YAML document mapping filter names to rule items
        glob_compiler: Glob compiler to build path tests with

    Returns:
        Compiled rule table
    """
    return RuleCompiler(glob_compiler).load(text)
