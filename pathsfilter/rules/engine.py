#!/usr/bin/env python3
"""Rule engine for classifying changed files into named filters.

This module provides the matching half of pathsfilter:
- Predicates pairing an optional change-status set with a path test
- Named filter rules built from predicates in declaration order
- A read-only rule table
- SOME (logical OR) and EVERY (logical AND) predicate quantifiers

Example:
    >>> table = load_filters("src: ['src/**']")
    >>> engine = RuleEngine(table, PredicateQuantifier.SOME)
    >>> engine.match([ChangedFile("src/a.py", ChangeStatus.MODIFIED)])
    {'src': [ChangedFile(path='src/a.py', status=<ChangeStatus.MODIFIED: 'modified'>)]}
"""

from dataclasses import dataclass
from typing import (
    Callable,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from pathsfilter.core.constants import ChangedFile, ChangeStatus, PredicateQuantifier

# Filter name -> matched files, in rule order and input order
MatchResult = Dict[str, List[ChangedFile]]


@dataclass(frozen=True)
class Predicate:
    """One atomic test within a filter.

    An empty ``statuses`` set accepts files of any status.
    """

    path_test: Callable[[str], bool]
    statuses: FrozenSet[ChangeStatus] = frozenset()
    pattern: Optional[str] = None  # Source pattern, for diagnostics

    def accepts(self, file: ChangedFile) -> bool:
        """Check if file satisfies both the status constraint and the path test."""
        if self.statuses and file.status not in self.statuses:
            return False
        return bool(self.path_test(file.path))


@dataclass(frozen=True)
class FilterRule:
    """A named sequence of predicates."""

    name: str
    predicates: Tuple[Predicate, ...] = ()

    def __len__(self) -> int:
        return len(self.predicates)


class RuleTable(Mapping[str, FilterRule]):
    """Read-only mapping of filter name to FilterRule.

    Iteration follows the order in which filters were declared.
    """

    def __init__(self, rules: Optional[Mapping[str, FilterRule]] = None):
        self._rules: Dict[str, FilterRule] = dict(rules or {})

    def __getitem__(self, name: str) -> FilterRule:
        return self._rules[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        summary = ", ".join(f"{name}: {len(rule)}" for name, rule in self._rules.items())
        return f"RuleTable({{{summary}}})"

    def names(self) -> List[str]:
        """Get filter names in declaration order."""
        return list(self._rules)


def is_match(
    file: ChangedFile,
    predicates: Sequence[Predicate],
    quantifier: PredicateQuantifier,
) -> bool:
    """Test one file against the predicates of one filter.

    A filter without predicates never matches, whatever the quantifier.

    Args:
        file: Changed file to test
        predicates: Compiled predicates of the filter
        quantifier: SOME (any predicate) or EVERY (all predicates)

    Returns:
        True if the file satisfies the filter
    """
    if not predicates:
        return False

    if quantifier is PredicateQuantifier.EVERY:
        return all(predicate.accepts(file) for predicate in predicates)
    return any(predicate.accepts(file) for predicate in predicates)


def match_files(
    files: Iterable[ChangedFile],
    table: RuleTable,
    quantifier: PredicateQuantifier,
) -> MatchResult:
    """Match files against every filter of a rule table.

    Every declared filter appears in the result, with an empty list when
    nothing matched. Each list keeps the relative order of ``files``.

    Args:
        files: Changed files in detection order
        table: Compiled rule table
        quantifier: Predicate quantifier applied to every filter

    Returns:
        Filter name mapped to its matching files
    """
    files = list(files)
    result: MatchResult = {}
    for name, rule in table.items():
        result[name] = [file for file in files if is_match(file, rule.predicates, quantifier)]
    return result


class RuleEngine:
    """Rule engine bound to a rule table and a predicate quantifier.

    Features:
    - Stateless, single-pass matching
    - Explicit quantifier (no implicit default)
    - Per-file diagnostics of which filters a file satisfies
    """

    def __init__(self, table: RuleTable, quantifier: Union[PredicateQuantifier, str]):
        """Initialize rule engine.

        Args:
            table: Compiled rule table
            quantifier: How predicates of one filter combine

        Raises:
            ValueError: If quantifier is not a known PredicateQuantifier
        """
        self._table = table
        self._quantifier = PredicateQuantifier(quantifier)

    @property
    def table(self) -> RuleTable:
        return self._table

    @property
    def quantifier(self) -> PredicateQuantifier:
        return self._quantifier

    def match(self, files: Iterable[ChangedFile]) -> MatchResult:
        """Match files against all filters.

        Args:
            files: Changed files in detection order

        Returns:
            Filter name mapped to its matching files
        """
        return match_files(files, self._table, self._quantifier)

    def matches(self, name: str, file: ChangedFile) -> bool:
        """Check if a single file satisfies the named filter.

        Raises:
            KeyError: If no filter has that name
        """
        return is_match(file, self._table[name].predicates, self._quantifier)

    def get_matching_filters(self, file: ChangedFile) -> List[str]:
        """Get names of all filters the file satisfies, in declaration order."""
        return [
            name
            for name, rule in self._table.items()
            if is_match(file, rule.predicates, self._quantifier)
        ]

    def __len__(self) -> int:
        """Return number of filters."""
        return len(self._table)
