#!/usr/bin/env python3
"""Tests for the rule engine."""

import pytest

from pathsfilter.core.constants import ChangedFile, ChangeStatus, PredicateQuantifier
from pathsfilter.rules.compiler import load_filters
from pathsfilter.rules.engine import (
    FilterRule,
    Predicate,
    RuleEngine,
    RuleTable,
    is_match,
    match_files,
)
from pathsfilter.rules.patterns import compile_glob

SOME = PredicateQuantifier.SOME
EVERY = PredicateQuantifier.EVERY


def predicate(pattern, *statuses):
    return Predicate(
        path_test=compile_glob(pattern),
        statuses=frozenset(ChangeStatus(s) for s in statuses),
        pattern=pattern,
    )


class TestPredicate:
    """Tests for single predicate evaluation."""

    def test_any_status_when_unconstrained(self, make_file):
        p = predicate("src/**")
        assert p.accepts(make_file("src/a.py", "deleted"))
        assert p.accepts(make_file("src/a.py", "unmerged"))

    def test_status_is_set_membership(self, make_file):
        p = predicate("**", "added", "modified")
        assert p.accepts(make_file("anything.txt", "added"))
        assert p.accepts(make_file("anything.txt", "modified"))
        assert not p.accepts(make_file("anything.txt", "deleted"))

    def test_status_and_path_both_required(self, make_file):
        p = predicate("docs/**", "added")
        assert not p.accepts(make_file("src/a.py", "added"))
        assert not p.accepts(make_file("docs/a.md", "modified"))
        assert p.accepts(make_file("docs/a.md", "added"))


class TestIsMatch:
    """Tests for quantifier semantics."""

    def test_empty_predicates_never_match(self, make_file):
        file = make_file("src/a.py")
        assert is_match(file, (), SOME) is False
        assert is_match(file, (), EVERY) is False

    def test_partially_satisfied_predicates_do_not_match(self, make_file):
        """One predicate fails on status, the other on path."""
        file = make_file("src/a.py", "modified")
        wrong_status = predicate("src/**", "added")
        wrong_path = predicate("docs/**", "modified")

        assert is_match(file, (wrong_status, wrong_path), SOME) is False
        assert is_match(file, (wrong_status, wrong_path), EVERY) is False

    def test_fully_satisfied_predicates_match_under_both(self, make_file):
        file = make_file("src/a.py", "modified")
        both = (predicate("src/**", "modified"), predicate("**/*.py"))

        assert is_match(file, both, SOME) is True
        assert is_match(file, both, EVERY) is True

    def test_some_needs_one_every_needs_all(self, make_file):
        file = make_file("lib/a.ts")
        predicates = (predicate("**/*.ts"), predicate("src/**"))

        assert is_match(file, predicates, SOME) is True
        assert is_match(file, predicates, EVERY) is False

    def test_every_with_negated_pattern_excludes(self, make_file):
        predicates = (predicate("src/**"), predicate("!**/*.md"))

        assert is_match(make_file("src/a.py"), predicates, EVERY)
        assert not is_match(make_file("src/README.md"), predicates, EVERY)


class TestMatchFiles:
    """Tests for matching a change set against a rule table."""

    def test_basic_some_match(self, make_file):
        table = load_filters("src: ['src/**']")
        files = [make_file("src/a.ts", "modified"), make_file("docs/x.md", "added")]

        assert match_files(files, table, SOME) == {"src": [make_file("src/a.ts", "modified")]}

    def test_every_requires_all_patterns(self, make_file):
        table = load_filters("strict: ['**/*.ts', 'src/**']")
        files = [make_file("src/a.ts", "added"), make_file("lib/a.ts", "added")]

        assert match_files(files, table, EVERY) == {"strict": [make_file("src/a.ts", "added")]}

    def test_status_constrained_filter(self, make_file):
        table = load_filters("added_docs:\n  - added: 'docs/**'\n")
        files = [make_file("docs/readme.md", "modified"), make_file("docs/new.md", "added")]

        assert match_files(files, table, SOME) == {
            "added_docs": [make_file("docs/new.md", "added")]
        }

    def test_empty_change_set(self, sample_filters):
        table = load_filters(sample_filters)
        result = match_files([], table, SOME)

        assert result == {name: [] for name in table}

    def test_every_declared_filter_is_present(self, make_file):
        table = load_filters("src: ['src/**']\ndocs: ['docs/**']\n")
        result = match_files([make_file("other/file.txt")], table, SOME)

        assert result == {"src": [], "docs": []}
        assert list(result) == ["src", "docs"]

    def test_input_order_is_preserved(self, make_file):
        table = load_filters("ts: ['*.ts']")
        files = [make_file("b.ts"), make_file("a.ts", "added"), make_file("c.ts", "deleted")]

        assert match_files(files, table, SOME)["ts"] == files

    def test_a_file_may_match_several_filters(self, sample_files, sample_filters):
        table = load_filters(sample_filters)
        result = match_files(sample_files, table, SOME)

        assert [f.path for f in result["src"]] == [
            "src/app/main.py",
            "src/app/new_feature.py",
            "src/legacy.py",
        ]
        assert [f.path for f in result["new_code"]] == ["src/app/new_feature.py"]
        assert [f.path for f in result["docs"]] == ["docs/guide.md", "README.md"]
        assert [f.path for f in result["ci"]] == [".github/workflows/ci.yml"]
        assert result["shared"] == []

    def test_accepts_iterators(self, make_file):
        table = load_filters("all: ['**']")
        files = iter([make_file("a"), make_file("b")])

        assert len(match_files(files, table, SOME)["all"]) == 2


class TestRuleTable:
    def test_mapping_interface(self):
        rule = FilterRule("src", (predicate("src/**"),))
        table = RuleTable({"src": rule})

        assert table["src"] is rule
        assert "src" in table
        assert len(table) == 1
        assert repr(table) == "RuleTable({src: 1})"

    def test_table_is_read_only(self):
        table = RuleTable({"src": FilterRule("src")})
        with pytest.raises(TypeError):
            table["docs"] = FilterRule("docs")  # type: ignore[index]


class TestRuleEngine:
    """Tests for RuleEngine."""

    def test_quantifier_is_required_and_coerced(self):
        table = load_filters("src: ['src/**']")

        assert RuleEngine(table, "every").quantifier is EVERY
        assert RuleEngine(table, SOME).quantifier is SOME
        with pytest.raises(TypeError):
            RuleEngine(table)  # type: ignore[call-arg]

    def test_unknown_quantifier(self):
        with pytest.raises(ValueError):
            RuleEngine(RuleTable(), "most")

    def test_match(self, sample_files, sample_filters):
        engine = RuleEngine(load_filters(sample_filters), SOME)
        result = engine.match(sample_files)

        assert set(result) == {"shared", "src", "docs", "new_code", "ci"}
        assert len(engine) == 5
        assert engine.table.names()[0] == "shared"

    def test_matches_single_filter(self, make_file):
        engine = RuleEngine(load_filters("src: ['src/**']"), SOME)

        assert engine.matches("src", make_file("src/a.py"))
        assert not engine.matches("src", make_file("lib/a.py"))
        with pytest.raises(KeyError):
            engine.matches("missing", make_file("src/a.py"))

    def test_get_matching_filters(self, sample_filters):
        engine = RuleEngine(load_filters(sample_filters), SOME)
        file = ChangedFile("src/app/new_feature.py", ChangeStatus.ADDED)

        assert engine.get_matching_filters(file) == ["src", "new_code"]
