#!/usr/bin/env python3
"""Tests for file list encodings."""

import pytest

from pathsfilter.core.constants import ChangedFile, ChangeStatus, ExportFormat
from pathsfilter.output.formats import (
    backslash_escape,
    csv_escape,
    serialize_files,
    shell_escape,
    to_json,
)


class TestCsvEscape:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("src/a-b_c.py", "src/a-b_c.py"),
            ("", ""),
            ("a,b.txt", '"a,b.txt"'),
            ("my file.txt", '"my file.txt"'),
            ('file "q".txt', '"file ""q"".txt"'),
            ("line\nbreak", '"line\nbreak"'),
        ],
    )
    def test_csv_escape(self, value, expected):
        assert csv_escape(value) == expected


class TestShellEscape:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("src/main.py", "src/main.py"),
            ("", ""),
            ("file with spaces.txt", "'file with spaces.txt'"),
            ("$HOME/x", "'$HOME/x'"),
            ("it's here", "\"it's here\""),
            ("it's$x", "it\\''s$x'"),
            ("a\nb.txt", "'a\nb.txt'"),
        ],
    )
    def test_shell_escape(self, value, expected):
        assert shell_escape(value) == expected


class TestBackslashEscape:
    def test_escapes_unsafe_characters(self):
        assert backslash_escape("my file(1).txt") == "my\\ file\\(1\\).txt"

    def test_safe_value_unchanged(self):
        assert backslash_escape("src/a,b.py") == "src/a,b.py"


class TestToJson:
    def test_compact(self):
        assert to_json(["a", "b c"]) == '["a","b c"]'
        assert to_json([]) == "[]"

    def test_unicode_kept(self):
        assert to_json(["ü.md"]) == '["ü.md"]'


class TestSerializeFiles:
    @pytest.fixture
    def files(self):
        return [
            ChangedFile("src/a.py", ChangeStatus.ADDED),
            ChangedFile("docs/my guide.md", ChangeStatus.MODIFIED),
        ]

    def test_csv(self, files):
        assert serialize_files(files, ExportFormat.CSV) == 'src/a.py,"docs/my guide.md"'

    def test_json(self, files):
        assert serialize_files(files, ExportFormat.JSON) == '["src/a.py","docs/my guide.md"]'

    def test_shell(self, files):
        assert serialize_files(files, ExportFormat.SHELL) == "src/a.py 'docs/my guide.md'"

    def test_escape(self, files):
        assert serialize_files(files, ExportFormat.ESCAPE) == "src/a.py docs/my\\ guide.md"

    def test_none(self, files):
        assert serialize_files(files, ExportFormat.NONE) == ""

    def test_empty_list(self):
        assert serialize_files([], ExportFormat.JSON) == "[]"
        assert serialize_files([], ExportFormat.CSV) == ""
