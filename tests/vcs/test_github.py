#!/usr/bin/env python3
"""Tests for pull request file listing normalization."""

import json

import pytest

from pathsfilter.core.constants import ChangedFile, ChangeStatus, ErrorCode
from pathsfilter.core.validators import ValidationError
from pathsfilter.vcs.github import files_from_pull_request, load_pull_request_files


class TestFilesFromPullRequest:
    """Tests for files_from_pull_request."""

    def test_plain_statuses(self):
        rows = [
            {"filename": "a.py", "status": "added"},
            {"filename": "b.py", "status": "modified"},
            {"filename": "c.py", "status": "copied"},
        ]

        assert files_from_pull_request(rows) == [
            ChangedFile("a.py", ChangeStatus.ADDED),
            ChangedFile("b.py", ChangeStatus.MODIFIED),
            ChangedFile("c.py", ChangeStatus.COPIED),
        ]

    def test_rename_becomes_added_and_deleted(self):
        rows = [{"filename": "new.py", "status": "renamed", "previous_filename": "old.py"}]

        assert files_from_pull_request(rows) == [
            ChangedFile("new.py", ChangeStatus.ADDED),
            ChangedFile("old.py", ChangeStatus.DELETED),
        ]

    def test_rename_without_previous_filename(self):
        rows = [{"filename": "new.py", "status": "renamed"}]
        assert files_from_pull_request(rows) == [ChangedFile("new.py", ChangeStatus.ADDED)]

    def test_aliases(self):
        rows = [
            {"filename": "gone.py", "status": "removed"},
            {"filename": "mode.sh", "status": "changed"},
            {"filename": "same.py", "status": "unchanged"},
        ]

        assert files_from_pull_request(rows) == [
            ChangedFile("gone.py", ChangeStatus.DELETED),
            ChangedFile("mode.sh", ChangeStatus.MODIFIED),
        ]

    def test_unknown_status(self):
        with pytest.raises(ValidationError, match="Unknown pull request file status 'moved'"):
            files_from_pull_request([{"filename": "a.py", "status": "moved"}])

    def test_missing_filename(self):
        with pytest.raises(ValidationError, match="has no filename"):
            files_from_pull_request([{"status": "added"}])


class TestLoadPullRequestFiles:
    """Tests for load_pull_request_files."""

    def test_list_document(self, temp_dir):
        path = temp_dir / "files.json"
        path.write_text(json.dumps([{"filename": "a.py", "status": "added"}]))

        assert load_pull_request_files(path) == [ChangedFile("a.py", ChangeStatus.ADDED)]

    def test_object_document(self, temp_dir):
        path = temp_dir / "files.json"
        path.write_text(json.dumps({"files": [{"filename": "a.py", "status": "removed"}]}))

        assert load_pull_request_files(str(path)) == [ChangedFile("a.py", ChangeStatus.DELETED)]

    def test_missing_file(self, temp_dir):
        with pytest.raises(ValidationError) as exc_info:
            load_pull_request_files(temp_dir / "missing.json")
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_invalid_json(self, temp_dir):
        path = temp_dir / "files.json"
        path.write_text("{not json")

        with pytest.raises(ValidationError, match="Failed to read"):
            load_pull_request_files(path)

    def test_wrong_shape(self, temp_dir):
        path = temp_dir / "files.json"
        path.write_text(json.dumps({"files": "a.py"}))

        with pytest.raises(ValidationError, match="must contain a list of objects"):
            load_pull_request_files(path)
