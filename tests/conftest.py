"""Shared pytest fixtures for pathsfilter tests."""
import tempfile
from pathlib import Path
from typing import Callable, Generator, List

import pytest

from pathsfilter.core.constants import ChangedFile, ChangeStatus
from pathsfilter.core.logging import Logger


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_file() -> Callable[..., ChangedFile]:
    """Factory for ChangedFile records (status given as its string value)."""

    def _make(path: str, status: str = "modified") -> ChangedFile:
        return ChangedFile(path, ChangeStatus(status))

    return _make


@pytest.fixture
def sample_files(make_file) -> List[ChangedFile]:
    """A small change set touching source, docs and CI files."""
    return [
        make_file("src/app/main.py", "modified"),
        make_file("src/app/new_feature.py", "added"),
        make_file("docs/guide.md", "modified"),
        make_file("README.md", "modified"),
        make_file(".github/workflows/ci.yml", "added"),
        make_file("src/legacy.py", "deleted"),
    ]


@pytest.fixture
def sample_filters() -> str:
    """Filter document using every rule item shape."""
    return """
shared: &shared
  - 'common/**'
src:
  - 'src/**'
docs:
  - '**/*.md'
new_code:
  - added: 'src/**'
ci:
  - *shared
  - added|modified: '.github/**'
"""


@pytest.fixture
def quiet_logger() -> Logger:
    """Logger that only reports errors."""
    return Logger("pathsfilter.tests", level="ERROR")
