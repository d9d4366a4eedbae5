"""pathsfilter change detection.

Sources of the changed-file list consumed by the rule engine:
- git: Local repository diffs (last commit, ref ranges, merge-base, HEAD)
- github: Normalized pull request file listings
"""

from .git import GitError, parse_diff_output
from .github import files_from_pull_request, load_pull_request_files

__all__ = [
    "GitError",
    "parse_diff_output",
    "files_from_pull_request",
    "load_pull_request_files",
]
