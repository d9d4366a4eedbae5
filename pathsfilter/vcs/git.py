#!/usr/bin/env python3
"""Change detection with the local git repository.

This module lists changed files for the common comparison modes:
- Last commit
- Two refs compared directly (``base..head``)
- Working tree and index against HEAD
- Head against its merge-base with base (``base...head``), deepening a
  shallow clone until the merge-base is found
- Every tracked file, reported as added (initial push)

Renames are never detected: a moved file shows up as one deleted and one
added record.

Example:
    >>> files = get_changes("main", "feature/login")
    >>> [str(f) for f in files]
    ['src/login.py [added]', 'src/auth.py [modified]']
"""

import re
import subprocess
from typing import List, Optional, Sequence

from pathsfilter.core.constants import HEAD, ChangedFile, ChangeStatus, ErrorCode, Limits
from pathsfilter.core.logging import get_logger

DIFF_ARGS = ["--no-renames", "--name-status", "-z"]

_REF_PATTERN = re.compile(r"refs/(?:heads|tags|remotes/origin)/(.*)$")
_SHA_PATTERN = re.compile(r"[0-9a-f]{40}")


class GitError(Exception):
    """Raised when a git command fails or a ref cannot be resolved."""

    def __init__(
        self,
        message: str,
        command: Optional[Sequence[str]] = None,
        stderr: str = "",
        error_code: ErrorCode = ErrorCode.DEPENDENCY_ERROR,
    ):
        self.message = message
        self.command = list(command) if command else []
        self.stderr = stderr
        self.error_code = error_code
        super().__init__(message)


def run_git(args: Sequence[str], check: bool = True) -> subprocess.CompletedProcess:
    """Run a git command and capture its output.

    Args:
        args: Arguments following ``git``
        check: Raise GitError on a non-zero exit code

    Returns:
        Completed process with text stdout/stderr

    Raises:
        GitError: If git is missing, times out, or fails while check is set
    """
    command = ["git", *args]
    get_logger().debug("Running git", command=" ".join(command))

    try:
        result = subprocess.run(
            command,
            capture_output=True,
            encoding="utf-8",
            errors="surrogateescape",
            timeout=Limits.GIT_TIMEOUT,
        )
    except FileNotFoundError:
        raise GitError("git executable not found", command)
    except subprocess.TimeoutExpired:
        raise GitError(f"Command '{' '.join(command)}' timed out", command, error_code=ErrorCode.INTERNAL_ERROR)

    if check and result.returncode != 0:
        stderr = (result.stderr or "").strip()
        raise GitError(
            f"Command '{' '.join(command)}' failed with exit code {result.returncode}: {stderr}",
            command,
            stderr,
        )
    return result


def parse_diff_output(output: str) -> List[ChangedFile]:
    """Parse ``git diff --name-status -z`` output.

    The output alternates status letters and paths, all NUL-terminated:
    ``M\\0src/a.py\\0A\\0docs/b.md\\0``. Records with an unknown status
    letter are skipped.

    Args:
        output: Raw stdout of git

    Returns:
        Changed files in output order
    """
    tokens = [token for token in output.split("\0") if token]
    files: List[ChangedFile] = []

    for i in range(0, len(tokens) - 1, 2):
        letter, path = tokens[i], tokens[i + 1]
        try:
            status = ChangeStatus.from_git_letter(letter)
        except KeyError:
            continue
        files.append(ChangedFile(path=path, status=status))

    return files


def _diff(*revisions: str) -> List[ChangedFile]:
    output = run_git(["diff", *DIFF_ARGS, *revisions]).stdout
    return parse_diff_output(output)


def get_changes_in_last_commit() -> List[ChangedFile]:
    """Get files changed by the most recent commit."""
    with get_logger().group("Change detection in last commit"):
        output = run_git(["log", "--format=", *DIFF_ARGS, "-n", "1"]).stdout
    return parse_diff_output(output)


def get_changes(base: str, head: str) -> List[ChangedFile]:
    """Get files changed between two refs, compared directly.

    Both refs are fetched from origin first when missing locally.

    Raises:
        GitError: If a ref cannot be resolved or git fails
    """
    base_ref = ensure_ref_available(base)
    head_ref = ensure_ref_available(head)

    with get_logger().group(f"Change detection {base}..{head}"):
        return _diff(f"{base_ref}..{head_ref}")


def get_changes_on_head() -> List[ChangedFile]:
    """Get staged and unstaged changes against HEAD."""
    with get_logger().group("Change detection on HEAD"):
        return _diff(HEAD)


def get_changes_since_merge_base(base: str, head: str, initial_fetch_depth: int) -> List[ChangedFile]:
    """Get files changed on head since its merge-base with base.

    In a shallow clone the history is deepened, doubling the depth each
    round, until a merge-base appears. When fetching stops producing new
    commits the full history is fetched once more; if there is still no
    merge-base the refs are compared directly.

    Args:
        base: Base ref name or SHA
        head: Head ref name or SHA
        initial_fetch_depth: Number of commits to fetch in the first round

    Raises:
        GitError: If a ref cannot be resolved or git fails
    """
    logger = get_logger()
    base_ref = get_local_ref(base)
    head_ref = get_local_ref(head)
    no_merge_base = False

    def has_merge_base() -> bool:
        if base_ref is None or head_ref is None:
            return False
        return run_git(["merge-base", base_ref, head_ref], check=False).returncode == 0

    with logger.group(f"Searching for merge-base {base}...{head}"):
        if not has_merge_base():
            run_git(["fetch", "--no-tags", f"--depth={initial_fetch_depth}", "origin", base, head])

            if base_ref is None or head_ref is None:
                base_ref = base_ref or get_local_ref(base)
                head_ref = head_ref or get_local_ref(head)

                if base_ref is None or head_ref is None:
                    # exits with 1 when remote tags were updated
                    run_git(["fetch", "--tags", "--depth=1", "origin", base, head], check=False)
                    base_ref = base_ref or get_local_ref(base)
                    head_ref = head_ref or get_local_ref(head)

                    if base_ref is None:
                        raise GitError(_unresolved_message(base), error_code=ErrorCode.NOT_FOUND)
                    if head_ref is None:
                        raise GitError(_unresolved_message(head), error_code=ErrorCode.NOT_FOUND)

            depth = initial_fetch_depth
            last_commit_count = _get_commit_count()
            while not has_merge_base():
                depth = min(depth * 2, Limits.MAX_FETCH_DEPTH)
                run_git(["fetch", f"--deepen={depth}", "origin", base, head])
                commit_count = _get_commit_count()

                if commit_count == last_commit_count:
                    logger.info("No more commits were fetched")
                    logger.info("Last attempt will be to fetch full history")
                    run_git(["fetch"])
                    if not has_merge_base():
                        no_merge_base = True
                    break
                last_commit_count = commit_count

    diff_arg = f"{base_ref}...{head_ref}"
    if no_merge_base:
        logger.warning(
            "No merge base found - change detection will use direct <commit>..<commit> comparison"
        )
        diff_arg = f"{base_ref}..{head_ref}"

    with logger.group(f"Change detection {diff_arg}"):
        return _diff(diff_arg)


def list_all_files_as_added() -> List[ChangedFile]:
    """List every tracked file with status added."""
    with get_logger().group("Listing all files tracked by git"):
        output = run_git(["ls-files", "-z"]).stdout

    return [
        ChangedFile(path=path, status=ChangeStatus.ADDED)
        for path in output.split("\0")
        if path
    ]


def get_current_ref() -> str:
    """Get the checked-out branch, else the exact tag, else the HEAD SHA."""
    with get_logger().group("Get current git ref"):
        branch = run_git(["branch", "--show-current"]).stdout.strip()
        if branch:
            return branch

        describe = run_git(["describe", "--tags", "--exact-match"], check=False)
        if describe.returncode == 0:
            return describe.stdout.strip()

        return run_git(["rev-parse", HEAD]).stdout.strip()


def get_short_name(ref: Optional[str]) -> Optional[str]:
    """Strip ``refs/heads/`` or ``refs/tags/`` from a ref.

    Returns:
        Short name, or None when ref is empty
    """
    if not ref:
        return None

    for prefix in ("refs/heads/", "refs/tags/"):
        if ref.startswith(prefix):
            return ref[len(prefix):]
    return ref


def is_git_sha(ref: str) -> bool:
    """Check if ref looks like a full 40-character commit SHA."""
    return _SHA_PATTERN.fullmatch(ref) is not None


def get_local_ref(short_name: str) -> Optional[str]:
    """Resolve a short name to a local ref, preferring remote-tracking refs.

    Returns:
        Full ref name (or the SHA itself), or None if not available locally
    """
    if is_git_sha(short_name):
        return short_name if _has_commit(short_name) else None

    output = run_git(["show-ref", short_name], check=False).stdout
    refs = []
    for line in output.splitlines():
        match = _REF_PATTERN.search(line)
        if match and match.group(1) == short_name:
            refs.append(match.group(0))

    if not refs:
        return None

    for ref in refs:
        if ref.startswith("refs/remotes/origin/"):
            return ref
    return refs[0]


def ensure_ref_available(name: str) -> str:
    """Resolve a ref locally, fetching it from origin as a branch or tag if needed.

    Raises:
        GitError: If the ref still cannot be resolved after fetching
    """
    with get_logger().group(f"Ensuring {name} is fetched from origin"):
        ref = get_local_ref(name)
        if ref is None:
            run_git(["fetch", "--depth=1", "--no-tags", "origin", name])
            ref = get_local_ref(name)

        if ref is None:
            run_git(["fetch", "--depth=1", "--tags", "origin", name])
            ref = get_local_ref(name)

        if ref is None:
            raise GitError(_unresolved_message(name), error_code=ErrorCode.NOT_FOUND)

        return ref


def _has_commit(ref: str) -> bool:
    return run_git(["cat-file", "-e", f"{ref}^{{commit}}"], check=False).returncode == 0


def _get_commit_count() -> int:
    output = run_git(["rev-list", "--count", "--all"]).stdout
    try:
        return int(output.strip())
    except ValueError:
        return 0


def _unresolved_message(name: str) -> str:
    return f"Could not determine what is {name} - fetch works but it's not a branch, tag or commit SHA"
