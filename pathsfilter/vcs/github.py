#!/usr/bin/env python3
"""Normalization of pull request file listings.

Hosted pull request APIs report one row per file with a status vocabulary
that differs from git's. Rows are normalized to the same shape git diff
produces:
- ``renamed`` becomes an added record for the new path and a deleted
  record for the previous path
- ``removed`` becomes deleted
- ``changed`` (metadata-only change) becomes modified
- ``unchanged`` rows are dropped
"""

import json
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Union

from pathsfilter.core.constants import ChangedFile, ChangeStatus, ErrorCode
from pathsfilter.core.logging import get_logger
from pathsfilter.core.validators import ValidationError

_STATUS_ALIASES = {
    "removed": ChangeStatus.DELETED,
    "changed": ChangeStatus.MODIFIED,
}


def files_from_pull_request(rows: Iterable[Mapping[str, Any]]) -> List[ChangedFile]:
    """Convert pull request file rows into changed files.

    Args:
        rows: Rows with ``filename``, ``status`` and, for renames,
            ``previous_filename``

    Returns:
        Changed files in row order

    Raises:
        ValidationError: If a row has no filename or an unknown status
    """
    logger = get_logger()
    files: List[ChangedFile] = []

    for row in rows:
        filename = row.get("filename")
        status = row.get("status")
        if not filename or not isinstance(filename, str):
            raise ValidationError(f"Pull request file row has no filename: {dict(row)}")

        logger.debug(f"[{status}] {filename}")

        if status == "renamed":
            files.append(ChangedFile(path=filename, status=ChangeStatus.ADDED))
            previous = row.get("previous_filename")
            if previous:
                files.append(ChangedFile(path=previous, status=ChangeStatus.DELETED))
            else:
                logger.warning("Renamed file has no previous filename", filename=filename)
            continue

        if status == "unchanged":
            continue

        if status in _STATUS_ALIASES:
            files.append(ChangedFile(path=filename, status=_STATUS_ALIASES[status]))
            continue

        try:
            files.append(ChangedFile(path=filename, status=ChangeStatus(status)))
        except ValueError:
            raise ValidationError(f"Unknown pull request file status '{status}' for {filename}")

    return files


def load_pull_request_files(path: Union[str, Path]) -> List[ChangedFile]:
    """Read pull request file rows from a JSON file.

    The file holds either a list of rows or an object with a ``files`` list.

    Raises:
        ValidationError: If the file is missing, unreadable or malformed
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ValidationError(f"Pull request files '{path}' not found", ErrorCode.NOT_FOUND)

    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ValidationError(f"Failed to read pull request files '{path}': {e}")

    if isinstance(data, dict):
        data = data.get("files")
    if not isinstance(data, list) or not all(isinstance(row, dict) for row in data):
        raise ValidationError(f"Pull request files '{path}' must contain a list of objects")

    return files_from_pull_request(data)
