#!/usr/bin/env python3
"""Export of match results as named outputs.

For each filter the following outputs are produced:
- ``<name>``: ``true`` if any file matched, else ``false``
- ``<name>_count``: number of matching files
- ``<name>_files``: encoded file list (unless the format is ``none``)

plus ``changes``, a JSON list of the filters that matched. When a filter
is itself named ``changes`` the aggregate is skipped so the filter's own
output wins.
"""

import uuid
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Union

from pathsfilter.core.constants import CHANGES_OUTPUT, ChangedFile, ExportFormat
from pathsfilter.core.logging import Logger, get_logger
from pathsfilter.output.formats import serialize_files, to_json


def build_outputs(
    results: Mapping[str, Sequence[ChangedFile]],
    fmt: ExportFormat,
    logger: Optional[Logger] = None,
) -> Dict[str, str]:
    """Build output values from match results.

    Args:
        results: Filter name mapped to matching files
        fmt: Encoding for the ``<name>_files`` outputs
        logger: Logger for the per-filter report

    Returns:
        Output name mapped to its string value, in filter order
    """
    logger = logger or get_logger()
    outputs: Dict[str, str] = {}
    changes = []

    logger.info("Results:")
    for name, files in results.items():
        matched = len(files) > 0
        with logger.group(f"Filter {name} = {str(matched).lower()}"):
            if matched:
                changes.append(name)
                logger.info("Matching files:")
                for file in files:
                    logger.info(str(file))
            else:
                logger.info("Matching files: none")

        outputs[name] = str(matched).lower()
        outputs[f"{name}_count"] = str(len(files))
        if fmt is not ExportFormat.NONE:
            outputs[f"{name}_files"] = serialize_files(files, fmt)

    if CHANGES_OUTPUT not in results:
        changes_json = to_json(changes)
        logger.info(f"Changes output set to {changes_json}")
        outputs[CHANGES_OUTPUT] = changes_json
    else:
        logger.warning("Cannot set changes output variable - name already used by filter output")

    return outputs


def write_outputs(outputs: Mapping[str, str], path: Union[str, Path]) -> None:
    """Append outputs to a GitHub Actions style output file.

    Single-line values are written as ``name=value``; multi-line values use
    a heredoc with a random delimiter.

    Args:
        outputs: Output name mapped to value
        path: Output file (e.g. the value of ``$GITHUB_OUTPUT``)
    """
    lines = []
    for name, value in outputs.items():
        if "\n" in value or "\r" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            lines.append(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            lines.append(f"{name}={value}\n")

    with open(path, "a", encoding="utf-8") as f:
        f.writelines(lines)
