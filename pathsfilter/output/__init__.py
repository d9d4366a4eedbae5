"""pathsfilter output layer.

- formats: CSV, JSON, shell and backslash encodings of file lists
- exporter: Per-filter outputs and the aggregate ``changes`` output
"""

from .exporter import build_outputs, write_outputs
from .formats import backslash_escape, csv_escape, serialize_files, shell_escape

__all__ = [
    "backslash_escape",
    "csv_escape",
    "shell_escape",
    "serialize_files",
    "build_outputs",
    "write_outputs",
]
