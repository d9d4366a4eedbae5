"""pathsfilter - Match changed files against named path filters.

Filters are written in YAML, compiled once into a rule table and then
evaluated against the files changed between two revisions:

    from pathsfilter.rules import RuleEngine, load_filters

    table = load_filters("src:\\n  - 'src/**'")
    results = RuleEngine(table, "some").match(files)

Subpackages:
    pathsfilter.core: Constants, configuration, logging and validation
    pathsfilter.rules: Glob patterns, rule compiler and matcher
    pathsfilter.vcs: Changed-file sources (git, pull request listings)
    pathsfilter.output: Result encodings and output export
"""

from pathsfilter.core.constants import (
    PATHSFILTER_VERSION,
    ChangedFile,
    ChangeStatus,
    ExportFormat,
    PredicateQuantifier,
)

__version__ = PATHSFILTER_VERSION

__all__ = [
    "__version__",
    "ChangedFile",
    "ChangeStatus",
    "ExportFormat",
    "PredicateQuantifier",
]
