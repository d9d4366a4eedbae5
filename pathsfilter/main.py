#!/usr/bin/env python3
"""Main entry point for a pathsfilter run.

This module handles:
- Resolving the filters input (file path or inline YAML)
- Compiling filters into a rule table
- Choosing the change source and listing changed files
- Matching files against filters
- Exporting results

Example:
    >>> from pathsfilter.main import run_paths_filter
    >>> run_paths_filter(settings, logger)
    0
"""

import json
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from pathsfilter.core.config import ConfigError, Settings
from pathsfilter.core.constants import HEAD, NULL_SHA, ChangedFile, ErrorCode
from pathsfilter.core.logging import Logger
from pathsfilter.core.validators import ValidationError
from pathsfilter.output.exporter import build_outputs, write_outputs
from pathsfilter.rules.compiler import load_filters
from pathsfilter.rules.engine import MatchResult, RuleEngine, RuleTable
from pathsfilter.vcs import git
from pathsfilter.vcs.git import GitError
from pathsfilter.vcs.github import load_pull_request_files


def is_path_input(text: str) -> bool:
    """Check if the filters input names a file rather than inline YAML."""
    return not ("\n" in text or ":" in text)


def read_filters_file(config_path: str) -> str:
    """Read a filters file.

    Raises:
        ConfigError: If the path does not exist or is not a regular file
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigError(f"Configuration file '{config_path}' not found", ErrorCode.NOT_FOUND)

    if path.is_symlink() or not path.is_file():
        raise ConfigError(f"'{config_path}' is not a file.")

    return path.read_text(encoding="utf-8")


def resolve_filters(text: str) -> str:
    """Return the YAML filter definitions for the filters input."""
    return read_filters_file(text) if is_path_input(text) else text


def detect_changes(settings: Settings, logger: Logger) -> List[ChangedFile]:
    """List changed files from the source selected by the settings.

    - ``base`` set to HEAD: uncommitted changes in the working tree
    - ``pr_files`` set: a pull request file listing
    - otherwise: git history between the resolved base and head

    Raises:
        ConfigError: If base or head cannot be determined
        GitError: If git fails
        ValidationError: If the pull request listing is malformed
    """
    if settings.base == HEAD:
        if settings.ref:
            logger.warning("'ref' input parameter is ignored when 'base' is set to HEAD")
        return git.get_changes_on_head()

    if settings.pr_files:
        if settings.ref:
            logger.warning("'ref' input parameter is ignored when pull request files are given")
        if settings.base:
            logger.warning("'base' input parameter is ignored when pull request files are given")
        return load_pull_request_files(settings.pr_files)

    return _changes_from_git(settings, logger)


def _changes_from_git(settings: Settings, logger: Logger) -> List[ChangedFile]:
    default_branch = settings.default_branch or None
    current_ref = git.get_current_ref()

    head = git.get_short_name(settings.ref or current_ref)
    base = git.get_short_name(settings.base or default_branch)

    if not head:
        raise ConfigError(
            "'ref' must be configured or a branch, tag or commit must be checked out"
        )
    if not base:
        raise ConfigError("'base' or 'default_branch' must be configured")

    is_base_sha = git.is_git_sha(base)
    if is_base_sha or base == head:
        base_sha = base if is_base_sha else settings.before
        if not base_sha:
            logger.warning("'before' is not set - changes will be detected from last commit")
            if head != current_ref:
                logger.warning(f"Ref {head} is not checked out - results might be incorrect!")
            return git.get_changes_in_last_commit()

        if base_sha == NULL_SHA:
            if default_branch and base != default_branch:
                logger.info(
                    f"First push of a branch detected - changes will be detected "
                    f"against the default branch {default_branch}"
                )
                return git.get_changes_since_merge_base(
                    default_branch, head, settings.initial_fetch_depth
                )

            logger.info("Initial push detected - all files will be listed as added")
            if head != current_ref:
                logger.warning(f"Ref {head} is not checked out - results might be incorrect!")
            return git.list_all_files_as_added()

        logger.info(f"Changes will be detected between {base_sha} and {head}")
        return git.get_changes(base_sha, head)

    logger.info(f"Changes will be detected between {base} and {head}")
    return git.get_changes_since_merge_base(base, head, settings.initial_fetch_depth)


class PathsFilterMain:
    """
    Main class for one pathsfilter run.

    Handles rule loading, change detection, matching and export.
    """

    def __init__(self, settings: Settings, logger: Logger):
        """
        Initialize pathsfilter main controller.

        Args:
            settings: Validated settings
            logger: Logger instance
        """
        self.settings = settings
        self.logger = logger

        self.rule_engine: Optional[RuleEngine] = None
        self.files: List[ChangedFile] = []
        self.results: MatchResult = {}
        self.outputs: Dict[str, str] = {}

    def load_rules(self) -> RuleTable:
        """
        Compile the configured filters.

        Raises:
            ConfigError: If the filters file cannot be read
            FilterFormatError: If the filter definitions are malformed
        """
        table = load_filters(resolve_filters(self.settings.filters))
        self.rule_engine = RuleEngine(table, self.settings.predicate_quantifier)
        self.logger.debug(
            "Filters loaded",
            filters=len(table),
            quantifier=self.settings.predicate_quantifier.value,
        )
        return table

    def export(self, results: MatchResult) -> Dict[str, str]:
        """
        Build outputs and write them to the output file, or stdout as JSON.
        """
        outputs = build_outputs(results, self.settings.list_files, self.logger)

        if self.settings.output_file:
            write_outputs(outputs, self.settings.output_file)
            self.logger.debug("Outputs written", path=self.settings.output_file)
        else:
            print(json.dumps(outputs, indent=2, ensure_ascii=False))

        return outputs

    def execute(self) -> Dict[str, str]:
        """
        Run all steps, letting errors propagate.

        Returns:
            Output name mapped to value
        """
        self.load_rules()
        self.files = detect_changes(self.settings, self.logger)
        self.logger.info(f"Detected {len(self.files)} changed files")

        self.results = self.rule_engine.match(self.files)
        self.outputs = self.export(self.results)
        return self.outputs

    def run(self) -> int:
        """
        Run in the configured working directory.

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        original_cwd = os.getcwd()
        try:
            if self.settings.working_directory:
                os.chdir(self.settings.working_directory)

            self.execute()
            return 0

        except (ConfigError, ValidationError, GitError) as e:
            self.logger.error(str(e))
            return 1

        except OSError as e:
            self.logger.error(f"I/O error: {e}")
            return 1

        except KeyboardInterrupt:
            self.logger.info("Interrupted by user")
            return 130

        finally:
            os.chdir(original_cwd)


def run_paths_filter(settings: Settings, logger: Logger) -> int:
    """
    Main entry point for a pathsfilter run.

    Args:
        settings: Validated settings
        logger: Logger instance

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    return PathsFilterMain(settings, logger).run()


def main():
    """
    Entry point when run as standalone script.
    """
    from pathsfilter.cli import main as cli_main

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
