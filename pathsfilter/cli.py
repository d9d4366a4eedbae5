#!/usr/bin/env python3
"""Command-line interface for pathsfilter.

This module provides the CLI for matching changed files against filters:
- Argument parsing and validation
- Configuration loading (file, environment, arguments)
- Logging setup
- Help and version information

Example:
    >>> from pathsfilter.cli import parse_arguments
    >>> args = parse_arguments(['--filters', '.github/filters.yaml', '--base', 'main'])
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pathsfilter.core.config import ConfigError, ConfigManager, Settings
from pathsfilter.core.constants import PATHSFILTER_VERSION, ExportFormat, PredicateQuantifier
from pathsfilter.core.logging import Logger, set_global_logger

DESCRIPTION = "pathsfilter - Match changed files against named path filters"


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
        CLIError: If the arguments are inconsistent
    """
    parser = argparse.ArgumentParser(
        prog="pathsfilter",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Compare the current branch with main
  pathsfilter --filters .github/filters.yaml --base main

  # Inline filters, uncommitted changes only
  pathsfilter --filters $'src:\\n  - src/**' --base HEAD

  # Write GitHub Actions outputs with JSON file lists
  pathsfilter --config pathsfilter.yaml --list-files json --output-file "$GITHUB_OUTPUT"

  # Use a pull request file listing instead of git
  pathsfilter --filters filters.yaml --pr-files pr-files.json

Settings may also come from PATHSFILTER_* environment variables,
e.g. PATHSFILTER_LIST_FILES=csv or PATHSFILTER_LOGGING__LEVEL=DEBUG.
        """,
    )

    # Version
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {PATHSFILTER_VERSION}",
    )

    # Configuration file
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Settings file path (YAML format)",
    )

    # Filters
    parser.add_argument(
        "-f",
        "--filters",
        metavar="YAML|FILE",
        type=str,
        help="Filter definitions as inline YAML, or path to a YAML file",
    )

    # Change detection options
    git_group = parser.add_argument_group("change detection options")

    git_group.add_argument(
        "--base",
        metavar="REF",
        type=str,
        help="Branch, tag or commit to compare against, or HEAD for uncommitted changes",
    )

    git_group.add_argument(
        "--ref",
        metavar="REF",
        type=str,
        help="Branch, tag or commit to inspect (default: currently checked out ref)",
    )

    git_group.add_argument(
        "--before",
        metavar="SHA",
        type=str,
        help="Commit before the push, used when base equals ref",
    )

    git_group.add_argument(
        "--default-branch",
        metavar="BRANCH",
        type=str,
        help="Repository default branch, used when --base is not given",
    )

    git_group.add_argument(
        "--initial-fetch-depth",
        metavar="N",
        type=int,
        help="Number of commits fetched before searching for a merge base (default: 100)",
    )

    git_group.add_argument(
        "--working-directory",
        metavar="DIR",
        type=str,
        help="Repository directory (default: current directory)",
    )

    git_group.add_argument(
        "--pr-files",
        metavar="FILE",
        type=str,
        help="JSON listing of pull request files to use instead of git",
    )

    # Matching and output options
    output_group = parser.add_argument_group("matching and output options")

    output_group.add_argument(
        "--predicate-quantifier",
        choices=[q.value for q in PredicateQuantifier],
        help="Whether some or every predicate of a filter must match (default: some)",
    )

    output_group.add_argument(
        "--list-files",
        choices=[f.value for f in ExportFormat],
        help="Format of the <filter>_files outputs (default: none)",
    )

    output_group.add_argument(
        "--output-file",
        metavar="FILE",
        type=str,
        help="Append outputs as name=value lines (default: print JSON to stdout)",
    )

    # Logging options
    log_group = parser.add_argument_group("logging options")

    log_group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    log_group.add_argument(
        "--log-file",
        metavar="FILE",
        type=str,
        help="Also write logs to FILE",
    )

    # Parse arguments
    parsed = parser.parse_args(args)

    # Validate arguments
    _validate_arguments(parsed)

    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments namespace

    Raises:
        CLIError: If validation fails
    """
    if args.config:
        config_path = Path(args.config)

        if not config_path.exists():
            raise CLIError(f"Configuration file does not exist: {args.config}")

        if not config_path.is_file():
            raise CLIError(f"Configuration path is not a file: {args.config}")

    if args.working_directory and not Path(args.working_directory).is_dir():
        raise CLIError(f"Working directory does not exist: {args.working_directory}")

    if args.initial_fetch_depth is not None and args.initial_fetch_depth < 1:
        raise CLIError(f"--initial-fetch-depth must be positive, got {args.initial_fetch_depth}")


def build_config_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Build configuration dictionary from command-line arguments.

    Options that were not given are left as None so that the config file
    and environment still apply.

    Args:
        args: Parsed arguments namespace

    Returns:
        Configuration dictionary for ConfigManager
    """
    config: Dict[str, Any] = {
        "filters": args.filters,
        "base": args.base,
        "ref": args.ref,
        "before": args.before,
        "default_branch": args.default_branch,
        "initial_fetch_depth": args.initial_fetch_depth,
        "working_directory": args.working_directory,
        "pr_files": _absolute(args.pr_files),
        "predicate_quantifier": args.predicate_quantifier,
        "list_files": args.list_files,
        "output_file": _absolute(args.output_file),
    }

    logging_config = {}
    if args.debug:
        logging_config["level"] = "DEBUG"
    if args.log_file:
        logging_config["file"] = args.log_file
    if logging_config:
        config["logging"] = logging_config

    return config


def _absolute(path: Optional[str]) -> Optional[str]:
    """Anchor a path given on the command line to the invocation directory."""
    if not path:
        return path
    return str(Path(path).expanduser().absolute())


def load_settings(args: argparse.Namespace, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Merge the config file, environment and arguments into Settings.

    Raises:
        ConfigError: If the merged configuration is invalid
    """
    config = ConfigManager(args.config, environ=environ)
    config.load_dict(build_config_from_args(args))
    return config.settings()


def setup_logging(settings: Settings) -> Logger:
    """
    Setup logging based on settings.

    Args:
        settings: Validated settings

    Returns:
        Configured logger instance
    """
    logger = Logger("pathsfilter", level=settings.log_level)

    if settings.log_file:
        logger.add_handler(logger.create_file_handler(settings.log_file))
        logger.debug(f"Logging to file: {settings.log_file}")

    set_global_logger(logger)
    return logger


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Handles argument parsing and configuration, then passes control to
    pathsfilter.main for change detection and matching.
    """
    try:
        args = parse_arguments(argv)
        settings = load_settings(args)
        logger = setup_logging(settings)

        from pathsfilter.main import run_paths_filter

        return run_paths_filter(settings, logger)

    except (CLIError, ConfigError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        import traceback

        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
