"""
pathsfilter Core: Input Validators.

This module provides validation for configuration values, filter names,
change-status tokens and glob patterns, together with the exception types
raised when user input is rejected.
"""
from typing import Any, Union

from pathsfilter.core.constants import (
    ChangeStatus,
    ErrorCode,
    ExportFormat,
    Limits,
    PredicateQuantifier,
)
from pathsfilter.core.logging import LogLevel


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


class FilterFormatError(ValidationError):
    """Raised when a filter document has an unsupported shape.

    The message always reads ``Invalid filter YAML format: <reason>.``
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid filter YAML format: {reason}.")


def describe_type(value: Any) -> str:
    """Return a short, user-facing name for the type of a decoded YAML node."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def validate_filter_name(name: Any) -> str:
    """Validate a filter name.

    Args:
        name: Mapping key from the filter document

    Returns:
        The name, unchanged

    Raises:
        FilterFormatError: If the name is not a non-empty string
    """
    if not isinstance(name, str):
        raise FilterFormatError(
            f"Filter name must be a string, but {describe_type(name)} '{name}' found"
        )
    if not name:
        raise FilterFormatError("Filter name cannot be empty")
    return name


def validate_pattern(pattern: Any) -> str:
    """Validate a glob pattern taken from the filter document.

    Args:
        pattern: Pattern node

    Returns:
        The pattern, unchanged

    Raises:
        FilterFormatError: If pattern is not a usable glob string
    """
    if not isinstance(pattern, str):
        raise FilterFormatError(
            f"Expected pattern:string, but {describe_type(pattern)} '{pattern}' found"
        )

    if not pattern:
        raise FilterFormatError("Pattern cannot be empty")

    if "\0" in pattern:
        raise FilterFormatError(f"Pattern contains null bytes: {pattern!r}")

    return pattern


def validate_change_status(token: str) -> ChangeStatus:
    """Resolve one status token of a status-spec.

    Args:
        token: Trimmed, lower-cased token such as ``added``

    Returns:
        Matching ChangeStatus

    Raises:
        FilterFormatError: If the token names no known status
    """
    try:
        return ChangeStatus(token)
    except ValueError:
        valid = ", ".join(s.value for s in ChangeStatus)
        raise FilterFormatError(f"Unknown change status '{token}'. Valid values: {valid}")


def validate_export_format(value: Union[str, ExportFormat]) -> ExportFormat:
    """Validate the ``list_files`` setting.

    Raises:
        ValidationError: If value is not a supported export format
    """
    if isinstance(value, ExportFormat):
        return value
    try:
        return ExportFormat(str(value).lower())
    except ValueError:
        raise ValidationError(f"Input parameter 'list-files' is set to invalid value '{value}'")


def validate_predicate_quantifier(value: Union[str, PredicateQuantifier]) -> PredicateQuantifier:
    """Validate the ``predicate_quantifier`` setting.

    Raises:
        ValidationError: If value is neither ``some`` nor ``every``
    """
    if isinstance(value, PredicateQuantifier):
        return value
    try:
        return PredicateQuantifier(value)
    except ValueError:
        valid = ", ".join(q.value for q in PredicateQuantifier)
        raise ValidationError(
            f"Input parameter 'predicate-quantifier' is set to invalid value "
            f"'{value}'. Valid values: {valid}"
        )


def validate_log_level(level: Any) -> str:
    """Validate the ``logging.level`` setting.

    Returns:
        Upper-cased level name (e.g. ``"DEBUG"``)

    Raises:
        ValidationError: If level names no known LogLevel
    """
    name = str(level).strip().upper()
    if name not in LogLevel.__members__:
        valid = ", ".join(LogLevel.__members__)
        raise ValidationError(f"Invalid log level '{level}'. Valid values: {valid}")
    return name


def validate_fetch_depth(depth: Union[int, str]) -> int:
    """Validate the initial fetch depth used for merge-base detection.

    Raises:
        ValidationError: If depth is not a positive integer
    """
    if isinstance(depth, bool):
        raise ValidationError(f"Fetch depth must be numeric, got {type(depth)}")
    try:
        value = int(depth)
    except (TypeError, ValueError):
        raise ValidationError(f"Fetch depth must be numeric, got {depth!r}")

    if value <= 0:
        raise ValidationError(f"Fetch depth must be positive, got {value}")

    return min(value, Limits.MAX_FETCH_DEPTH)
