"""Error codes and exception handling for mdlinks.

This module defines the ErrorCode enum and the MdlinksError exception used for
fatal scan errors: conditions under which the tool cannot proceed at all, as
opposed to broken links, which are collected and reported together (see
``BrokenLinksError`` in ``mdlinks.core.domain.entities``).
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    """Error code enumeration for fatal scan errors.

    Categories:
        Usage: INVALID_PATTERN, CONFIG_INVALID
        Input: ROOT_NOT_FOUND, FILE_READ_ERROR
        Content: INVALID_ENCODING, PARSE_ERROR
    """

    INVALID_PATTERN = "INVALID_PATTERN"
    CONFIG_INVALID = "CONFIG_INVALID"
    ROOT_NOT_FOUND = "ROOT_NOT_FOUND"
    FILE_READ_ERROR = "FILE_READ_ERROR"
    INVALID_ENCODING = "INVALID_ENCODING"
    PARSE_ERROR = "PARSE_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class MdlinksError(Exception):
    """Base exception for fatal mdlinks errors.

    Wraps an ErrorCode with a human-readable message and optional structured
    details for machine-parseable error responses.

    Attributes:
        code: The ErrorCode enum value for this error.
        message: Human-readable error description.
        details: Optional dictionary of additional structured context.

    Example:
        >>> error = MdlinksError(
        ...     code=ErrorCode.INVALID_ENCODING,
        ...     message="docs/bad.md is not a valid utf8 file",
        ...     details={"path": "docs/bad.md"},
        ... )
        >>> error.code
        <ErrorCode.INVALID_ENCODING: 'INVALID_ENCODING'>
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details
        super().__init__(message)

    def __repr__(self) -> str:
        return f"MdlinksError(code={self.code.value!r}, message={self.message!r}, details={self.details!r})"


class InvalidPatternError(MdlinksError, ValueError):
    """Malformed glob pattern; catchable as both MdlinksError and ValueError."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(
            code=ErrorCode.INVALID_PATTERN,
            message=f"syntax error in pattern {pattern!r}: {reason}",
            details={"pattern": pattern, "reason": reason},
        )
        self.pattern = pattern
