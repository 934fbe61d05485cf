"""Exit code mapping for the mdlinks CLI."""

from __future__ import annotations

import os

from mdlinks.core.services.error_codes import ErrorCode

EX_SUCCESS = 0
EX_USAGE = getattr(os, "EX_USAGE", 64)
EX_DATAERR = getattr(os, "EX_DATAERR", 65)
EX_NOINPUT = getattr(os, "EX_NOINPUT", 66)
# Broken links are lint failures, not tool failures.
EX_BROKEN_LINKS = 127


def exit_code_for_error(error_code: ErrorCode) -> int:
    """Map ErrorCode to a sysexits-style exit code."""
    mapping = {
        ErrorCode.INVALID_PATTERN: EX_USAGE,
        ErrorCode.CONFIG_INVALID: EX_DATAERR,
        ErrorCode.ROOT_NOT_FOUND: EX_NOINPUT,
        ErrorCode.FILE_READ_ERROR: EX_NOINPUT,
        ErrorCode.INVALID_ENCODING: EX_DATAERR,
        ErrorCode.PARSE_ERROR: EX_DATAERR,
        ErrorCode.UNKNOWN_ERROR: EX_DATAERR,
    }
    return mapping.get(error_code, EX_DATAERR)
