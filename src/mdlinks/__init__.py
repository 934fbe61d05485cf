"""Verify cross-document local links in a set of markdown files."""

from mdlinks.core.domain.entities import (
    BrokenLink,
    BrokenLinksError,
    CheckResult,
    LinkInfo,
    ViolationKind,
)
from mdlinks.core.services.error_codes import ErrorCode, InvalidPatternError, MdlinksError
from mdlinks.core.use_cases.check_links import CheckLinksUseCase, check_links, find_broken_links

__all__ = [
    "BrokenLink",
    "BrokenLinksError",
    "CheckLinksUseCase",
    "CheckResult",
    "ErrorCode",
    "InvalidPatternError",
    "LinkInfo",
    "MdlinksError",
    "ViolationKind",
    "check_links",
    "find_broken_links",
]
