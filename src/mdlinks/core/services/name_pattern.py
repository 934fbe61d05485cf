"""Glob patterns matched against file base names.

Syntax follows Go's ``path.Match`` so that patterns behave the same in every
wrapper of the checker:

    *         any sequence of non-separator characters
    ?         any single non-separator character
    [class]   one character from the class; ``^`` or ``!`` negates, ``a-z``
              is a range
    \\c        the literal character c

Unlike :mod:`fnmatch`, malformed patterns are rejected when compiled.
"""

import re
from typing import List, Pattern, Tuple

from mdlinks.core.services.error_codes import InvalidPatternError


class NamePattern:
    def __init__(self, pattern: str):
        self.pattern = pattern
        self._regex: Pattern[str] = re.compile(_translate(pattern), re.DOTALL)

    def matches(self, name: str) -> bool:
        return self._regex.fullmatch(name) is not None

    def __repr__(self) -> str:
        return f"NamePattern({self.pattern!r})"


def compile_name_pattern(pattern: str) -> NamePattern:
    """Compile ``pattern``, raising InvalidPatternError on bad syntax."""
    return NamePattern(pattern)


def _class_char(pattern: str, i: int) -> Tuple[str, int]:
    """Read one (possibly escaped) character inside a class."""
    n = len(pattern)
    if i >= n:
        raise InvalidPatternError(pattern, "unterminated character class")
    ch = pattern[i]
    if ch == "\\":
        i += 1
        if i >= n:
            raise InvalidPatternError(pattern, "trailing backslash")
        return pattern[i], i + 1
    if ch in "-]":
        raise InvalidPatternError(pattern, f"unexpected {ch!r} in character class")
    return ch, i + 1


def _translate_class(pattern: str, i: int) -> Tuple[str, int]:
    """Translate the class starting after ``[`` at index ``i``."""
    negated = False
    if i < len(pattern) and pattern[i] in "^!":
        negated = True
        i += 1

    items: List[str] = []
    while True:
        if i < len(pattern) and pattern[i] == "]" and items:
            i += 1
            break
        lo, i = _class_char(pattern, i)
        hi = lo
        if i < len(pattern) and pattern[i] == "-":
            hi, i = _class_char(pattern, i + 1)
            if hi < lo:
                raise InvalidPatternError(pattern, f"invalid range {lo}-{hi}")
        if lo == hi:
            items.append(re.escape(lo))
        else:
            items.append(f"{re.escape(lo)}-{re.escape(hi)}")

    body = "".join(items)
    if negated:
        return f"[^/{body}]", i
    return f"(?!/)[{body}]", i


def _translate(pattern: str) -> str:
    out: List[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch == "*":
            out.append("[^/]*")
            i += 1
        elif ch == "?":
            out.append("[^/]")
            i += 1
        elif ch == "[":
            translated, i = _translate_class(pattern, i + 1)
            out.append(translated)
        elif ch == "\\":
            if i + 1 >= n:
                raise InvalidPatternError(pattern, "trailing backslash")
            out.append(re.escape(pattern[i + 1]))
            i += 2
        else:
            out.append(re.escape(ch))
            i += 1
    return "".join(out)
