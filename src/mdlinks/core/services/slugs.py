from typing import Iterable, Optional, Set

MAX_SUFFIX = 100


def slugify(text: str) -> str:
    """Derive the base anchor slug for a heading's plain text.

    Letters and numbers are lowercased, ``-`` and ``_`` are kept, a run of
    whitespace becomes one ``-`` and anything else is dropped. Dropping a
    symbol between two spaces leaves a double dash (``"a & b"`` -> ``a--b``).
    """
    chars = []
    in_space = False
    for ch in text:
        if ch.isspace():
            if chars and not in_space:
                chars.append("-")
            in_space = True
            continue
        in_space = False
        if ch in "-_":
            chars.append(ch)
        elif ch.isalpha() or ch.isnumeric():
            chars.append(ch.lower())
    return "".join(chars)


class SlugGenerator:
    """Hands out unique anchor slugs for the headings of one document."""

    def __init__(self, seen: Optional[Iterable[str]] = None):
        self.seen: Set[str] = set(seen or ())

    def generate(self, text: str) -> Optional[str]:
        """Register and return the slug for ``text``.

        Colliding slugs get ``-1``, ``-2``, ... suffixes in order of
        appearance. Returns None (and registers nothing) for empty text or
        when all MAX_SUFFIX candidates are taken.
        """
        if not text:
            return None
        name = slugify(text)
        for i in range(MAX_SUFFIX):
            candidate = name if i == 0 else f"{name}-{i}"
            if candidate not in self.seen:
                self.seen.add(candidate)
                return candidate
        return None
