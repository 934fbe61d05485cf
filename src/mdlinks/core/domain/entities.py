import json
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Tuple


class ViolationKind(str, Enum):
    FILE_NOT_FOUND = "file_not_found"
    INTERNAL_ANCHOR_NOT_FOUND = "internal_anchor_not_found"
    EXTERNAL_ANCHOR_NOT_FOUND = "external_anchor_not_found"

    @property
    def target_label(self) -> str:
        """What the link points at: a file, a slug in this document, or a slug elsewhere."""
        if self is ViolationKind.INTERNAL_ANCHOR_NOT_FOUND:
            return "local slug"
        if self is ViolationKind.EXTERNAL_ANCHOR_NOT_FOUND:
            return "slug"
        return "file"

    @property
    def reason(self) -> str:
        return f"link points to a non-existing {self.target_label}"


@dataclass(frozen=True)
class LinkInfo:
    """A local link or image reference found in a markdown document.

    Attributes:
        raw: Target as written in the source, e.g. ``../three.md#hi``.
        path: Path part of the target, possibly empty.
        fragment: Fragment part of the target without ``#``, possibly empty.
        line_start: First line (1-based) of the enclosing block, 0 if unknown.
        line_end: Last line (1-based) of the enclosing block, 0 if unknown.
    """

    raw: str
    path: str
    fragment: str
    line_start: int = 0
    line_end: int = 0


@dataclass(frozen=True)
class DocumentMetadata:
    path: str
    anchors: FrozenSet[str]
    links: Tuple[LinkInfo, ...]


@dataclass(frozen=True)
class BrokenLink:
    """A broken link and the document (scan-root relative, slash separated) it belongs to."""

    file: str
    link: LinkInfo
    kind: ViolationKind = ViolationKind.FILE_NOT_FOUND

    @property
    def reason(self) -> str:
        return self.kind.reason

    def __str__(self) -> str:
        quoted = json.dumps(self.link.raw, ensure_ascii=False)
        return f"{self.file}: link {quoted} points to a non-existing {self.kind.target_label}"


class BrokenLinksError(Exception):
    """Aggregate failure carrying every broken link found by one scan, in report order.

    Usage:
        try:
            check_links("docs", "*.md")
        except BrokenLinksError as e:
            for link in e.links:
                print(link)
    """

    def __init__(self, links: List[BrokenLink]):
        self.links = list(links)
        super().__init__("broken links found")


@dataclass
class CheckResult:
    """Result of one link scan.

    Attributes:
        root: Absolute path of the scanned directory.
        pattern: Glob pattern that selected markdown files.
        files_checked: Number of documents whose links were verified.
        broken_links: Violations in walk order, then document order.
    """

    root: str
    pattern: str
    files_checked: int = 0
    broken_links: List[BrokenLink] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.broken_links

    @property
    def violations_count(self) -> int:
        return len(self.broken_links)
