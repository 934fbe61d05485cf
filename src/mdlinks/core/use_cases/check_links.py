from __future__ import annotations

import os
import posixpath
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from markdown_it import MarkdownIt

from mdlinks.core.domain.entities import (
    BrokenLink,
    BrokenLinksError,
    CheckResult,
    DocumentMetadata,
    ViolationKind,
)
from mdlinks.core.services.error_codes import ErrorCode, MdlinksError
from mdlinks.core.services.metadata_cache import DocumentCache
from mdlinks.core.services.name_pattern import compile_name_pattern
from mdlinks.core.services.observability import log_operation
from mdlinks.core.services.repo_config import ALWAYS_EXCLUDED_DIRS, DEFAULT_PATTERN


class CheckLinksUseCase:
    """Walk a directory of markdown files and report links that lead nowhere.

    Links are local when they carry no scheme and no host. For each one the
    path part must exist on disk (``/x.md`` is rooted at the scan root, other
    paths are relative to the linking document) and the fragment part must
    name a heading slug, either in the linking document (``#slug``) or in the
    linked markdown document (``other.md#slug``).
    """

    def __init__(
        self,
        root_dir: str | Path,
        pattern: str = DEFAULT_PATTERN,
        excluded_dirs: Iterable[str] = ALWAYS_EXCLUDED_DIRS,
        parser: Optional[MarkdownIt] = None,
    ):
        self.root_dir = Path(root_dir)
        self.pattern = pattern
        # Reject bad patterns before touching the filesystem.
        self.name_pattern = compile_name_pattern(pattern)
        self.excluded_dirs = frozenset(excluded_dirs) | frozenset(ALWAYS_EXCLUDED_DIRS)
        self._parser = parser

    def execute(self) -> CheckResult:
        if not self.root_dir.is_dir():
            raise MdlinksError(
                code=ErrorCode.ROOT_NOT_FOUND,
                message=f"'{self.root_dir}' is not a directory",
                details={"root": str(self.root_dir)},
            )

        cache = DocumentCache(self.root_dir, self._parser)
        result = CheckResult(root=str(self.root_dir.resolve()), pattern=self.pattern)

        with log_operation(
            "check_links",
            details={"root": result.root, "pattern": self.pattern},
        ) as ctx:
            for path in self._walk():
                document = cache.get(path)
                result.files_checked += 1
                result.broken_links.extend(self._check_document(document, cache))
            ctx["details"]["files_checked"] = result.files_checked
            ctx["details"]["documents_parsed"] = len(cache)
            ctx["details"]["violations_count"] = result.violations_count

        return result

    def _walk(self, rel_dir: str = "") -> Iterator[str]:
        """Yield matching files depth-first, in lexical name order."""
        directory = self.root_dir / rel_dir if rel_dir else self.root_dir
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as exc:
            raise MdlinksError(
                code=ErrorCode.FILE_READ_ERROR,
                message=f"cannot list {rel_dir or '.'}: {exc.strerror or exc}",
                details={"path": rel_dir or "."},
            ) from exc

        for entry in entries:
            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            if entry.is_dir(follow_symlinks=False):
                if entry.name not in self.excluded_dirs:
                    yield from self._walk(rel_path)
                continue
            if self.name_pattern.matches(entry.name):
                yield rel_path

    def _resolve(self, document_path: str, link_path: str) -> Optional[str]:
        """Map a link path to a scan-root relative path; None if it escapes the root."""
        if link_path.startswith("/"):
            candidate = link_path[1:]
        else:
            candidate = posixpath.join(posixpath.dirname(document_path), link_path)
        candidate = posixpath.normpath(candidate)
        if candidate == ".." or candidate.startswith("../"):
            return None
        return candidate

    def _exists(self, rel_path: str) -> bool:
        return (self.root_dir / rel_path).exists()

    def _check_document(self, document: DocumentMetadata, cache: DocumentCache) -> List[BrokenLink]:
        broken: List[BrokenLink] = []
        for link in document.links:
            if not link.path:
                if link.fragment not in document.anchors:
                    broken.append(
                        BrokenLink(
                            file=document.path,
                            link=link,
                            kind=ViolationKind.INTERNAL_ANCHOR_NOT_FOUND,
                        )
                    )
                continue

            target = self._resolve(document.path, link.path)
            if target is None or not self._exists(target):
                broken.append(BrokenLink(file=document.path, link=link))
                continue

            if not link.fragment:
                continue
            # Only markdown documents have anchors to check.
            if not self.name_pattern.matches(posixpath.basename(target)):
                continue
            if link.fragment not in cache.get(target).anchors:
                broken.append(
                    BrokenLink(
                        file=document.path,
                        link=link,
                        kind=ViolationKind.EXTERNAL_ANCHOR_NOT_FOUND,
                    )
                )
        return broken


def find_broken_links(root_dir: str | Path, pattern: str = DEFAULT_PATTERN) -> List[BrokenLink]:
    """Scan ``root_dir`` and return every broken link in report order."""
    return CheckLinksUseCase(root_dir, pattern).execute().broken_links


def check_links(root_dir: str | Path, pattern: str = DEFAULT_PATTERN) -> None:
    """Scan ``root_dir``; raise BrokenLinksError carrying all violations if any."""
    broken = find_broken_links(root_dir, pattern)
    if broken:
        raise BrokenLinksError(broken)
