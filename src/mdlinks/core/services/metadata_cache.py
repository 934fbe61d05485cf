from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from markdown_it import MarkdownIt

from mdlinks.core.domain.entities import DocumentMetadata
from mdlinks.core.services.error_codes import ErrorCode, MdlinksError
from mdlinks.core.services.markdown_links import LinkExtractionParser, extract_document_details
from mdlinks.core.services.observability import log_debug


class DocumentCache:
    """Per-scan memo of parsed documents, keyed by scan-root relative path.

    A document can be reached twice in one scan: as a walk target and as the
    target of another document's ``other.md#slug`` link. Each path is read and
    parsed at most once, whichever comes first.
    """

    def __init__(self, root_dir: str | Path, parser: Optional[MarkdownIt] = None):
        self.root_dir = Path(root_dir)
        self.parser = parser or LinkExtractionParser()
        self._documents: Dict[str, DocumentMetadata] = {}

    def __contains__(self, path: str) -> bool:
        return path in self._documents

    def __len__(self) -> int:
        return len(self._documents)

    def get(self, path: str) -> DocumentMetadata:
        cached = self._documents.get(path)
        if cached is not None:
            return cached

        try:
            body = (self.root_dir / path).read_bytes()
        except OSError as exc:
            raise MdlinksError(
                code=ErrorCode.FILE_READ_ERROR,
                message=f"cannot read {path}: {exc.strerror or exc}",
                details={"path": path},
            ) from exc

        try:
            text = body.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MdlinksError(
                code=ErrorCode.INVALID_ENCODING,
                message=f"{path} is not a valid utf8 file",
                details={"path": path, "offset": exc.start},
            ) from exc

        try:
            anchors, links = extract_document_details(text, self.parser)
        except Exception as exc:
            raise MdlinksError(
                code=ErrorCode.PARSE_ERROR,
                message=f"cannot parse {path} as markdown: {exc}",
                details={"path": path},
            ) from exc

        document = DocumentMetadata(path=path, anchors=frozenset(anchors), links=tuple(links))
        self._documents[path] = document
        log_debug(
            "document_parsed",
            details={"path": path, "anchors": len(document.anchors), "links": len(document.links)},
        )
        return document
