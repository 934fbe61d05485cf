"""Extract heading anchors and local link targets from markdown source.

The document is parsed once with a CommonMark parser; a single pass over the
resulting token stream feeds heading text to the slug generator and collects
every link, image and autolink target that has neither a URL scheme nor a
host.
"""

from typing import Iterator, List, Optional, Sequence, Set, Tuple
from urllib.parse import unquote, urlsplit

from markdown_it import MarkdownIt
from markdown_it.token import Token

from mdlinks.core.domain.entities import LinkInfo
from mdlinks.core.services.slugs import SlugGenerator

# Inline tokens whose content is literal heading text.
_TEXT_TOKEN_TYPES = frozenset({"text", "text_special", "code_inline"})
_BREAK_TOKEN_TYPES = frozenset({"softbreak", "hardbreak"})


class LinkExtractionParser(MarkdownIt):
    """CommonMark parser that keeps link destinations exactly as written.

    markdown-it percent-encodes destinations for HTML output; link checking
    needs the original text for diagnostics, so normalization is disabled.
    """

    def __init__(self) -> None:
        super().__init__("commonmark")

    def normalizeLink(self, url: str) -> str:
        return url


def _walk_inline(tokens: Optional[Sequence[Token]]) -> Iterator[Token]:
    for token in tokens or ():
        yield token
        # Image descriptions are parsed as inline content of their own.
        if token.type == "image":
            yield from _walk_inline(token.children)


def heading_text(inline: Token) -> str:
    """Concatenate the literal text of a heading, dropping all markup."""
    parts: List[str] = []
    for token in _walk_inline(inline.children):
        if token.type in _TEXT_TOKEN_TYPES:
            parts.append(token.content)
        elif token.type in _BREAK_TOKEN_TYPES:
            parts.append("\n")
    return "".join(parts)


def block_line_span(token: Token) -> Tuple[int, int]:
    """Return the 1-based first and last line of the block holding ``token``."""
    if not token.map:
        return 0, 0
    start, stop = token.map
    if stop <= start:
        return 0, 0
    return start + 1, stop


def parse_local_link(raw: str, line_start: int = 0, line_end: int = 0) -> Optional[LinkInfo]:
    """Build a LinkInfo for ``raw`` if it is a local (scheme- and host-less) link."""
    if not raw:
        return None
    try:
        parts = urlsplit(raw)
    except ValueError:
        return None
    if parts.scheme or parts.netloc:
        return None
    path = unquote(parts.path)
    fragment = unquote(parts.fragment)
    if not path and not fragment:
        return None
    return LinkInfo(
        raw=raw,
        path=path,
        fragment=fragment,
        line_start=line_start,
        line_end=line_end,
    )


def _link_target(token: Token) -> Optional[str]:
    if token.type == "link_open":
        return token.attrGet("href")
    if token.type == "image":
        return token.attrGet("src")
    return None


def extract_document_details(
    text: str, parser: Optional[MarkdownIt] = None
) -> Tuple[Set[str], List[LinkInfo]]:
    """Parse ``text`` and return its anchor slugs and local links in document order."""
    parser = parser or LinkExtractionParser()
    slugs = SlugGenerator()
    links: List[LinkInfo] = []

    in_heading = False
    for token in parser.parse(text):
        if token.type == "heading_open":
            in_heading = True
            continue
        if token.type == "heading_close":
            in_heading = False
            continue
        if token.type != "inline":
            continue

        if in_heading:
            slugs.generate(heading_text(token))

        line_start, line_end = block_line_span(token)
        for child in _walk_inline(token.children):
            target = _link_target(child)
            if target is None:
                continue
            link = parse_local_link(str(target), line_start, line_end)
            if link is not None:
                links.append(link)

    return slugs.seen, links
