import pytest

from mdlinks.core.domain.entities import LinkInfo
from mdlinks.core.services.markdown_links import (
    LinkExtractionParser,
    extract_document_details,
    parse_local_link,
)


def _single_anchor(heading: str) -> str:
    anchors, _ = extract_document_details(f"# {heading}\n\nText\n")
    assert len(anchors) == 1, anchors
    return next(iter(anchors))


@pytest.mark.parametrize(
    "heading, expected",
    [
        ("A [Link](https://example.org/) Inside", "a-link-inside"),
        ("Header *with formatting*", "header-with-formatting"),
        ("Using `code` spans", "using-code-spans"),
        ("Escaped \\*stars\\*", "escaped-stars"),
        ("Image ![alt text](pic.png) here", "image-alt-text-here"),
        ("Foo (Bar)", "foo-bar"),
    ],
)
def test_heading_markup_is_stripped(heading, expected):
    assert _single_anchor(heading) == expected


def test_duplicate_headings_get_suffixes():
    anchors, _ = extract_document_details("# Foo\n\n## Foo\n\nFoo\n===\n")
    assert anchors == {"foo", "foo-1", "foo-2"}


def test_empty_heading_has_no_anchor():
    anchors, _ = extract_document_details("#\n\ntext\n")
    assert anchors == set()


def test_links_in_document_order_with_block_spans():
    text = (
        "# Title\n"
        "\n"
        "First [a](a.md) and\n"
        "then ![b](img/b.png#frag).\n"
        "\n"
        "- item [c](#title)\n"
    )
    _, links = extract_document_details(text)
    assert links == [
        LinkInfo(raw="a.md", path="a.md", fragment="", line_start=3, line_end=4),
        LinkInfo(raw="img/b.png#frag", path="img/b.png", fragment="frag", line_start=3, line_end=4),
        LinkInfo(raw="#title", path="", fragment="title", line_start=6, line_end=6),
    ]


def test_link_in_heading_is_extracted():
    anchors, links = extract_document_details("## See [other](other.md#top)\n")
    assert anchors == {"see-other"}
    assert links == [LinkInfo("other.md#top", "other.md", "top", 1, 1)]


@pytest.mark.parametrize(
    "markdown",
    [
        "[x](https://example.org/doc.md#a)",
        "[x](http://example.org)",
        "[x](mailto:someone@example.org)",
        "[x](//cdn.example.org/lib.js)",
        "<https://example.org/page>",
        "<someone@example.org>",
        "![x](data:image/png;base64,AAAA)",
    ],
)
def test_external_links_are_not_extracted(markdown):
    _, links = extract_document_details(f"Text {markdown} here.\n")
    assert links == []


def test_reference_links_resolve_to_definition():
    text = "# Doc\n\nNo such [reference][1].\n\n[1]: #invalid-ref\n"
    _, links = extract_document_details(text)
    assert links == [LinkInfo("#invalid-ref", "", "invalid-ref", 3, 3)]


def test_code_is_not_scanned_for_links():
    text = "```\n[x](missing.md)\n```\n\n    [y](missing.md)\n\nInline `[z](missing.md)`.\n"
    _, links = extract_document_details(text)
    assert links == []


def test_raw_target_is_kept_as_written():
    _, links = extract_document_details("[x](my%20notes.md) [y](<with space.md#Sec>)\n")
    assert [(l.raw, l.path, l.fragment) for l in links] == [
        ("my%20notes.md", "my notes.md", ""),
        ("with space.md#Sec", "with space.md", "Sec"),
    ]


def test_query_only_link_is_dropped():
    _, links = extract_document_details("[x](?page=2) [y](#)\n")
    assert links == []


def test_nested_containers_report_inner_block_lines():
    text = "> Quote line one\n> with [x](x.md)\n\n1. one\n2. two [y](y.md)\n"
    _, links = extract_document_details(text)
    assert [(l.raw, l.line_start, l.line_end) for l in links] == [
        ("x.md", 1, 2),
        ("y.md", 5, 5),
    ]


def test_explicit_parser_is_reused():
    parser = LinkExtractionParser()
    first = extract_document_details("# A\n\n[x](a.md)\n", parser)
    second = extract_document_details("# A\n\n[x](a.md)\n", parser)
    assert first == second


def test_parse_local_link():
    assert parse_local_link("../three.md#hi", 3, 4) == LinkInfo("../three.md#hi", "../three.md", "hi", 3, 4)
    assert parse_local_link("") is None
    assert parse_local_link("https://example.org") is None
    assert parse_local_link("http://[::1") is None
