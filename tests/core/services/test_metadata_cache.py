import pytest

from mdlinks.core.services import metadata_cache
from mdlinks.core.services.error_codes import ErrorCode, MdlinksError
from mdlinks.core.services.metadata_cache import DocumentCache


@pytest.fixture
def count_extractions(monkeypatch):
    calls = []
    original = metadata_cache.extract_document_details

    def counting(text, parser=None):
        calls.append(text)
        return original(text, parser)

    monkeypatch.setattr(metadata_cache, "extract_document_details", counting)
    return calls


def test_get_returns_parsed_document(make_tree):
    root = make_tree({"docs/guide.md": "# Guide\n\n## Setup\n\nSee [x](../README.md#intro).\n"})
    cache = DocumentCache(root)

    document = cache.get("docs/guide.md")

    assert document.path == "docs/guide.md"
    assert document.anchors == frozenset({"guide", "setup"})
    assert [link.raw for link in document.links] == ["../README.md#intro"]
    assert "docs/guide.md" in cache
    assert len(cache) == 1


def test_each_path_is_parsed_once(make_tree, count_extractions):
    root = make_tree({"a.md": "# A\n", "b.md": "# B\n"})
    cache = DocumentCache(root)

    first = cache.get("a.md")
    second = cache.get("a.md")
    cache.get("b.md")

    assert first is second
    assert len(count_extractions) == 2


def test_invalid_utf8_is_fatal(tmp_path):
    (tmp_path / "bad.md").write_bytes(b"# Title\n\n\xff\xfe broken\n")
    cache = DocumentCache(tmp_path)

    with pytest.raises(MdlinksError) as excinfo:
        cache.get("bad.md")

    assert excinfo.value.code == ErrorCode.INVALID_ENCODING
    assert "bad.md is not a valid utf8 file" in excinfo.value.message
    assert "bad.md" not in cache


def test_missing_file_is_read_error(tmp_path):
    cache = DocumentCache(tmp_path)

    with pytest.raises(MdlinksError) as excinfo:
        cache.get("nope.md")

    assert excinfo.value.code == ErrorCode.FILE_READ_ERROR
    assert excinfo.value.details == {"path": "nope.md"}


def test_parser_failure_is_parse_error(make_tree, monkeypatch):
    root = make_tree({"a.md": "# A\n"})

    def explode(text, parser=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(metadata_cache, "extract_document_details", explode)

    with pytest.raises(MdlinksError) as excinfo:
        DocumentCache(root).get("a.md")

    assert excinfo.value.code == ErrorCode.PARSE_ERROR
    assert isinstance(excinfo.value.__cause__, RuntimeError)
