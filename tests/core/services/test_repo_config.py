import pytest

from mdlinks.core.services.error_codes import ErrorCode, MdlinksError
from mdlinks.core.services.repo_config import (
    CONFIG_FILENAME,
    DEFAULT_PATTERN,
    load_check_config,
)


def _write_config(root, text):
    (root / CONFIG_FILENAME).write_text(text, encoding="utf-8")


def test_defaults_without_config(tmp_path):
    config = load_check_config(tmp_path)
    assert config.pattern == DEFAULT_PATTERN
    assert config.excluded_dirs == (".git",)
    assert config.config_path is None


def test_explicit_pattern_without_config(tmp_path):
    assert load_check_config(tmp_path, "*.markdown").pattern == "*.markdown"


def test_config_file_values(tmp_path):
    _write_config(tmp_path, "pattern: '*.mdx'\nexclude_dirs:\n  - node_modules\n  - vendor/\n  - .git\n")

    config = load_check_config(tmp_path)

    assert config.pattern == "*.mdx"
    assert config.excluded_dirs == (".git", "node_modules", "vendor")
    assert config.config_path == tmp_path / CONFIG_FILENAME


def test_explicit_pattern_wins_over_config(tmp_path):
    _write_config(tmp_path, "pattern: '*.mdx'\n")
    assert load_check_config(tmp_path, "*.md").pattern == "*.md"


def test_empty_config_file(tmp_path):
    _write_config(tmp_path, "")
    assert load_check_config(tmp_path).pattern == DEFAULT_PATTERN


@pytest.mark.parametrize(
    "text",
    [
        "pattern: [unclosed\n",
        "- just\n- a list\n",
        "pattern: 3\n",
        "pattern: ''\n",
        "exclude_dirs: vendor\n",
        "exclude_dirs: ['']\n",
        "exclude_dirs: ['a/b']\n",
    ],
)
def test_invalid_config(tmp_path, text):
    _write_config(tmp_path, text)

    with pytest.raises(MdlinksError) as excinfo:
        load_check_config(tmp_path)

    assert excinfo.value.code == ErrorCode.CONFIG_INVALID
    assert CONFIG_FILENAME in excinfo.value.message
