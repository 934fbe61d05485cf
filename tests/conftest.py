"""Shared pytest fixtures."""

from pathlib import Path
from typing import Callable, Dict

import pytest


@pytest.fixture(autouse=True)
def quiet_logs(monkeypatch):
    """Keep operation logs off stderr unless a test opts back in."""
    monkeypatch.setenv("MDLINKS_LOG_SILENT", "1")
    monkeypatch.delenv("MDLINKS_DEBUG", raising=False)
    monkeypatch.delenv("MDLINKS_LOG_FORMAT", raising=False)


@pytest.fixture
def make_tree(tmp_path) -> Callable[[Dict[str, str]], Path]:
    """Write ``{relative/path: content}`` under tmp_path and return the root."""

    def _make(files: Dict[str, str]) -> Path:
        for rel_path, content in files.items():
            target = tmp_path / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return tmp_path

    return _make


@pytest.fixture
def scenario_a(make_tree) -> Path:
    """Three documents linking to a ``three.md`` that does not exist."""
    return make_tree(
        {
            "index.md": "# Index\n\nSee [x](three.md).\n",
            "one.md": "# One\n\nSee [x](/three.md).\n",
            "subdir/two.md": "# Two\n\nSee [x](../three.md#hi)\nfor details.\n",
        }
    )


@pytest.fixture
def scenario_b(make_tree) -> Path:
    """One broken link of each kind."""
    return make_tree(
        {
            "one.md": "# One\n\nLinks: [x](#bad-ref) and [x](two.md#bad-ref).\n",
            "two.md": "# Two\n\n![picture](image.png)\n",
        }
    )
