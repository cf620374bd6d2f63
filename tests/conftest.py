"""Shared fixtures for the outline toolkit test-suite.

Outlines are described as nested lists: a plain string is a childless block,
a ``(name, [children])`` tuple a block with children. Block ids equal their
names and each block's text is its name, which keeps assertions readable.
"""

import logging
import sys
from pathlib import Path
from typing import Iterable, Union

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from outline_toolkit.config import ConfigManager
from outline_toolkit.core.models import Buffer, NodeTree, OutlineContext, Position, TextStore

logging.basicConfig(level=logging.DEBUG)

OutlineSpec = Iterable[Union[str, tuple]]


def build_context(outline: OutlineSpec, title: str = "Root", root_id: str = "root") -> OutlineContext:
    tree = NodeTree()
    texts = TextStore()
    tree.create_root(root_id)
    texts.set_text(root_id, title)

    def _add(parent_id, items):
        for item in items:
            if isinstance(item, str):
                name, children = item, []
            else:
                name, children = item
            tree.insert_node(parent_id, Position.end(), node_id=name)
            texts.set_text(name, name)
            _add(name, children)

    _add(root_id, outline)
    return OutlineContext(tree=tree, texts=texts, buffer=Buffer(buffer_id="main", root_node_id=root_id))


@pytest.fixture
def make_context():
    """Factory fixture: ``make_context(["A", ("B", ["C"])], title="Root")``."""
    return build_context


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point user configuration at a temp dir and reset the config singleton."""
    config_dir = tmp_path / "user-config"
    monkeypatch.setenv("OUTLINE_CONFIG_DIR", str(config_dir))
    monkeypatch.setattr(ConfigManager, "_instance", None)
    return config_dir
