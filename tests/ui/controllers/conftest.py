import pytest

from outline_toolkit.ui.controllers import OutlineController


@pytest.fixture
def make_controller(make_context):
    """Factory fixture returning a controller wired from the packaged config."""
    def _make(outline, title="Root"):
        return OutlineController.from_config(make_context(outline, title=title))
    return _make
