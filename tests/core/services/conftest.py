import pytest

from outline_toolkit.core.services import (
    ClipboardService,
    FoldService,
    NavigationService,
    SelectionService,
    StructureEditingService,
    UndoService,
)


@pytest.fixture
def fold():
    return FoldService()


@pytest.fixture
def selection_service(fold):
    return SelectionService(fold)


@pytest.fixture
def navigation(fold):
    return NavigationService(fold)


@pytest.fixture
def editing(fold):
    return StructureEditingService(fold)


@pytest.fixture
def clipboard():
    return ClipboardService()


@pytest.fixture
def undo():
    return UndoService(max_history=10)
