from __future__ import annotations

import pytest

from pantry_store import SheetsInventoryStore
from tests.fakes import FakeWorksheet


@pytest.fixture
def worksheet() -> FakeWorksheet:
    return FakeWorksheet()


@pytest.fixture
def store(worksheet: FakeWorksheet) -> SheetsInventoryStore:
    return SheetsInventoryStore(worksheet)
