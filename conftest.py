import pytest

from catalog.library import LibraryManager
from catalog.ui_helpers import OUTPUT_MODE_ENV


class FixedClock:
    """Clock returning a predictable sequence of timestamps."""

    def __init__(self):
        self.calls = 0

    def now_iso(self) -> str:
        self.calls += 1
        return f"2024-01-01T00:00:{self.calls:02d}Z"


@pytest.fixture
def clock():
    return FixedClock()

@pytest.fixture
def manager(clock):
    return LibraryManager(clock=clock)

@pytest.fixture
def data_paths(tmp_path):
    # Separate data files per test
    return tmp_path / "books.json", tmp_path / "readers.json", tmp_path / "loans.json"

@pytest.fixture(autouse=True)
def plain_output(monkeypatch):
    # --output sets the env var directly; setenv makes monkeypatch restore it
    monkeypatch.setenv(OUTPUT_MODE_ENV, "plain")
