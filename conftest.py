import shutil
from pathlib import Path

import pytest

from backend import storage
from backend.sessions import registry

TEST_DATA_DIR = Path("data-tests")


@pytest.fixture(autouse=True)
def clean_test_data(monkeypatch):
    """Wipe and re-init data-tests/ before every test, with no LLM env leaking in."""
    for var in ("LLM_PROVIDER_URL", "LLM_API_KEY", "LLM_PROVIDER_FORMAT", "LLM_MODEL"):
        monkeypatch.delenv(var, raising=False)
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    storage.init_storage(TEST_DATA_DIR)
    registry.clear()
    yield
    # leave data-tests around after tests for inspection; CI can ignore it
