# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests.
#
# FIXTURES:
# ---------
# - fresh_config (autouse)  → drop the cached StoreConfig around each test
# - store_path              → path of a not-yet-existing store file in tmp_path
# - errors                  → list used as an error sink
# - memory_store            → MemoryStorage, closed after the test
# - file_store              → FileStorage on store_path with `errors` as sink
# - wait_until              → poll a condition with a deadline (timer tests)
#
# ==============================================

import time

import pytest

from backedstore.config import reset_config
from backedstore.storage.file_storage import FileStorage
from backedstore.storage.memory_storage import MemoryStorage


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "store.json"


@pytest.fixture
def errors():
    return []


@pytest.fixture
def memory_store():
    store = MemoryStorage(sync_interval_ms=60000)
    yield store
    store.close(flush=False)


@pytest.fixture
def file_store(store_path, errors):
    store = FileStorage(store_path, sync_interval_ms=60000)
    store.error(errors.append)
    yield store
    store.close(flush=False)


@pytest.fixture
def wait_until():
    def _wait(condition, timeout=3.0, interval=0.01):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if condition():
                return True
            time.sleep(interval)
        return condition()
    return _wait
