from __future__ import annotations

import pytest

from wayfind.core.models import PathRecord
from wayfind.store import redis_client
from wayfind.store.instructions import MemoryInstructionStore, set_store
from tests.helpers import make_path


@pytest.fixture
def e2e_path() -> PathRecord:
    return make_path("p-e2e", [(0, 0), (100, 0), (100, 150)])


@pytest.fixture
def memory_store():
    store = MemoryInstructionStore()
    set_store(store)
    yield store
    set_store(None)


@pytest.fixture(autouse=True)
def _fresh_redis_singleton():
    redis_client.reset_redis()
    yield
    redis_client.reset_redis()
