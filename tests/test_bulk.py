"""Tests for batched bulk generation."""

import threading
import time

from wayfind.core.bulk import generate_bulk
from wayfind.errors import ProviderError
from wayfind.providers.base import GenerationProvider
from wayfind.providers.template import TemplateProvider
from wayfind.store.instructions import MemoryInstructionStore
from tests.helpers import make_path, make_room


def _paths(n):
    return [make_path(f"p{i}", [(0, 0), (0, -40 - i), (60, -40 - i)], to_name=f"Room {i}") for i in range(n)]


class FlakyProvider(GenerationProvider):
    """Fails for one destination, delegates to templates otherwise."""

    def __init__(self, broken: str):
        self.broken = broken
        self.inner = TemplateProvider()

    def stream_text(self, prompt, cancel=None):
        if f"To: {self.broken}\n" in prompt:
            raise ProviderError("Generation service returned HTTP 500")
        yield from self.inner.stream_text(prompt, cancel)


class CountingProvider(GenerationProvider):
    """Records the peak number of concurrent streams."""

    def __init__(self):
        self.inner = TemplateProvider()
        self.lock = threading.Lock()
        self.active = 0
        self.peak = 0

    def stream_text(self, prompt, cancel=None):
        with self.lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
        try:
            time.sleep(0.02)
            yield from self.inner.stream_text(prompt, cancel)
        finally:
            with self.lock:
                self.active -= 1


def test_all_paths_generated_and_stored():
    store = MemoryInstructionStore()
    snapshots = []
    paths = _paths(25)

    report = generate_bulk(paths, {}, TemplateProvider(), store, batch_size=10, on_progress=snapshots.append)

    assert report.total == 25
    assert report.succeeded == 25
    assert report.failed == 0
    assert {r.path_id for r in report.results} == {p.path_id for p in paths}
    assert all(store.get(p.path_id) is not None for p in paths)

    final = snapshots[-1]
    assert final.total_batches == 3
    assert final.current_batch == 3
    assert final.completed_paths == 25
    assert set(final.path_statuses.values()) == {"completed"}
    assert report.summary() == "Bulk generation complete! 25/25 paths generated successfully."


def test_one_failure_does_not_abort_siblings():
    store = MemoryInstructionStore()
    paths = _paths(4)

    report = generate_bulk(paths, {}, FlakyProvider("Room 2"), store, batch_size=10)

    assert report.succeeded == 3
    assert report.failed == 1
    failed = [r for r in report.results if not r.success]
    assert failed[0].path_id == "p2"
    assert "ProviderError" in failed[0].error
    assert store.get("p2") is None
    assert store.get("p3") is not None


def test_concurrency_bounded_by_batch_size():
    provider = CountingProvider()
    report = generate_bulk(_paths(7), {}, provider, MemoryInstructionStore(), batch_size=3)

    assert report.succeeded == 7
    assert 1 <= provider.peak <= 3


def test_rooms_are_looked_up_per_path():
    store = MemoryInstructionStore()
    paths = _paths(1)

    generate_bulk(paths, {"p0": [make_room("Library", 10, -20)]}, TemplateProvider(), store)

    assert "passing Library" in store.get("p0").descriptive_instructions[0]


def test_empty_input():
    report = generate_bulk([], {}, TemplateProvider(), MemoryInstructionStore())
    assert report.total == 0
    assert report.results == []


def test_failing_progress_callback_does_not_abort_bulk():
    store = MemoryInstructionStore()
    paths = _paths(4)
    seen = []

    def on_progress(progress):
        seen.append(progress)
        if progress.completed_paths >= 1 or progress.path_progress:
            raise RuntimeError("ui glitch")

    report = generate_bulk(paths, {}, TemplateProvider(), store, batch_size=2, on_progress=on_progress)

    assert report.total == 4
    assert report.succeeded == 4
    assert all(store.get(p.path_id) is not None for p in paths)
    assert seen[-1].current_batch == 2
    assert set(seen[-1].path_statuses.values()) == {"completed"}
