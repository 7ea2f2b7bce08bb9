"""Bulk instruction generation in fixed-size concurrent batches.

Batches run one after another; paths inside a batch run concurrently.
One path failing never aborts its siblings: failures are collected into
the report instead of raised.
"""
from __future__ import annotations

import logging
import math
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Literal, Mapping, Optional, Sequence

from wayfind.core.engine import StreamProgress, generate_instruction_set
from wayfind.core.models import PathRecord, Room
from wayfind.providers.base import GenerationProvider
from wayfind.store.instructions import InstructionStore

log = logging.getLogger(__name__)

PathStatus = Literal["pending", "generating", "completed", "failed"]


@dataclass(frozen=True)
class PathResult:
    path_id: str
    success: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class BulkProgress:
    total_paths: int
    completed_paths: int = 0
    failed_paths: int = 0
    current_batch: int = 0
    total_batches: int = 0
    path_statuses: Dict[str, PathStatus] = field(default_factory=dict)
    path_progress: Dict[str, StreamProgress] = field(default_factory=dict)


@dataclass
class BulkReport:
    results: List[PathResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    def summary(self) -> str:
        return f"Bulk generation complete! {self.succeeded}/{self.total} paths generated successfully."


class _ProgressTracker:
    """Serializes progress updates coming from worker threads.

    The callback is invoked under the lock so snapshots arrive in order;
    its exceptions are logged and dropped.
    """

    def __init__(self, initial: BulkProgress, callback: Optional[Callable[[BulkProgress], None]]):
        self._lock = threading.Lock()
        self.state = initial
        self._callback = callback

    def _notify(self, snapshot: BulkProgress) -> None:
        if self._callback is None:
            return
        try:
            self._callback(snapshot)
        except Exception:
            log.exception("Bulk progress callback failed")

    def update(self, **changes) -> None:
        with self._lock:
            self.state = replace(self.state, **changes)
            self._notify(self.state)

    def set_status(self, path_id: str, status: PathStatus) -> None:
        with self._lock:
            statuses = dict(self.state.path_statuses)
            statuses[path_id] = status
            changes = {"path_statuses": statuses}
            if status == "completed":
                changes["completed_paths"] = self.state.completed_paths + 1
            elif status == "failed":
                changes["failed_paths"] = self.state.failed_paths + 1
            self.state = replace(self.state, **changes)
            self._notify(self.state)

    def set_stream_progress(self, path_id: str, progress: StreamProgress) -> None:
        with self._lock:
            per_path = dict(self.state.path_progress)
            per_path[path_id] = progress
            self.state = replace(self.state, path_progress=per_path)
            self._notify(self.state)


def _generate_one(
    path: PathRecord,
    rooms: Sequence[Room],
    provider: GenerationProvider,
    store: InstructionStore,
    tracker: _ProgressTracker,
    cancel: Optional[threading.Event],
) -> PathResult:
    try:
        instruction_set = generate_instruction_set(
            path, rooms, provider, on_progress=tracker.set_stream_progress, cancel=cancel,
        )
        store.upsert(instruction_set)
    except Exception as exc:
        log.error("Error generating instructions for path %s: %s", path.path_id, exc)
        tracker.set_status(path.path_id, "failed")
        return PathResult(path_id=path.path_id, success=False, error=f"{type(exc).__name__}: {exc}")

    tracker.set_status(path.path_id, "completed")
    return PathResult(path_id=path.path_id, success=True)


def generate_bulk(
    paths: Sequence[PathRecord],
    rooms_by_path: Mapping[str, Sequence[Room]],
    provider: GenerationProvider,
    store: InstructionStore,
    batch_size: int = 10,
    on_progress: Optional[Callable[[BulkProgress], None]] = None,
    cancel: Optional[threading.Event] = None,
) -> BulkReport:
    """
    Generate and store instruction sets for *paths*.

    Parameters
    ----------
    rooms_by_path : mapping of path_id -> rooms
        Rooms on each path's floor; a missing entry means no landmarks.
    batch_size : int
        Concurrent generations per batch.

    Returns
    -------
    BulkReport
        One PathResult per path; within a batch the order is completion order.
    """
    report = BulkReport()
    if not paths:
        return report

    batch_size = max(1, batch_size)
    total_batches = math.ceil(len(paths) / batch_size)
    tracker = _ProgressTracker(
        BulkProgress(
            total_paths=len(paths),
            total_batches=total_batches,
            path_statuses={p.path_id: "pending" for p in paths},
        ),
        on_progress,
    )
    tracker.update()

    for batch_index in range(total_batches):
        batch = paths[batch_index * batch_size:(batch_index + 1) * batch_size]
        statuses = dict(tracker.state.path_statuses)
        statuses.update({p.path_id: "generating" for p in batch})
        tracker.update(current_batch=batch_index + 1, path_statuses=statuses)
        log.info("Generating batch %d/%d (%d paths)", batch_index + 1, total_batches, len(batch))

        with ThreadPoolExecutor(max_workers=len(batch)) as pool:
            futures = [
                pool.submit(
                    _generate_one, p, rooms_by_path.get(p.path_id, ()), provider, store, tracker, cancel
                )
                for p in batch
            ]
            for fut in as_completed(futures):
                report.results.append(fut.result())

    log.info(report.summary())
    return report
