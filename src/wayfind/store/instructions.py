"""Persistence for generated instruction sets and stride preferences.

Writes are plain upserts keyed by path id: the last writer wins, there is
no version check between overlapping regenerations of the same path.
"""
from __future__ import annotations

import json
import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from wayfind.core.models import InstructionSet, StepSize
from wayfind.store import keys
from wayfind.store.redis_client import get_json, get_redis

log = logging.getLogger(__name__)


class InstructionStore(ABC):
    @abstractmethod
    def get(self, path_id: str) -> Optional[InstructionSet]:
        raise NotImplementedError

    @abstractmethod
    def upsert(self, instruction_set: InstructionSet) -> InstructionSet:
        raise NotImplementedError

    @abstractmethod
    def delete(self, path_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def get_step_size(self, user_id: str) -> StepSize:
        raise NotImplementedError

    @abstractmethod
    def set_step_size(self, user_id: str, step_size: StepSize) -> StepSize:
        raise NotImplementedError


class MemoryInstructionStore(InstructionStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._sets: Dict[str, InstructionSet] = {}
        self._step_sizes: Dict[str, StepSize] = {}

    def get(self, path_id: str) -> Optional[InstructionSet]:
        with self._lock:
            return self._sets.get(path_id)

    def upsert(self, instruction_set: InstructionSet) -> InstructionSet:
        with self._lock:
            self._sets[instruction_set.path_id] = instruction_set
        return instruction_set

    def delete(self, path_id: str) -> bool:
        with self._lock:
            return self._sets.pop(path_id, None) is not None

    def get_step_size(self, user_id: str) -> StepSize:
        with self._lock:
            return self._step_sizes.get(user_id, StepSize.MEDIUM)

    def set_step_size(self, user_id: str, step_size: StepSize) -> StepSize:
        with self._lock:
            self._step_sizes[user_id] = StepSize(step_size)
        return StepSize(step_size)


class RedisInstructionStore(InstructionStore):
    """JSON values under ``wf:instructions:<path_id>``; read errors degrade to misses."""

    def __init__(self, r, ttl_s: int = 0) -> None:
        self.r = r
        self.ttl_s = ttl_s

    def get(self, path_id: str) -> Optional[InstructionSet]:
        data = get_json(self.r, keys.instruction_set(path_id))
        if data is None:
            return None
        return InstructionSet(**data)

    def upsert(self, instruction_set: InstructionSet) -> InstructionSet:
        self.r.set(
            keys.instruction_set(instruction_set.path_id),
            json.dumps(instruction_set.model_dump()),
            ex=self.ttl_s or None,
        )
        return instruction_set

    def delete(self, path_id: str) -> bool:
        return bool(self.r.delete(keys.instruction_set(path_id)))

    def get_step_size(self, user_id: str) -> StepSize:
        try:
            raw = self.r.get(keys.user_step_size(user_id))
        except Exception as exc:
            log.warning("Redis read failed for step size of %s: %s", user_id, exc)
            raw = None
        try:
            return StepSize(raw) if raw else StepSize.MEDIUM
        except ValueError:
            return StepSize.MEDIUM

    def set_step_size(self, user_id: str, step_size: StepSize) -> StepSize:
        value = StepSize(step_size)
        self.r.set(keys.user_step_size(user_id), value.value)
        return value


_store: Optional[InstructionStore] = None


def get_store() -> InstructionStore:
    """Lazy singleton: Redis when configured and reachable, otherwise in-memory."""
    global _store
    if _store is None:
        from wayfind.config import settings

        r = get_redis()
        if r is not None:
            _store = RedisInstructionStore(r, ttl_s=settings.instruction_ttl_s)
        else:
            _store = MemoryInstructionStore()
    return _store


def set_store(store: Optional[InstructionStore]) -> None:
    global _store
    _store = store
