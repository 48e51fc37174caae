"""
In-memory registries for short-lived, caller-owned engine objects.

Skip-ahead gates and practice-session drift controllers exist only while the
learner has the dialog or session open. They are held here by id between
HTTP calls and are never persisted.
"""

import uuid
from collections import OrderedDict
from typing import Generic, Optional, TypeVar

from src.engines.progression.drift_controller import DifficultyDriftController
from src.orchestration.prerequisite_gate import PrerequisiteGate

T = TypeVar("T")


class Registry(Generic[T]):
    """Bounded id -> object map; the oldest entries are evicted first."""

    def __init__(self, max_entries: int = 10_000):
        self.max_entries = max_entries
        self._items: "OrderedDict[uuid.UUID, T]" = OrderedDict()

    def add(self, item_id: uuid.UUID, item: T) -> T:
        self._items[item_id] = item
        self._items.move_to_end(item_id)
        while len(self._items) > self.max_entries:
            _, evicted = self._items.popitem(last=False)
            self._on_discard(evicted)
        return item

    def get(self, item_id: uuid.UUID) -> Optional[T]:
        return self._items.get(item_id)

    def discard(self, item_id: uuid.UUID) -> Optional[T]:
        item = self._items.pop(item_id, None)
        if item is not None:
            self._on_discard(item)
        return item

    def _on_discard(self, item: T) -> None:
        pass

    def __len__(self) -> int:
        return len(self._items)


class GateRegistry(Registry[PrerequisiteGate]):
    """Open skip-ahead gates. Discarding a gate closes it."""

    def _on_discard(self, item: PrerequisiteGate) -> None:
        item.close()


class PracticeSessionRegistry(Registry[DifficultyDriftController]):
    """Drift controllers for open practice sessions."""
