"""
Record store used by the Salesforce sync layer to persist newly assigned
Salesforce ids on lending-domain entities.

The calling application normally supplies its own implementation backed by
its database. InMemoryRecordStore keeps saved entities in a list so the sync
layer can run (and be tested) without one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List


class RecordStore(ABC):
    @abstractmethod
    def save(self, entity: Any) -> None:
        """Persist an entity after one of its sf_* ids was assigned."""


class InMemoryRecordStore(RecordStore):
    def __init__(self) -> None:
        self.saved: List[Any] = []

    def save(self, entity: Any) -> None:
        self.saved.append(entity)
