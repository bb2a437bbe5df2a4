"""
Ports (interfaces) for study-data storage.

The scheduling core and the application service depend on this contract,
not on a concrete database.

Implementations:
    - SqlStudyStore: SQLAlchemy-backed relational store.
    - InMemoryStudyStore: dict-backed store for tests and fixtures.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from gapfinder.schemas import (
    Attempt,
    Concept,
    Item,
    LearningMaterial,
    StudySession,
)


class StudyStore(ABC):
    """
    Port for reading and appending study data.

    Attempts are append-only; there is no update or delete for a single attempt.
    """

    # ---- Attempts (used by the scheduling core) ----

    @abstractmethod
    def get_latest_attempt(self, item_id: str) -> Optional[Attempt]:
        """Most recent attempt on the item, or None for a new item."""

    @abstractmethod
    def get_all_attempts(self, item_id: str) -> list[Attempt]:
        """All attempts on the item, newest first."""

    @abstractmethod
    def append_attempt(self, attempt: Attempt) -> None:
        """Persist a fully scheduled attempt."""

    def get_first_attempt(self, item_id: str) -> Optional[Attempt]:
        """Oldest attempt on the item (when it was first encoded)."""
        attempts = self.get_all_attempts(item_id)
        return attempts[-1] if attempts else None

    def get_attempts_by_item(self, items: Iterable[Item]) -> dict[str, list[Attempt]]:
        """Map of item id to that item's attempts, newest first."""
        return {item.id: self.get_all_attempts(item.id) for item in items}

    # ---- Items ----

    @abstractmethod
    def get_all_items(self) -> list[Item]:
        """All items in insertion order."""

    @abstractmethod
    def get_item(self, item_id: str) -> Optional[Item]:
        pass

    @abstractmethod
    def create_item(self, item: Item) -> None:
        pass

    @abstractmethod
    def update_item(self, item: Item) -> None:
        pass

    @abstractmethod
    def delete_item(self, item_id: str) -> None:
        pass

    # ---- Concepts ----

    @abstractmethod
    def get_all_concepts(self) -> list[Concept]:
        """All concepts ordered by name."""

    @abstractmethod
    def create_concept(self, concept: Concept) -> None:
        pass

    @abstractmethod
    def update_concept(self, concept: Concept) -> None:
        pass

    @abstractmethod
    def delete_concept(self, concept_id: str) -> None:
        pass

    # ---- Learning materials ----

    @abstractmethod
    def create_learning_material(self, material: LearningMaterial) -> None:
        pass

    @abstractmethod
    def get_learning_material(self, material_id: str) -> Optional[LearningMaterial]:
        pass

    # ---- Sessions ----

    @abstractmethod
    def create_session(self, session: StudySession) -> None:
        pass

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[StudySession]:
        pass

    @abstractmethod
    def update_session(self, session: StudySession) -> None:
        pass

    @abstractmethod
    def get_all_sessions(self) -> list[StudySession]:
        """All sessions, most recently started first."""

    # ---- Maintenance ----

    @abstractmethod
    def clear_all(self) -> None:
        """Delete attempts, sessions, items and concepts."""
