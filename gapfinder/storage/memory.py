"""
In-memory study store.

Dict-backed implementation of the StudyStore port. Used by the test suite
and for throwaway sessions; nothing is persisted.
"""

from __future__ import annotations

from typing import Optional

from gapfinder.schemas import (
    Attempt,
    Concept,
    Item,
    LearningMaterial,
    StudySession,
)
from gapfinder.storage.ports import StudyStore


class InMemoryStudyStore(StudyStore):
    """StudyStore held in plain dicts, preserving insertion order."""

    def __init__(self):
        self._items: dict[str, Item] = {}
        self._concepts: dict[str, Concept] = {}
        self._materials: dict[str, LearningMaterial] = {}
        self._sessions: dict[str, StudySession] = {}
        # Append order is the tie-breaker for equal timestamps
        self._attempts: list[Attempt] = []

    # ---- Attempts ----

    def _attempts_for(self, item_id: str) -> list[Attempt]:
        indexed = [
            (position, a) for position, a in enumerate(self._attempts)
            if a.item_id == item_id
        ]
        indexed.sort(key=lambda pair: (pair[1].attempted_at, pair[0]), reverse=True)
        return [a for _, a in indexed]

    def get_latest_attempt(self, item_id: str) -> Optional[Attempt]:
        attempts = self._attempts_for(item_id)
        return attempts[0] if attempts else None

    def get_all_attempts(self, item_id: str) -> list[Attempt]:
        return self._attempts_for(item_id)

    def append_attempt(self, attempt: Attempt) -> None:
        self._attempts.append(attempt)

    # ---- Items ----

    def get_all_items(self) -> list[Item]:
        return list(self._items.values())

    def get_item(self, item_id: str) -> Optional[Item]:
        return self._items.get(item_id)

    def create_item(self, item: Item) -> None:
        self._items[item.id] = item

    def update_item(self, item: Item) -> None:
        if item.id in self._items:
            self._items[item.id] = item

    def delete_item(self, item_id: str) -> None:
        self._items.pop(item_id, None)

    # ---- Concepts ----

    def get_all_concepts(self) -> list[Concept]:
        return sorted(self._concepts.values(), key=lambda c: c.name)

    def create_concept(self, concept: Concept) -> None:
        self._concepts[concept.id] = concept

    def update_concept(self, concept: Concept) -> None:
        if concept.id in self._concepts:
            self._concepts[concept.id] = concept

    def delete_concept(self, concept_id: str) -> None:
        self._concepts.pop(concept_id, None)

    # ---- Learning materials ----

    def create_learning_material(self, material: LearningMaterial) -> None:
        self._materials[material.id] = material

    def get_learning_material(self, material_id: str) -> Optional[LearningMaterial]:
        return self._materials.get(material_id)

    # ---- Sessions ----

    def create_session(self, session: StudySession) -> None:
        self._sessions[session.id] = session

    def get_session(self, session_id: str) -> Optional[StudySession]:
        return self._sessions.get(session_id)

    def update_session(self, session: StudySession) -> None:
        if session.id in self._sessions:
            self._sessions[session.id] = session

    def get_all_sessions(self) -> list[StudySession]:
        return sorted(self._sessions.values(), key=lambda s: s.started_at, reverse=True)

    # ---- Maintenance ----

    def clear_all(self) -> None:
        self._attempts.clear()
        self._sessions.clear()
        self._items.clear()
        self._concepts.clear()
