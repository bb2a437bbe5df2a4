from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from gapfinder.schemas import (
    Attempt,
    Concept,
    FreeRecallItem,
    Item,
    ReviewState,
    SirPhase,
)
from gapfinder.service import StudyService
from gapfinder.storage import InMemoryStudyStore, SqlStudyStore, get_engine


T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_item(concept_ids: list[str], stem: str = "What is the answer?", answer: str = "42") -> Item:
    return Item(
        stem=stem,
        item_type=FreeRecallItem(correct_answer=answer),
        concept_ids=concept_ids,
    )


def make_attempt(
    item_id: str,
    is_correct: bool = True,
    confidence: int = 3,
    attempted_at: datetime = T0,
    next_review_date: Optional[datetime] = None,
    sir_phase: SirPhase = SirPhase.ENCODING,
    stability: float = 2.4,
    difficulty: float = 4.93,
    review_state: ReviewState = ReviewState.REVIEW,
) -> Attempt:
    return Attempt(
        item_id=item_id,
        is_correct=is_correct,
        confidence=confidence,
        attempted_at=attempted_at,
        next_review_date=next_review_date or attempted_at,
        sir_phase=sir_phase,
        stability=stability,
        difficulty=difficulty,
        scheduled_days=1,
        review_state=review_state,
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def memory_store() -> InMemoryStudyStore:
    return InMemoryStudyStore()


@pytest.fixture
def engine():
    engine = get_engine("sqlite:///:memory:")
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sql_store(engine) -> SqlStudyStore:
    return SqlStudyStore(engine)


@pytest.fixture
def concept() -> Concept:
    return Concept(name="Acid-base balance", domain="Physiology")


@pytest.fixture
def service(memory_store, clock) -> StudyService:
    return StudyService(memory_store, clock=clock)
