"""
Study service - application entry points.

Wires the scheduling core to a StudyStore:

    submit_attempt()      -> phase model + memory model, then append
    get_concept_mastery() -> per-concept mastery reports
    get_daily_plan()      -> bounded plan of reviews and diagnostics
    get_next_review_item()
    get_due_count() / get_item_count()

Every scheduling decision happens in the pure fsrs / sir / planner modules;
this layer only loads the snapshot they need and persists the result.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Optional

from gapfinder import planner
from gapfinder.analytics import build_concept_mastery, calibration_curve, performance_trends
from gapfinder.fsrs import FSRSParameters, apply_memory_update
from gapfinder.fsrs.scheduler import DEFAULT_PARAMETERS
from gapfinder.schemas import (
    Attempt,
    CalibrationBin,
    Concept,
    ConceptMasteryReport,
    DailyPlan,
    Item,
    LearningMaterial,
    MetacognitiveReflection,
    MixedSession,
    PerformanceTrend,
    SessionType,
    StudySession,
)
from gapfinder.sir import schedule_phase
from gapfinder.storage.ports import StudyStore

if TYPE_CHECKING:
    from gapfinder.config import Settings


LOGGER = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400


class ItemNotFoundError(LookupError):
    """Raised when an attempt references an unknown item."""


class SessionNotFoundError(LookupError):
    """Raised when a session id does not exist."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def elapsed_days_between(earlier: datetime, later: datetime) -> int:
    """Whole days between two timestamps, floored and never negative."""
    seconds = (later - earlier).total_seconds()
    return max(0, math.floor(seconds / SECONDS_PER_DAY))


class StudyService:
    """
    Calling-layer API over a StudyStore.

    Args:
        store: Storage adapter
        params: Memory-model parameters (defaults to the standard weights)
        clock: Callable returning the current UTC time
    """

    def __init__(
        self,
        store: StudyStore,
        params: Optional[FSRSParameters] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.store = store
        self.params = params or DEFAULT_PARAMETERS
        self.clock = clock or _utcnow

    @classmethod
    def from_settings(
        cls,
        store: StudyStore,
        settings: Settings,
        clock: Optional[Callable[[], datetime]] = None
    ) -> StudyService:
        """Build a service whose memory model uses the configured retention and interval cap."""
        return cls(store, params=settings.fsrs_parameters(), clock=clock)

    # ---- Attempts ----

    def submit_attempt(
        self,
        item_id: str,
        user_answer: str,
        is_correct: bool,
        confidence: int,
        time_spent_ms: int,
        metacognitive: Optional[MetacognitiveReflection] = None,
        session_id: Optional[str] = None
    ) -> Attempt:
        """
        Record a graded response and schedule the item.

        Order of operations:
        1. Validate input and load the latest prior attempt
        2. Build a draft attempt with elapsed days since that attempt
        3. Phase model fills sir_phase / next_review_date
        4. Memory model fills stability / difficulty / scheduled_days / review_state
        5. Append once

        Raises:
            ValueError: confidence outside 1-5 or negative time_spent_ms
            ItemNotFoundError: item_id does not exist
        """
        if not 1 <= confidence <= 5:
            raise ValueError(f"confidence must be between 1 and 5, got {confidence}")
        if time_spent_ms < 0:
            raise ValueError(f"time_spent_ms must be non-negative, got {time_spent_ms}")

        if self.store.get_item(item_id) is None:
            raise ItemNotFoundError(f"Item not found: {item_id}")

        now = self.clock()
        prior = self.store.get_latest_attempt(item_id)
        first = self.store.get_first_attempt(item_id)

        draft = Attempt.new(
            item_id=item_id,
            user_answer=user_answer,
            is_correct=is_correct,
            confidence=confidence,
            time_spent_ms=time_spent_ms,
            session_id=session_id,
            metacognitive=metacognitive,
            attempted_at=now,
        )
        if prior is not None:
            draft = draft.model_copy(update={
                "elapsed_days": elapsed_days_between(prior.attempted_at, now),
            })

        scheduled = schedule_phase(draft, prior, first.attempted_at if first else None)
        scheduled = apply_memory_update(scheduled, prior, self.params)

        self.store.append_attempt(scheduled)

        LOGGER.debug(
            "Scheduled item %s: phase=%s next_review=%s state=%s stability=%.2f",
            item_id,
            scheduled.sir_phase.value,
            scheduled.next_review_date.isoformat(),
            scheduled.review_state.value,
            scheduled.stability,
        )
        return scheduled

    def get_attempts_by_item(self, item_id: str) -> list[Attempt]:
        """All attempts on an item, newest first."""
        return self.store.get_all_attempts(item_id)

    # ---- Planning ----

    def _snapshot(self) -> tuple[list[Item], dict[str, list[Attempt]]]:
        items = self.store.get_all_items()
        return items, self.store.get_attempts_by_item(items)

    def get_daily_plan(self) -> DailyPlan:
        items, attempts_by_item = self._snapshot()
        plan = planner.daily_plan(
            items,
            self.store.get_all_concepts(),
            attempts_by_item,
            now=self.clock(),
        )
        LOGGER.info(
            "Daily plan: %d reviews, %d diagnostics, %.1f%% coverage",
            len(plan.reviews),
            len(plan.diagnostics),
            plan.coverage_percent,
        )
        return plan

    def get_next_review_item(self) -> Optional[Item]:
        items, attempts_by_item = self._snapshot()
        return planner.next_review_item(items, attempts_by_item, now=self.clock())

    def get_due_count(self) -> int:
        items, attempts_by_item = self._snapshot()
        return planner.due_count(items, attempts_by_item, now=self.clock())

    def get_item_count(self) -> int:
        return planner.item_count(self.store.get_all_items())

    # ---- Analytics ----

    def get_concept_mastery(self) -> list[ConceptMasteryReport]:
        """Mastery report for every concept, in name order."""
        items, attempts_by_item = self._snapshot()
        return build_concept_mastery(self.store.get_all_concepts(), items, attempts_by_item)

    def get_calibration_curve(self) -> list[CalibrationBin]:
        _, attempts_by_item = self._snapshot()
        attempts = [a for history in attempts_by_item.values() for a in history]
        return calibration_curve(attempts)

    def get_performance_trends(self) -> list[PerformanceTrend]:
        return performance_trends(self.store.get_all_sessions())

    # ---- Content ----

    def create_concept(self, name: str, domain: str = "General", **fields) -> Concept:
        concept = Concept(name=name, domain=domain, **fields)
        self.store.create_concept(concept)
        return concept

    def create_item(self, item: Item) -> Item:
        self.store.create_item(item)
        return item

    def create_learning_material(self, content: str, domain: str) -> LearningMaterial:
        now = self.clock()
        material = LearningMaterial(
            content=content,
            domain=domain,
            encoding_date=now,
            created_at=now,
        )
        self.store.create_learning_material(material)
        return material

    # ---- Sessions ----

    def create_session(
        self,
        session_type: Optional[SessionType] = None,
        total_items: int = 0
    ) -> StudySession:
        session = StudySession(
            session_type=session_type or MixedSession(),
            started_at=self.clock(),
            total_items=total_items,
        )
        self.store.create_session(session)
        return session

    def complete_session(
        self,
        session_id: str,
        completed_items: int,
        accuracy: float,
        average_confidence: float
    ) -> StudySession:
        """
        Close a session with the summary stats reported by the caller.

        Raises:
            SessionNotFoundError: session_id does not exist
        """
        session = self.store.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")

        session = session.model_copy(update={
            "completed_at": self.clock(),
            "completed_items": completed_items,
            "accuracy": accuracy,
            "average_confidence": average_confidence,
        })
        self.store.update_session(session)
        LOGGER.info("Completed session %s (%d items)", session_id, completed_items)
        return session

    # ---- Maintenance ----

    def clear_all_data(self) -> None:
        self.store.clear_all()
        LOGGER.warning("All study data cleared")
