"""
Pydantic models for concepts, items, attempts and study reports.

These models define the records handed between the scheduling core, the
storage adapters and the calling layer. Variant data (item types, session
types) travels with a `type`/`kind` tag as a discriminated union.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# ---- Scheduling enums ----

class ReviewState(str, Enum):
    """State of the continuous memory model."""
    NEW = "New"
    LEARNING = "Learning"
    REVIEW = "Review"
    RELEARNING = "Relearning"


class SirPhase(str, Enum):
    """Discrete retrieval phase, ordered from first exposure to long-horizon retention."""
    ENCODING = "Encoding"                          # Day 0
    SHORT_TERM_RETRIEVAL = "ShortTermRetrieval"    # 1-2 days
    INTERLEAVED_RETRIEVAL = "InterleavedRetrieval" # 3-5 days
    MEDIUM_SPACING = "MediumSpacing"               # 7-10 days
    INTEGRATION_TRANSFER = "IntegrationTransfer"   # 14+ days

    @property
    def order(self) -> int:
        """Position of the phase in the progression (0..4)."""
        return list(SirPhase).index(self)

    @classmethod
    def parse(cls, value: object) -> SirPhase:
        """
        Parse a stored phase value, defaulting to Encoding.

        Accepts enum members, raw values ("MediumSpacing") and JSON-quoted
        values ('"MediumSpacing"') left behind by older exports.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            text = value.strip().strip('"')
            for phase in cls:
                if text in (phase.value, phase.name):
                    return phase
        return cls.ENCODING


class MetacognitiveReflection(BaseModel):
    """Learner's self-report after answering."""
    felt_uncertain: bool = False
    felt_confusing: bool = False
    needs_review: bool = False
    notes: Optional[str] = None


# ---- Item types ----

class McqOption(BaseModel):
    id: str
    text: str
    is_correct: bool
    explanation: Optional[str] = None


class CalcVariable(BaseModel):
    name: str
    value: float
    unit: str


class CaseStep(BaseModel):
    step_number: int
    prompt: str
    correct_answer: str
    points: int
    explanation: str


class ClozeBlank(BaseModel):
    id: str
    correct_answer: str


class McqItem(BaseModel):
    """Multiple choice question."""
    type: Literal["mcq"] = "mcq"
    options: list[McqOption] = Field(..., min_length=2)


class FreeRecallItem(BaseModel):
    """Open answer compared against a single expected response."""
    type: Literal["free-recall"] = "free-recall"
    correct_answer: str


class CalculationItem(BaseModel):
    """Numeric calculation with a worked solution."""
    type: Literal["calc"] = "calc"
    formula: str
    variables: list[CalcVariable] = Field(default_factory=list)
    correct_answer: float
    unit: str
    worked_solution: list[str] = Field(default_factory=list)


class CaseVignetteItem(BaseModel):
    """Multi-step case with points per step."""
    type: Literal["case"] = "case"
    steps: list[CaseStep] = Field(..., min_length=1)


class ClozeItem(BaseModel):
    """Fill-in-the-blank text."""
    type: Literal["cloze"] = "cloze"
    blanks: list[ClozeBlank] = Field(..., min_length=1)


ItemType = Annotated[
    Union[McqItem, FreeRecallItem, CalculationItem, CaseVignetteItem, ClozeItem],
    Field(discriminator="type"),
]


# ---- Core entities ----

class LearningMaterial(BaseModel):
    """Source text a set of concepts was encoded from."""
    id: str = Field(default_factory=_new_id)
    content: str
    domain: str
    encoding_date: datetime = Field(default_factory=_utcnow)
    created_at: datetime = Field(default_factory=_utcnow)


class Concept(BaseModel):
    """A named unit of knowledge. Mastery is computed on demand, never stored."""
    id: str = Field(default_factory=_new_id)
    name: str
    domain: str = "General"
    subdomain: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    learning_material_id: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Item(BaseModel):
    """
    A gradable question tagged with one or more concepts.

    Items carry no scheduling state; everything is derived from the latest
    attempt on the item.
    """
    id: str = Field(default_factory=_new_id)
    stem: str
    item_type: ItemType
    concept_ids: list[str] = Field(..., min_length=1)
    difficulty: int = Field(default=50, ge=0, le=100)
    source: Optional[str] = None
    explanation: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def primary_concept_id(self) -> str:
        return self.concept_ids[0] if self.concept_ids else ""


class Attempt(BaseModel):
    """
    One graded response to one item.

    Attempts are immutable: the schedulers return updated copies of a draft,
    and the storage layer only ever appends.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    item_id: str
    session_id: Optional[str] = None
    user_answer: str = ""
    is_correct: bool
    confidence: int = Field(..., ge=1, le=5)
    time_spent_ms: int = Field(default=0, ge=0)
    attempted_at: datetime = Field(default_factory=_utcnow)

    # Discrete phase model
    sir_phase: SirPhase = SirPhase.ENCODING
    next_review_date: datetime = Field(default_factory=_utcnow)
    metacognitive: Optional[MetacognitiveReflection] = None

    # Continuous memory model
    stability: float = 0.0
    difficulty: float = 0.0
    elapsed_days: int = Field(default=0, ge=0)
    scheduled_days: int = 0
    review_state: ReviewState = ReviewState.NEW

    @classmethod
    def new(
        cls,
        item_id: str,
        user_answer: str,
        is_correct: bool,
        confidence: int,
        time_spent_ms: int,
        session_id: Optional[str] = None,
        metacognitive: Optional[MetacognitiveReflection] = None,
        attempted_at: Optional[datetime] = None
    ) -> Attempt:
        """Create an unscheduled draft attempt (New state, Encoding phase)."""
        if attempted_at is None:
            attempted_at = _utcnow()
        return cls(
            item_id=item_id,
            session_id=session_id,
            user_answer=user_answer,
            is_correct=is_correct,
            confidence=confidence,
            time_spent_ms=time_spent_ms,
            attempted_at=attempted_at,
            sir_phase=SirPhase.ENCODING,
            next_review_date=attempted_at,
            metacognitive=metacognitive,
        )


# ---- Sessions ----

class MixedSession(BaseModel):
    kind: Literal["mixed"] = "mixed"


class DiagnosticSession(BaseModel):
    kind: Literal["diagnostic"] = "diagnostic"


class FocusedSession(BaseModel):
    kind: Literal["focused"] = "focused"
    concept_id: str


class ExamSession(BaseModel):
    kind: Literal["exam"] = "exam"
    time_limit_ms: int = Field(..., gt=0)


SessionType = Annotated[
    Union[MixedSession, DiagnosticSession, FocusedSession, ExamSession],
    Field(discriminator="kind"),
]


class StudySession(BaseModel):
    """A sitting in which several attempts are made."""
    id: str = Field(default_factory=_new_id)
    session_type: SessionType = Field(default_factory=MixedSession)
    started_at: datetime = Field(default_factory=_utcnow)
    completed_at: Optional[datetime] = None
    total_items: int = Field(default=0, ge=0)
    completed_items: int = Field(default=0, ge=0)
    accuracy: float = 0.0
    average_confidence: float = 0.0


# ---- Reports ----

class ConceptMasteryReport(BaseModel):
    concept_id: str
    concept_name: str
    mastery_score: float
    attempts: int
    correct: int
    avg_confidence: float
    brier_score: float
    last_attempted: Optional[datetime] = None
    stability: float
    trend: Literal["improving", "declining", "stable"] = "stable"


class PlannedItem(BaseModel):
    item_id: str
    concept_id: str
    reason: Literal["new_concept", "due_for_review"]
    priority: int


class DailyPlan(BaseModel):
    date: datetime
    reviews: list[PlannedItem] = Field(default_factory=list)
    diagnostics: list[PlannedItem] = Field(default_factory=list)
    total_items: int = 0
    estimated_time_min: int = 0
    coverage_percent: float = 0.0


class PerformanceTrend(BaseModel):
    date: datetime
    accuracy: float
    items_completed: int
    avg_confidence: float


class CalibrationBin(BaseModel):
    """Observed accuracy for one stated confidence level."""
    confidence: int
    accuracy: float
    count: int
