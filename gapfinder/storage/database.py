"""
Database - SQLAlchemy study store

Handles all database operations for concepts, items, attempts and sessions.
Uses SQLAlchemy ORM; SQLite by default, any SQLAlchemy URL works.

This module handles ONLY database I/O.
Scheduling logic lives in the fsrs, sir and planner modules.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import create_engine, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from gapfinder.schemas import (
    Attempt,
    Concept,
    Item,
    LearningMaterial,
    MetacognitiveReflection,
    ReviewState,
    SirPhase,
    StudySession,
)
from gapfinder.storage.models import (
    AttemptRow,
    Base,
    ConceptRow,
    ItemRow,
    LearningMaterialRow,
    SessionRow,
)
from gapfinder.storage.ports import StudyStore


LOGGER = logging.getLogger(__name__)

REQUIRED_TABLES = {"concepts", "items", "attempts", "sessions", "learning_materials"}


# ---- Engine setup ----

def get_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine for the given URL.

    In-memory SQLite shares one connection so every session sees the same
    data; other backends get a small connection pool.
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)

    return create_engine(
        database_url,
        pool_size=5,           # Keep 5 connections open
        max_overflow=10,       # Allow up to 10 extra connections
        pool_pre_ping=True,    # Verify connections before use
        echo=echo
    )


def init_db(engine: Engine) -> None:
    """
    Initialize database schema if tables don't exist.

    Safe to call multiple times - only creates missing tables.
    """
    existing_tables = set(inspect(engine).get_table_names())
    missing = REQUIRED_TABLES - existing_tables
    if missing:
        Base.metadata.create_all(engine)
        LOGGER.info("Created tables: %s", ", ".join(sorted(missing)))


def reset_db(engine: Engine) -> None:
    """
    DANGEROUS: Delete all data and recreate tables.

    All study history will be lost!
    """
    Base.metadata.drop_all(engine)
    LOGGER.warning("All tables dropped")
    init_db(engine)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite returns naive datetimes; stored values are always UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ---- Row conversion ----

def _attempt_to_row(attempt: Attempt) -> AttemptRow:
    return AttemptRow(
        id=attempt.id,
        item_id=attempt.item_id,
        session_id=attempt.session_id,
        user_answer=attempt.user_answer,
        is_correct=attempt.is_correct,
        confidence=attempt.confidence,
        time_spent_ms=attempt.time_spent_ms,
        attempted_at=_as_utc(attempt.attempted_at),
        sir_phase=attempt.sir_phase.value,
        next_review_date=_as_utc(attempt.next_review_date),
        metacognitive=(
            attempt.metacognitive.model_dump(mode="json")
            if attempt.metacognitive is not None
            else None
        ),
        stability=attempt.stability,
        difficulty=attempt.difficulty,
        elapsed_days=attempt.elapsed_days,
        scheduled_days=attempt.scheduled_days,
        review_state=attempt.review_state.value,
    )


def _row_to_attempt(row: AttemptRow) -> Attempt:
    attempted_at = _as_utc(row.attempted_at)
    return Attempt(
        id=row.id,
        item_id=row.item_id,
        session_id=row.session_id,
        user_answer=row.user_answer,
        is_correct=row.is_correct,
        confidence=row.confidence,
        time_spent_ms=row.time_spent_ms,
        attempted_at=attempted_at,
        # Rows written before phases existed fall back to Encoding
        sir_phase=SirPhase.parse(row.sir_phase),
        next_review_date=_as_utc(row.next_review_date) or attempted_at,
        metacognitive=(
            MetacognitiveReflection.model_validate(row.metacognitive)
            if row.metacognitive
            else None
        ),
        stability=row.stability,
        difficulty=row.difficulty,
        elapsed_days=row.elapsed_days,
        scheduled_days=row.scheduled_days,
        review_state=ReviewState(row.review_state),
    )


def _row_to_item(row: ItemRow) -> Item:
    return Item(
        id=row.id,
        stem=row.stem,
        item_type=row.item_type,
        concept_ids=list(row.concept_ids),
        difficulty=row.difficulty,
        source=row.source,
        explanation=row.explanation,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


def _row_to_concept(row: ConceptRow) -> Concept:
    return Concept(
        id=row.id,
        name=row.name,
        domain=row.domain,
        subdomain=row.subdomain,
        description=row.description,
        tags=list(row.tags or []),
        learning_material_id=row.learning_material_id,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


def _row_to_session(row: SessionRow) -> StudySession:
    return StudySession(
        id=row.id,
        session_type=row.session_type,
        started_at=_as_utc(row.started_at),
        completed_at=_as_utc(row.completed_at),
        total_items=row.total_items,
        completed_items=row.completed_items,
        accuracy=row.accuracy,
        average_confidence=row.average_confidence,
    )


class SqlStudyStore(StudyStore):
    """
    StudyStore backed by a SQLAlchemy engine.

    Opens a short-lived session per operation. Failures propagate as
    SQLAlchemy exceptions; nothing is retried here.
    """

    def __init__(self, engine: Engine, create_schema: bool = True):
        self.engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        if create_schema:
            init_db(engine)

    def _session(self) -> Session:
        return self._session_factory()

    # ---- Attempts ----

    def get_latest_attempt(self, item_id: str) -> Optional[Attempt]:
        session = self._session()
        try:
            row = session.query(AttemptRow).filter(
                AttemptRow.item_id == item_id
            ).order_by(
                AttemptRow.attempted_at.desc(),
                AttemptRow.seq.desc()
            ).first()
            return _row_to_attempt(row) if row is not None else None
        finally:
            session.close()

    def get_all_attempts(self, item_id: str) -> list[Attempt]:
        session = self._session()
        try:
            rows = session.query(AttemptRow).filter(
                AttemptRow.item_id == item_id
            ).order_by(
                AttemptRow.attempted_at.desc(),
                AttemptRow.seq.desc()
            ).all()
            return [_row_to_attempt(row) for row in rows]
        finally:
            session.close()

    def get_first_attempt(self, item_id: str) -> Optional[Attempt]:
        session = self._session()
        try:
            row = session.query(AttemptRow).filter(
                AttemptRow.item_id == item_id
            ).order_by(
                AttemptRow.attempted_at.asc(),
                AttemptRow.seq.asc()
            ).first()
            return _row_to_attempt(row) if row is not None else None
        finally:
            session.close()

    def append_attempt(self, attempt: Attempt) -> None:
        session = self._session()
        try:
            session.add(_attempt_to_row(attempt))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ---- Items ----

    def get_all_items(self) -> list[Item]:
        session = self._session()
        try:
            rows = session.query(ItemRow).order_by(ItemRow.seq.asc()).all()
            return [_row_to_item(row) for row in rows]
        finally:
            session.close()

    def get_item(self, item_id: str) -> Optional[Item]:
        session = self._session()
        try:
            row = session.query(ItemRow).filter(ItemRow.id == item_id).first()
            return _row_to_item(row) if row is not None else None
        finally:
            session.close()

    def create_item(self, item: Item) -> None:
        payload = item.model_dump(mode="json")
        session = self._session()
        try:
            session.add(ItemRow(
                id=item.id,
                stem=item.stem,
                item_type=payload["item_type"],
                concept_ids=payload["concept_ids"],
                difficulty=item.difficulty,
                source=item.source,
                explanation=item.explanation,
                created_at=_as_utc(item.created_at),
                updated_at=_as_utc(item.updated_at),
            ))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def update_item(self, item: Item) -> None:
        payload = item.model_dump(mode="json")
        session = self._session()
        try:
            row = session.query(ItemRow).filter(ItemRow.id == item.id).first()
            if row is None:
                return
            row.stem = item.stem
            row.item_type = payload["item_type"]
            row.concept_ids = payload["concept_ids"]
            row.difficulty = item.difficulty
            row.source = item.source
            row.explanation = item.explanation
            row.updated_at = _as_utc(item.updated_at)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def delete_item(self, item_id: str) -> None:
        session = self._session()
        try:
            session.query(ItemRow).filter(ItemRow.id == item_id).delete()
            session.commit()
        finally:
            session.close()

    # ---- Concepts ----

    def get_all_concepts(self) -> list[Concept]:
        session = self._session()
        try:
            rows = session.query(ConceptRow).order_by(ConceptRow.name.asc()).all()
            return [_row_to_concept(row) for row in rows]
        finally:
            session.close()

    def create_concept(self, concept: Concept) -> None:
        session = self._session()
        try:
            session.add(ConceptRow(
                id=concept.id,
                name=concept.name,
                domain=concept.domain,
                subdomain=concept.subdomain,
                description=concept.description,
                tags=list(concept.tags),
                learning_material_id=concept.learning_material_id,
                created_at=_as_utc(concept.created_at),
                updated_at=_as_utc(concept.updated_at),
            ))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def update_concept(self, concept: Concept) -> None:
        session = self._session()
        try:
            row = session.query(ConceptRow).filter(ConceptRow.id == concept.id).first()
            if row is None:
                return
            row.name = concept.name
            row.domain = concept.domain
            row.subdomain = concept.subdomain
            row.description = concept.description
            row.tags = list(concept.tags)
            row.learning_material_id = concept.learning_material_id
            row.updated_at = _as_utc(concept.updated_at)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def delete_concept(self, concept_id: str) -> None:
        session = self._session()
        try:
            session.query(ConceptRow).filter(ConceptRow.id == concept_id).delete()
            session.commit()
        finally:
            session.close()

    # ---- Learning materials ----

    def create_learning_material(self, material: LearningMaterial) -> None:
        session = self._session()
        try:
            session.add(LearningMaterialRow(
                id=material.id,
                content=material.content,
                domain=material.domain,
                encoding_date=_as_utc(material.encoding_date),
                created_at=_as_utc(material.created_at),
            ))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_learning_material(self, material_id: str) -> Optional[LearningMaterial]:
        session = self._session()
        try:
            row = session.query(LearningMaterialRow).filter(
                LearningMaterialRow.id == material_id
            ).first()
            if row is None:
                return None
            return LearningMaterial(
                id=row.id,
                content=row.content,
                domain=row.domain,
                encoding_date=_as_utc(row.encoding_date),
                created_at=_as_utc(row.created_at),
            )
        finally:
            session.close()

    # ---- Sessions ----

    def create_session(self, study_session: StudySession) -> None:
        session = self._session()
        try:
            session.add(SessionRow(
                id=study_session.id,
                session_type=study_session.session_type.model_dump(mode="json"),
                started_at=_as_utc(study_session.started_at),
                completed_at=_as_utc(study_session.completed_at),
                total_items=study_session.total_items,
                completed_items=study_session.completed_items,
                accuracy=study_session.accuracy,
                average_confidence=study_session.average_confidence,
            ))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_session(self, session_id: str) -> Optional[StudySession]:
        session = self._session()
        try:
            row = session.query(SessionRow).filter(SessionRow.id == session_id).first()
            return _row_to_session(row) if row is not None else None
        finally:
            session.close()

    def update_session(self, study_session: StudySession) -> None:
        session = self._session()
        try:
            row = session.query(SessionRow).filter(SessionRow.id == study_session.id).first()
            if row is None:
                return
            row.completed_at = _as_utc(study_session.completed_at)
            row.completed_items = study_session.completed_items
            row.accuracy = study_session.accuracy
            row.average_confidence = study_session.average_confidence
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_all_sessions(self) -> list[StudySession]:
        session = self._session()
        try:
            rows = session.query(SessionRow).order_by(SessionRow.started_at.desc()).all()
            return [_row_to_session(row) for row in rows]
        finally:
            session.close()

    # ---- Maintenance ----

    def clear_all(self) -> None:
        session = self._session()
        try:
            session.query(AttemptRow).delete()
            session.query(SessionRow).delete()
            session.query(ItemRow).delete()
            session.query(ConceptRow).delete()
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
        LOGGER.info("Cleared all study data")
