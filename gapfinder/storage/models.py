"""
SQLAlchemy ORM Models for the GapFinder database.

Defines concept, item, attempt, session and learning-material tables.
Enums are stored as their string values; variant payloads (item types,
session types, metacognitive reports) and id lists are stored as JSON.
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class LearningMaterialRow(Base):
    """Source text that concepts were encoded from."""
    __tablename__ = 'learning_materials'

    id = Column(String(36), primary_key=True)
    content = Column(Text, nullable=False)
    domain = Column(String(255), nullable=False)
    encoding_date = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<LearningMaterialRow({self.id}, {self.domain})>"


class ConceptRow(Base):
    """A named unit of knowledge."""
    __tablename__ = 'concepts'

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    domain = Column(String(255), nullable=False)
    subdomain = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    learning_material_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<ConceptRow({self.id}, {self.name})>"


class ItemRow(Base):
    """A gradable question. Holds no scheduling state."""
    __tablename__ = 'items'

    # Insertion order for stable listing
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True)

    stem = Column(Text, nullable=False)
    item_type = Column(JSON, nullable=False)  # {"type": "mcq", ...}
    concept_ids = Column(JSON, nullable=False)
    difficulty = Column(Integer, nullable=False, default=50)
    source = Column(String(255), nullable=True)
    explanation = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<ItemRow({self.id})>"


class AttemptRow(Base):
    """
    Append-only log of graded responses.

    Each row carries the scheduling state produced for it by both models;
    the latest row per item is the item's current state.
    """
    __tablename__ = 'attempts'
    __table_args__ = (
        Index('idx_attempts_item_id', 'item_id'),
        Index('idx_attempts_session_id', 'session_id'),
        Index('idx_attempts_next_review', 'next_review_date'),
    )

    # Tie-breaker for attempts sharing a timestamp
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), nullable=False, unique=True)

    item_id = Column(String(36), nullable=False)
    session_id = Column(String(36), nullable=True)

    # Response
    user_answer = Column(Text, nullable=False, default="")
    is_correct = Column(Boolean, nullable=False)
    confidence = Column(Integer, nullable=False)  # 1-5
    time_spent_ms = Column(Integer, nullable=False, default=0)
    attempted_at = Column(DateTime(timezone=True), nullable=False)

    # Discrete phase model
    sir_phase = Column(String(50), nullable=False, default="Encoding")
    next_review_date = Column(DateTime(timezone=True), nullable=False)
    metacognitive = Column(JSON, nullable=True)

    # Continuous memory model
    stability = Column(Float, nullable=False)
    difficulty = Column(Float, nullable=False)
    elapsed_days = Column(Integer, nullable=False)
    scheduled_days = Column(Integer, nullable=False)
    review_state = Column(String(20), nullable=False)

    def __repr__(self):
        return f"<AttemptRow(id={self.id}, item={self.item_id}, phase={self.sir_phase})>"


class SessionRow(Base):
    """A study sitting."""
    __tablename__ = 'sessions'

    id = Column(String(36), primary_key=True)
    session_type = Column(JSON, nullable=False)  # {"kind": "focused", ...}
    started_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    total_items = Column(Integer, nullable=False, default=0)
    completed_items = Column(Integer, nullable=False, default=0)
    accuracy = Column(Float, nullable=False, default=0.0)
    average_confidence = Column(Float, nullable=False, default=0.0)

    def __repr__(self):
        return f"<SessionRow({self.id})>"
