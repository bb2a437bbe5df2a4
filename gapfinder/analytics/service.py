"""
Service layer to assemble per-concept mastery reports.
"""

from __future__ import annotations

from typing import Mapping, Sequence

from gapfinder.analytics.mastery import brier_score, mastery_score
from gapfinder.analytics.metrics import compute_trend
from gapfinder.schemas import Attempt, Concept, ConceptMasteryReport, Item


def concept_attempts(
    concept: Concept,
    items: Sequence[Item],
    attempts_by_item: Mapping[str, Sequence[Attempt]]
) -> list[Attempt]:
    """
    Union of attempts across every item tagged with the concept, newest first.
    """
    attempts: list[Attempt] = []
    for item in items:
        if concept.id in item.concept_ids:
            attempts.extend(attempts_by_item.get(item.id, ()))
    attempts.sort(key=lambda a: a.attempted_at, reverse=True)
    return attempts


def build_concept_report(concept: Concept, attempts: Sequence[Attempt]) -> ConceptMasteryReport:
    """
    Build the mastery report for one concept from its newest-first attempts.
    """
    total = len(attempts)
    correct = sum(1 for a in attempts if a.is_correct)

    return ConceptMasteryReport(
        concept_id=concept.id,
        concept_name=concept.name,
        mastery_score=mastery_score(attempts),
        attempts=total,
        correct=correct,
        avg_confidence=sum(a.confidence for a in attempts) / total if total else 0.0,
        brier_score=brier_score(attempts),
        last_attempted=attempts[0].attempted_at if attempts else None,
        stability=sum(a.stability for a in attempts) / total if total else 0.0,
        trend=compute_trend(attempts),
    )


def build_concept_mastery(
    concepts: Sequence[Concept],
    items: Sequence[Item],
    attempts_by_item: Mapping[str, Sequence[Attempt]]
) -> list[ConceptMasteryReport]:
    """
    Mastery reports for all concepts, in the order the concepts are given.
    """
    return [
        build_concept_report(concept, concept_attempts(concept, items, attempts_by_item))
        for concept in concepts
    ]
