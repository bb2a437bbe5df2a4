"""
Review planner for selecting items to study.

Uses the retrieval-phase model to decide which items are due, then mixes:
- Due items (latest attempt's next review date has passed)
- New items (never attempted), surfaced as diagnostics

All functions work on an already-loaded snapshot of items and attempts; no
storage calls happen here.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Mapping, Optional, Sequence

from gapfinder import sir
from gapfinder.schemas import Attempt, Concept, DailyPlan, Item, PlannedItem


# ---- Plan Configuration ----
MAX_REVIEWS = 12
MAX_DIAGNOSTICS = 3
MINUTES_PER_ITEM = 2
LOW_STABILITY_DAYS = 7.0

DIAGNOSTIC_PRIORITY = 2
URGENT_REVIEW_PRIORITY = 3      # stability below LOW_STABILITY_DAYS
ROUTINE_REVIEW_PRIORITY = 1


def _latest(attempts_by_item: Mapping[str, Sequence[Attempt]], item_id: str) -> Optional[Attempt]:
    attempts = attempts_by_item.get(item_id)
    return attempts[0] if attempts else None


def classify_items(
    items: Sequence[Item],
    attempts_by_item: Mapping[str, Sequence[Attempt]],
    now: datetime
) -> tuple[list[tuple[Item, Attempt]], list[Item]]:
    """
    Split items into due (with their latest attempt) and new, keeping input order.

    Items that were attempted but are not yet due appear in neither list.
    """
    due: list[tuple[Item, Attempt]] = []
    new: list[Item] = []

    for item in items:
        latest = _latest(attempts_by_item, item.id)
        if latest is None:
            new.append(item)
        elif sir.is_due(latest, now):
            due.append((item, latest))

    return due, new


def next_review_item(
    items: Sequence[Item],
    attempts_by_item: Mapping[str, Sequence[Attempt]],
    now: Optional[datetime] = None
) -> Optional[Item]:
    """
    Select the next item to study.

    Priority order:
    1. Due items, earliest phase first (early phases are the most fragile)
    2. The first new item
    3. None when nothing is due and everything has been attempted

    Args:
        items: All items
        attempts_by_item: Attempts per item id, newest first
        now: Current time (defaults to now, UTC)

    Returns:
        The item to show next, or None
    """
    if now is None:
        now = datetime.now(timezone.utc)

    due, new = classify_items(items, attempts_by_item, now)

    if due:
        # sorted() is stable, so ties keep input order
        due = sorted(due, key=lambda pair: sir.phase_order(pair[1].sir_phase))
        return due[0][0]

    if new:
        return new[0]

    return None


def daily_plan(
    items: Sequence[Item],
    concepts: Sequence[Concept],
    attempts_by_item: Mapping[str, Sequence[Attempt]],
    now: Optional[datetime] = None
) -> DailyPlan:
    """
    Build today's bounded study plan.

    - Up to 3 diagnostics for never-attempted items (priority 2)
    - Up to 12 reviews for due items (priority 3 when stability < 7 days, else 1),
      sorted by descending priority

    Coverage is the share of concepts touched by at least one attempted item.

    Args:
        items: All items
        concepts: All concepts
        attempts_by_item: Attempts per item id, newest first
        now: Current time (defaults to now, UTC)

    Returns:
        DailyPlan
    """
    if now is None:
        now = datetime.now(timezone.utc)

    due, new = classify_items(items, attempts_by_item, now)

    diagnostics = [
        PlannedItem(
            item_id=item.id,
            concept_id=item.primary_concept_id,
            reason="new_concept",
            priority=DIAGNOSTIC_PRIORITY,
        )
        for item in new[:MAX_DIAGNOSTICS]
    ]

    reviews = [
        PlannedItem(
            item_id=item.id,
            concept_id=item.primary_concept_id,
            reason="due_for_review",
            priority=(
                URGENT_REVIEW_PRIORITY
                if latest.stability < LOW_STABILITY_DAYS
                else ROUTINE_REVIEW_PRIORITY
            ),
        )
        for item, latest in due
    ]
    reviews.sort(key=lambda p: p.priority, reverse=True)
    reviews = reviews[:MAX_REVIEWS]

    total_items = len(reviews) + len(diagnostics)

    return DailyPlan(
        date=now,
        reviews=reviews,
        diagnostics=diagnostics,
        total_items=total_items,
        estimated_time_min=total_items * MINUTES_PER_ITEM,
        coverage_percent=coverage_percent(items, concepts, attempts_by_item),
    )


def coverage_percent(
    items: Sequence[Item],
    concepts: Sequence[Concept],
    attempts_by_item: Mapping[str, Sequence[Attempt]]
) -> float:
    """Percentage of concepts referenced by at least one attempted item."""
    if not concepts:
        return 0.0

    known = {c.id for c in concepts}
    touched: set[str] = set()
    for item in items:
        if attempts_by_item.get(item.id):
            touched.update(cid for cid in item.concept_ids if cid in known)

    return len(touched) / len(known) * 100.0


def due_count(
    items: Sequence[Item],
    attempts_by_item: Mapping[str, Sequence[Attempt]],
    now: Optional[datetime] = None
) -> int:
    """Number of items waiting to be studied: new items plus due items."""
    if now is None:
        now = datetime.now(timezone.utc)

    due, new = classify_items(items, attempts_by_item, now)
    return len(due) + len(new)


def item_count(items: Sequence[Item]) -> int:
    """Total number of items."""
    return len(items)
