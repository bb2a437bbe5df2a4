from __future__ import annotations

from datetime import timedelta

from gapfinder import planner
from gapfinder.schemas import Concept, SirPhase

from conftest import T0, make_attempt, make_item


NOW = T0 + timedelta(days=10)


def due_attempt(item, phase=SirPhase.SHORT_TERM_RETRIEVAL, stability=2.4):
    return make_attempt(
        item.id,
        attempted_at=T0,
        next_review_date=NOW,
        sir_phase=phase,
        stability=stability,
    )


def future_attempt(item):
    return make_attempt(item.id, attempted_at=NOW, next_review_date=NOW + timedelta(days=3))


def test_next_review_item_falls_back_to_new_item():
    item = make_item(["c1"])

    assert planner.next_review_item([item], {}, NOW) == item


def test_next_review_item_prefers_due_over_new():
    new_item = make_item(["c1"])
    due_item = make_item(["c1"])
    attempts = {due_item.id: [due_attempt(due_item)]}

    assert planner.next_review_item([new_item, due_item], attempts, NOW) == due_item


def test_next_review_item_earliest_phase_first():
    late = make_item(["c1"])
    early = make_item(["c1"])
    tied = make_item(["c1"])
    attempts = {
        late.id: [due_attempt(late, SirPhase.MEDIUM_SPACING)],
        early.id: [due_attempt(early, SirPhase.ENCODING)],
        tied.id: [due_attempt(tied, SirPhase.ENCODING)],
    }

    assert planner.next_review_item([late, early, tied], attempts, NOW) == early


def test_next_review_item_none_when_nothing_due():
    item = make_item(["c1"])

    assert planner.next_review_item([item], {item.id: [future_attempt(item)]}, NOW) is None


def test_daily_plan_bounds_and_ordering():
    new_items = [make_item(["c1"]) for _ in range(5)]
    due_items = [make_item(["c2"]) for _ in range(20)]
    attempts = {
        item.id: [due_attempt(item, stability=3.0 if i % 2 else 30.0)]
        for i, item in enumerate(due_items)
    }
    concepts = [Concept(id="c1", name="One"), Concept(id="c2", name="Two")]

    plan = planner.daily_plan(new_items + due_items, concepts, attempts, NOW)

    assert len(plan.reviews) == planner.MAX_REVIEWS
    assert len(plan.diagnostics) == planner.MAX_DIAGNOSTICS
    priorities = [p.priority for p in plan.reviews]
    assert priorities == sorted(priorities, reverse=True)
    assert priorities.count(3) == 10
    assert all(p.reason == "due_for_review" for p in plan.reviews)
    assert all(p.reason == "new_concept" and p.priority == 2 for p in plan.diagnostics)
    assert plan.total_items == 15
    assert plan.estimated_time_min == 30
    assert plan.coverage_percent == 50.0


def test_daily_plan_skips_items_not_yet_due():
    item = make_item(["c1"])

    plan = planner.daily_plan([item], [Concept(id="c1", name="One")], {item.id: [future_attempt(item)]}, NOW)

    assert plan.reviews == []
    assert plan.diagnostics == []
    assert plan.total_items == 0
    assert plan.coverage_percent == 100.0


def test_coverage_without_concepts_is_zero():
    assert planner.coverage_percent([], [], {}) == 0.0


def test_coverage_ignores_unknown_concept_ids():
    item = make_item(["c1", "ghost"])
    concepts = [Concept(id="c1", name="One"), Concept(id="c2", name="Two")]

    assert planner.coverage_percent([item], concepts, {item.id: [future_attempt(item)]}) == 50.0


def test_due_count_includes_new_items():
    new_item = make_item(["c1"])
    due_item = make_item(["c1"])
    waiting = make_item(["c1"])
    attempts = {
        due_item.id: [due_attempt(due_item)],
        waiting.id: [future_attempt(waiting)],
    }

    assert planner.due_count([new_item, due_item, waiting], attempts, NOW) == 2
    assert planner.item_count([new_item, due_item, waiting]) == 3
