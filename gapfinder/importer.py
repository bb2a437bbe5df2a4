"""
CSV import for concepts and items.

Concepts CSV (header row required):
    name,domain[,...]
    Extra columns are ignored; an empty domain becomes "General".

Items CSV (header row required):
    stem,correct_answer,concepts[,explanation]
    `concepts` is a ";"-separated list of concept names. Unknown names are
    created on the fly in the "General" domain. Every row becomes a
    free-recall item.
"""

from __future__ import annotations

import logging
from typing import IO, Union

import pandas as pd

from gapfinder.schemas import Concept, FreeRecallItem, Item
from gapfinder.storage.ports import StudyStore


LOGGER = logging.getLogger(__name__)

DEFAULT_DOMAIN = "General"
CONCEPT_SEPARATOR = ";"
ITEM_COLUMNS = ("stem", "correct_answer", "concepts")

CsvSource = Union[str, IO[str]]


def _cell(value: object) -> str:
    """Normalize a CSV cell to a stripped string ('' for missing)."""
    if value is None or pd.isna(value):
        return ""
    return str(value).strip()


def parse_concept_names(raw: object) -> list[str]:
    """Split a ';'-separated concept list, dropping blanks."""
    names = [name.strip() for name in _cell(raw).split(CONCEPT_SEPARATOR)]
    return [name for name in names if name]


def import_concepts_from_csv(store: StudyStore, csv_source: CsvSource) -> list[Concept]:
    """
    Create one concept per CSV row.

    The first column is the concept name and the second its domain. Rows with
    an empty name are skipped; empty files and files with fewer than two
    columns import nothing.

    Args:
        store: Target store
        csv_source: Path or readable text buffer

    Returns:
        Concepts created, in file order
    """
    try:
        df = pd.read_csv(csv_source, dtype=str)
    except pd.errors.EmptyDataError:
        LOGGER.warning("Concept CSV is empty")
        return []
    if len(df.columns) < 2:
        LOGGER.warning("Concept CSV needs at least two columns, found %d", len(df.columns))
        return []

    created: list[Concept] = []
    for row in df.itertuples(index=False):
        name = _cell(row[0])
        if not name:
            continue
        concept = Concept(name=name, domain=_cell(row[1]) or DEFAULT_DOMAIN)
        store.create_concept(concept)
        created.append(concept)

    LOGGER.info("Imported %d concepts", len(created))
    return created


def import_items_from_csv(store: StudyStore, csv_source: CsvSource) -> list[Item]:
    """
    Create one free-recall item per CSV row, linking concepts by name.

    Rows without a stem, answer or concept are skipped.

    Raises:
        ValueError: a required column is missing

    Returns:
        Items created, in file order
    """
    try:
        df = pd.read_csv(csv_source, dtype=str)
    except pd.errors.EmptyDataError:
        LOGGER.warning("Item CSV is empty")
        return []
    missing = [col for col in ITEM_COLUMNS if col not in df.columns]
    if missing:
        raise ValueError(f"Item CSV is missing columns: {', '.join(missing)}")

    concepts_by_name = {c.name: c for c in store.get_all_concepts()}
    has_explanation = "explanation" in df.columns

    created: list[Item] = []
    skipped = 0
    for _, row in df.iterrows():
        stem = _cell(row["stem"])
        answer = _cell(row["correct_answer"])
        names = parse_concept_names(row["concepts"])
        if not stem or not answer or not names:
            skipped += 1
            continue

        concept_ids = []
        for name in names:
            concept = concepts_by_name.get(name)
            if concept is None:
                concept = Concept(name=name, domain=DEFAULT_DOMAIN)
                store.create_concept(concept)
                concepts_by_name[name] = concept
                LOGGER.debug("Created concept %r while importing items", name)
            concept_ids.append(concept.id)

        item = Item(
            stem=stem,
            item_type=FreeRecallItem(correct_answer=answer),
            concept_ids=concept_ids,
            explanation=_cell(row["explanation"]) if has_explanation else "",
        )
        store.create_item(item)
        created.append(item)

    LOGGER.info("Imported %d items (%d rows skipped)", len(created), skipped)
    return created
