"""
Import concepts or items from a CSV file into the study database.

Concepts CSV: name,domain
Items CSV:    stem,correct_answer,concepts[,explanation]

Usage:
    python -m scripts.import_csv concepts data/concepts.csv
    python -m scripts.import_csv items data/items.csv --database-url sqlite:///other.db
"""

from __future__ import annotations

import argparse
from pathlib import Path

from gapfinder.config import Settings, configure_logging
from gapfinder.importer import import_concepts_from_csv, import_items_from_csv
from gapfinder.storage import SqlStudyStore, get_engine


def main():
    parser = argparse.ArgumentParser(
        description="Import concepts or items from CSV into the study database"
    )
    parser.add_argument(
        "kind",
        choices=["concepts", "items"],
        help="What the CSV contains"
    )
    parser.add_argument(
        "path",
        type=Path,
        help="Path to the CSV file"
    )
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy URL (default: DATABASE_URL or sqlite:///gapfinder.db)"
    )

    args = parser.parse_args()

    settings = Settings.from_env()
    configure_logging(settings.log_level)

    if not args.path.exists():
        raise FileNotFoundError(f"CSV not found: {args.path}")

    database_url = args.database_url or settings.database_url
    store = SqlStudyStore(get_engine(database_url, echo=settings.sqlalchemy_echo))

    print(f"Importing {args.kind} from {args.path} into {database_url}")
    if args.kind == "concepts":
        created = import_concepts_from_csv(store, str(args.path))
    else:
        created = import_items_from_csv(store, str(args.path))

    print(f"✓ Imported {len(created)} {args.kind}")


if __name__ == "__main__":
    main()
