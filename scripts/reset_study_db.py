"""
Reset the study database.

DANGEROUS: This deletes all concepts, items and attempt history!
Only use when you want to start fresh for testing.

Usage:
    python -m scripts.reset_study_db [--database-url URL]
"""

import argparse

from gapfinder.config import Settings, configure_logging
from gapfinder.storage import get_engine, reset_db


def main():
    parser = argparse.ArgumentParser(description="Drop and recreate all study tables")
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy URL (default: DATABASE_URL or sqlite:///gapfinder.db)"
    )
    args = parser.parse_args()

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    database_url = args.database_url or settings.database_url

    print("=" * 60)
    print("WARNING: Reset Study Database")
    print("=" * 60)
    print()
    print(f"Database: {database_url}")
    print("This will DELETE:")
    print("  - All concepts and items")
    print("  - All attempts (phases, stability, difficulty)")
    print("  - All study sessions")
    print()

    response = input("Are you sure you want to reset? (type 'yes' to confirm): ")

    if response.lower() == "yes":
        print("\nResetting database...")
        reset_db(get_engine(database_url, echo=settings.sqlalchemy_echo))
        print("✓ Database reset complete!")
    else:
        print("\nCancelled. No changes made.")


if __name__ == "__main__":
    main()
