"""
Storage - study data persistence

The StudyStore port plus its SQLAlchemy and in-memory adapters.
"""

from gapfinder.storage.database import (
    SqlStudyStore,
    get_engine,
    init_db,
    reset_db,
)
from gapfinder.storage.memory import InMemoryStudyStore
from gapfinder.storage.ports import StudyStore


__all__ = [
    "StudyStore",
    "SqlStudyStore",
    "InMemoryStudyStore",
    "get_engine",
    "init_db",
    "reset_db",
]
