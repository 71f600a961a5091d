"""BugDesk - a small bug tracker core with a terminal front end.

High-level public API:

from bugdesk import BugRepository, BugStore, FileStorage, BugFormData

store = BugStore(BugRepository(FileStorage('.bugdesk'))).initialize_blocking()
bug = store.create_bug(BugFormData(title='Crash on save', description='Steps...'))
store.add_comment(bug.id, 'Reproduced on main')

Filtering and dashboard aggregates live in :mod:`bugdesk.filters` and are
pure functions over ``store.bugs``.
"""

from __future__ import annotations

from .config import DeskConfig, default_config, load_config
from .errors import BugDeskError, NotFoundError, StoreNotReadyError, ValidationError
from .filters import BugStats, filtered_bugs, recent_bugs, stats, top_assignees
from .models import Bug, BugFilters, BugFormData, Comment
from .seed import generate_seed_bugs
from .storage import BugRepository, FileStorage, MemoryStorage, SaveResult
from .store import BugStore

__version__ = "0.1.0"

__all__ = [
    "Bug",
    "BugDeskError",
    "BugFilters",
    "BugFormData",
    "BugRepository",
    "BugStats",
    "BugStore",
    "Comment",
    "DeskConfig",
    "FileStorage",
    "MemoryStorage",
    "NotFoundError",
    "SaveResult",
    "StoreNotReadyError",
    "ValidationError",
    "default_config",
    "filtered_bugs",
    "generate_seed_bugs",
    "load_config",
    "recent_bugs",
    "stats",
    "top_assignees",
    "__version__",
]
