"""
Storage layer for stored plans and itineraries.

The pipeline itself never persists anything; the HTTP surface hands stamped
documents to a ContentStore.
"""

from .base import ContentStore, ContentKind
from .memory_store import InMemoryContentStore
from .edits import get_task, rename, replace_task, set_subtask_completed, set_task_status

__all__ = [
    "ContentStore",
    "ContentKind",
    "InMemoryContentStore",
    "get_task",
    "rename",
    "replace_task",
    "set_subtask_completed",
    "set_task_status",
]
