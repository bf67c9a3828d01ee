"""Identifier generation for tasks, subtasks, activities and stored documents."""

import time
import uuid
from typing import Collection


def new_id(prefix: str, existing: Collection[str] = ()) -> str:
    """
    Generate a unique identifier such as ``task-1718000000000-3f9a0c1b2d``.

    The random part carries 40 bits from uuid4, so two ids minted in the
    same millisecond collide with probability below 1e-12.

    Args:
        prefix: Entity prefix ("task", "subtask", "activity", ...)
        existing: Identifiers the new one must not collide with

    Returns:
        Fresh identifier not contained in ``existing``
    """
    while True:
        candidate = f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:10]}"
        if candidate not in existing:
            return candidate
