"""
Silent repair of model output.

Models forget ids, answer "true" as a string, or write priorities in lower
case. These helpers fix what can be fixed without guessing at meaning and
return corrected copies; nothing here raises or mutates its input. What
cannot be fixed is left for schema validation to reject.
"""

import re
from typing import Iterable, List, Optional, Set

import emoji

from voiceplan.schemas.content import ACTIVITY_TYPES, PRIORITIES, TASK_STATUSES
from voiceplan.schemas.drafts import (
    ActivityDraft,
    DayDraft,
    ItineraryDraft,
    PlanDraft,
    SubTaskDraft,
    TaskDraft,
)
from voiceplan.utils.ids import new_id

def _canonical(value: Optional[str], choices: Iterable[str]) -> Optional[str]:
    """Map a label onto one of ``choices`` ignoring case and spacing."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    key = re.sub(r"[\s_-]+", "", text).casefold()
    for choice in choices:
        if re.sub(r"\s+", "", choice).casefold() == key:
            return choice
    return text


def normalize_priority(value: Optional[str]) -> Optional[str]:
    return _canonical(value, PRIORITIES)


def normalize_status(value: Optional[str], default: Optional[str] = "To Do") -> Optional[str]:
    return _canonical(value, TASK_STATUSES) or default


def normalize_activity_type(value: Optional[str]) -> Optional[str]:
    return _canonical(value, ACTIVITY_TYPES)


def coerce_completed(value) -> bool:
    """Anything but a real boolean counts as not completed."""
    return value if isinstance(value, bool) else False


def resolve_emoji(value: Optional[str]) -> Optional[str]:
    """
    Reduce a model-supplied emoji field to a single emoji character.

    Shortcodes such as ``:tada:`` are converted; text without any emoji
    (or with unknown shortcodes only) resolves to None.
    """
    if not value:
        return None
    text = emoji.emojize(str(value).strip(), language="alias")
    found = emoji.emoji_list(text)
    if found:
        return found[0]["emoji"]
    return None


# ============================================================================
# PLANS
# ============================================================================

def _repair_subtasks(
    subtasks: Optional[List[SubTaskDraft]], fresh: bool = False
) -> Optional[List[SubTaskDraft]]:
    """
    Give every subtask a unique id and a boolean ``completed``.

    With ``fresh`` every subtask gets a newly minted id regardless of what
    the model supplied.
    """
    if subtasks is None:
        return None

    seen: Set[str] = set()
    taken = {s.id for s in subtasks if s.id}
    repaired = []
    for subtask in subtasks:
        subtask_id = subtask.id
        if fresh or not subtask_id or subtask_id in seen:
            subtask_id = new_id("subtask", taken | seen)
        seen.add(subtask_id)
        repaired.append(
            subtask.model_copy(update={
                "id": subtask_id,
                "completed": coerce_completed(subtask.completed),
            })
        )
    return repaired


def backfill_plan_ids(draft: PlanDraft, keep_task_ids: Optional[Set[str]] = None) -> PlanDraft:
    """
    Assign ids to tasks and subtasks that lack one.

    A task id that is missing, repeats an earlier task's id, or (when
    ``keep_task_ids`` is given) is not one of the ids allowed to survive is
    replaced with a freshly minted one. On a plan whose ids are already
    present and unique this is a no-op. Subtasks of a task rejected by
    ``keep_task_ids`` are treated as new as well and get fresh ids.

    Args:
        draft: Plan as returned by the model
        keep_task_ids: Task ids allowed to survive; None keeps any unique id

    Returns:
        Repaired copy of the draft
    """
    taken = {task.id for category in draft.categories for task in category.tasks if task.id}
    seen: Set[str] = set()
    categories = []
    for category in draft.categories:
        tasks = []
        for task in category.tasks:
            task_id = task.id
            keep = task_id and task_id not in seen and (keep_task_ids is None or task_id in keep_task_ids)
            rejected = keep_task_ids is not None and task_id not in keep_task_ids
            if not keep:
                task_id = new_id("task", taken | seen)
            seen.add(task_id)
            tasks.append(task.model_copy(update={
                "id": task_id,
                "subtasks": _repair_subtasks(task.subtasks, fresh=rejected),
            }))
        categories.append(category.model_copy(update={"tasks": tasks}))
    return draft.model_copy(update={"categories": categories})


def normalize_task_fields(task: TaskDraft) -> TaskDraft:
    """Canonical labels and a single emoji for one task."""
    return task.model_copy(update={
        "priority": normalize_priority(task.priority),
        "status": normalize_status(task.status, default=None),
        "emoji": resolve_emoji(task.emoji),
        "deadline": (task.deadline or "").strip() or None,
    })


# ============================================================================
# ITINERARIES
# ============================================================================

def backfill_itinerary_ids(draft: ItineraryDraft) -> ItineraryDraft:
    """
    Assign ids to activities that lack one and number days 1..n.

    Days are ordered by the number the model gave them (unnumbered days keep
    their position after numbered ones) and renumbered sequentially.
    """
    if not draft.days:
        return draft

    taken = {a.id for day in draft.days for a in day.activities if a.id}
    seen: Set[str] = set()
    ordered = sorted(
        enumerate(draft.days),
        key=lambda pair: (pair[1].day is None, pair[1].day or 0, pair[0]),
    )

    days: List[DayDraft] = []
    for number, (_, day) in enumerate(ordered, start=1):
        activities: List[ActivityDraft] = []
        for activity in day.activities:
            activity_id = activity.id
            if not activity_id or activity_id in seen:
                activity_id = new_id("activity", taken | seen)
            seen.add(activity_id)
            activities.append(activity.model_copy(update={
                "id": activity_id,
                "type": normalize_activity_type(activity.type),
                "emoji": resolve_emoji(activity.emoji),
            }))
        days.append(day.model_copy(update={"day": number, "activities": activities}))

    return draft.model_copy(update={"days": days})
