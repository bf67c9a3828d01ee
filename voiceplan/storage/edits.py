"""
Direct edits to stored documents.

These are the changes the UI makes without a recording: ticking tasks and
subtasks, and renaming. Each returns an updated copy.
"""

from datetime import datetime, timezone

from voiceplan.schemas.content import StoredPlan, Task, TaskStatus
from voiceplan.storage.base import StoredContent
from voiceplan.utils.exceptions import NotFoundError


def _touch(document: StoredContent, **updates) -> StoredContent:
    updates["updated_at"] = datetime.now(timezone.utc).isoformat()
    # model_validate re-runs the document validators on the edited copy
    return type(document).model_validate({**document.model_dump(), **updates})


def _locate(plan: StoredPlan, task_id: str):
    for c_idx, category in enumerate(plan.categories):
        for t_idx, task in enumerate(category.tasks):
            if task.id == task_id:
                return c_idx, t_idx
    raise NotFoundError(f"Task not found: {task_id}", context={"plan_id": plan.id, "task_id": task_id})


def replace_task(plan: StoredPlan, task: Task) -> StoredPlan:
    """Put ``task`` in place of the task with the same id."""
    c_idx, t_idx = _locate(plan, task.id)
    categories = [category.model_dump() for category in plan.categories]
    categories[c_idx]["tasks"][t_idx] = task.model_dump()
    return _touch(plan, categories=categories)


def get_task(plan: StoredPlan, task_id: str) -> Task:
    c_idx, t_idx = _locate(plan, task_id)
    return plan.categories[c_idx].tasks[t_idx]


def set_task_status(plan: StoredPlan, task_id: str, status: TaskStatus) -> StoredPlan:
    task = get_task(plan, task_id)
    return replace_task(plan, task.model_copy(update={"status": status}))


def set_subtask_completed(plan: StoredPlan, task_id: str, subtask_id: str, completed: bool) -> StoredPlan:
    task = get_task(plan, task_id)
    if subtask_id not in {subtask.id for subtask in task.subtasks}:
        raise NotFoundError(
            f"Subtask not found: {subtask_id}",
            context={"task_id": task_id, "subtask_id": subtask_id},
        )
    subtasks = [
        subtask.model_copy(update={"completed": completed}) if subtask.id == subtask_id else subtask
        for subtask in task.subtasks
    ]
    return replace_task(plan, task.model_copy(update={"subtasks": subtasks}))


def rename(document: StoredContent, title: str) -> StoredContent:
    """Change the title of a stored plan or itinerary."""
    return _touch(document, title=title.strip())
