"""
Plan Generator.

Creates a categorized task list from transcribed text, or updates an
existing plan from new text without losing the tasks the user did not talk
about. Generation runs in two passes:

1. A structural pass asks the model for the shape of the plan: categories
   and bare task descriptions (create mode), or the edited task list with the
   original ids kept for persisting tasks (update mode).
2. An enrichment pass sends every task that is new to the plan through the
   Task Detail Extractor, concurrently, and merges category, priority,
   deadline and emoji back onto it.
"""

from .llm_config import ModelInvoker
from .repair import backfill_plan_ids, normalize_status, normalize_task_fields
from .task_details import TaskDetailExtractor
from .validation import ensure_valid
from voiceplan.schemas.content import Plan, Task, TaskDetails
from voiceplan.schemas.drafts import CategoryDraft, PlanDraft, TaskDraft
from voiceplan.utils.exceptions import GenerationError
import asyncio
import json
import logging
from typing import Dict, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "General"

# Fields a persisting task keeps from the prior plan when the model leaves them out
CARRIED_TASK_FIELDS = (
    "emoji",
    "deadline",
    "priority",
    "people",
    "organizations",
    "status",
    "reminder",
    "subtasks",
)

PLAN_CREATE_SYSTEM_PROMPT = """You are a highly intelligent personal assistant. Your job is to turn a user's transcribed voice input into a structured plan.

Instructions:
1. Read the user's transcribed text carefully.
2. Give the plan a concise and relevant 'title' and a one-sentence 'summary'.
3. Group tasks into logical 'categories' (e.g., "Work", "Personal", "Health").
4. For each task, write ONLY a clear 'task' description. Do NOT add an emoji, a priority or a deadline field; those are filled in later, one task at a time.
5. If smaller steps are mentioned, list them as 'subtasks' with a 'text' and 'completed' set to false.
6. If the user asks to be reminded, add a 'reminder' with the 'time' as spoken and a short follow-up 'question' for the notification (e.g., "Are you at the gym?").
7. If people or organizations are named for a task, list them in 'people' and 'organizations'.

Scheduling:
- Simple to-do list ("I need to buy milk, eggs, and bread"): plain task descriptions, no times.
- Constrained scheduling ("Schedule my workout and a team meeting between 2 pm and 5 pm"): distribute the tasks inside that window and put the chosen time in the description (e.g., "Team meeting at 2:00 PM").
- Proactive scheduling ("I need to go to the gym, do work, and study, make a plan for me"): propose a sensible time for every task and put it in the description (e.g., "Go to the gym at 7:00 AM").

IMPORTANT: Your output MUST be a single JSON object that strictly follows the output schema.
"""

PLAN_UPDATE_SYSTEM_PROMPT = """You are a highly intelligent personal assistant. You will receive an existing plan as JSON and new transcribed text from the user. Update the plan according to the text.

Rules:
1. You may add, modify, or remove tasks and subtasks, or move tasks between categories. Intelligently merge the change; do not simply append.
2. Every task that still exists after the change MUST keep its original 'id' exactly as given, even if its wording changes slightly.
3. Keep the existing 'status', 'emoji', 'priority', 'deadline', 'reminder' and subtasks of a task unless the user asks to change them.
4. Brand-new tasks get a temporary id such as "new-1", "new-2". Write only the 'task' description for them (with any time the user mentioned in the description); details are filled in later.
5. Existing subtasks keep their 'id' and 'completed' value. New subtasks get 'completed' set to false.
6. Keep category names exactly as they are spelled in the existing plan when tasks stay in them.
7. Update the 'title' and 'summary' only if the plan's focus changed.

IMPORTANT: Your output MUST be a single, complete JSON object for the whole updated plan that strictly follows the output schema.
"""


def _create_prompt(transcribed_text: str, template: Optional[str]) -> str:
    prompt = f"User's Transcribed Text:\n{transcribed_text}\n"
    if template:
        prompt += f"\nFollow this template for the structure of the plan:\n{template}\n"
    return prompt


def _update_prompt(transcribed_text: str, existing_plan: Plan, template: Optional[str]) -> str:
    plan_json = json.dumps(existing_plan.model_dump(mode="json"), indent=2, ensure_ascii=False)
    prompt = f"""
Existing Plan to Update:
{plan_json}

User's Transcribed Text:
{transcribed_text}
"""
    if template:
        prompt += f"\nFollow this template for the structure of the plan:\n{template}\n"
    return prompt


def merge_category_buckets(categories: List[CategoryDraft]) -> List[CategoryDraft]:
    """
    Merge categories that share a name and name unnamed ones.

    Names are compared by exact string equality, so "Work" and "work" stay
    two separate buckets.
    """
    merged: Dict[str, List[TaskDraft]] = {}
    for category in categories:
        name = category.category.strip() or DEFAULT_CATEGORY
        merged.setdefault(name, []).extend(category.tasks)
    return [CategoryDraft(category=name, tasks=tasks) for name, tasks in merged.items()]


def carry_over_fields(task: TaskDraft, prior: Task) -> TaskDraft:
    """Fill what the model left out of a persisting task from its prior version."""
    updates = {}
    for field in CARRIED_TASK_FIELDS:
        if getattr(task, field) in (None, ""):
            value = getattr(prior, field)
            if field == "subtasks":
                value = [subtask.model_dump() for subtask in value]
            elif hasattr(value, "model_dump"):
                value = value.model_dump()
            updates[field] = value
    if not task.task.strip():
        updates["task"] = prior.task
    return TaskDraft.model_validate({**task.model_dump(), **updates})


def carry_over_subtask_state(draft: PlanDraft, original_tasks: Dict[str, Task]) -> PlanDraft:
    """
    Restore ``completed`` on echoed subtasks of persisting tasks.

    Only the first task carrying an original id persists. Its subtasks whose
    id matches a prior subtask take the prior flag unless the model gave a
    real boolean.
    """
    seen: Set[str] = set()
    categories = []
    for category in draft.categories:
        tasks = []
        for task in category.tasks:
            prior = original_tasks.get(task.id) if task.id not in seen else None
            if task.id:
                seen.add(task.id)
            if prior is not None and task.subtasks and prior.subtasks:
                prior_flags = {subtask.id: subtask.completed for subtask in prior.subtasks}
                subtasks = [
                    subtask.model_copy(update={"completed": prior_flags[subtask.id]})
                    if subtask.id in prior_flags and not isinstance(subtask.completed, bool)
                    else subtask
                    for subtask in task.subtasks
                ]
                task = task.model_copy(update={"subtasks": subtasks})
            tasks.append(task)
        categories.append(category.model_copy(update={"tasks": tasks}))
    return draft.model_copy(update={"categories": categories})


def apply_details(task: TaskDraft, details: TaskDetails) -> TaskDraft:
    """Merge extracted details onto a task. Status is left untouched."""
    return task.model_copy(update={
        "priority": details.priority,
        "deadline": details.deadline or task.deadline,
        "emoji": details.emoji or task.emoji,
    })


class PlanGenerator:
    """Creates and updates plans from transcribed text."""

    def __init__(self, llm: ModelInvoker, extractor: TaskDetailExtractor):
        self.llm = llm
        self.extractor = extractor

    async def generate(
        self,
        transcribed_text: str,
        existing_plan: Optional[Plan] = None,
        template: Optional[str] = None,
    ) -> Plan:
        """
        Create a new plan, or update ``existing_plan`` from the text.

        Args:
            transcribed_text: What the user said
            existing_plan: Plan to update; None creates a new plan
            template: Optional structural hint for the plan

        Returns:
            Validated Plan

        Raises:
            GenerationError: If the structural pass returns no output
            ValidationError: If the result cannot be made to fit the Plan schema
        """
        mode = "update" if existing_plan is not None else "create"
        logger.info(f"Plan generation starting (mode={mode})")

        if existing_plan is None:
            draft = await self.llm.generate(
                PLAN_CREATE_SYSTEM_PROMPT,
                _create_prompt(transcribed_text, template),
                PlanDraft,
            )
        else:
            draft = await self.llm.generate(
                PLAN_UPDATE_SYSTEM_PROMPT,
                _update_prompt(transcribed_text, existing_plan, template),
                PlanDraft,
            )

        if draft is None:
            raise GenerationError(
                "Plan generation failed: The model did not return any output.",
                context={"mode": mode},
            )

        original_tasks: Dict[str, Task] = (
            {task.id: task for task in existing_plan.iter_tasks()} if existing_plan else {}
        )
        draft = self._structural_repair(draft, existing_plan, original_tasks)

        new_slots = [
            (c_idx, t_idx)
            for c_idx, category in enumerate(draft.categories)
            for t_idx, task in enumerate(category.tasks)
            if task.id not in original_tasks
        ]
        logger.info(
            f"Structural pass produced {sum(len(c.tasks) for c in draft.categories)} tasks, "
            f"{len(new_slots)} new"
        )

        draft = await self._enrich(draft, new_slots, reassign=existing_plan is not None)
        plan = self._finalize(draft)

        logger.info(f"Plan generation complete: '{plan.title}' with {len(plan.categories)} categories")
        return plan

    def _structural_repair(
        self,
        draft: PlanDraft,
        existing_plan: Optional[Plan],
        original_tasks: Dict[str, Task],
    ) -> PlanDraft:
        """Ids, prior-field carry-over and label cleanup after the structural pass."""
        draft = carry_over_subtask_state(draft, original_tasks)
        draft = backfill_plan_ids(draft, keep_task_ids=set(original_tasks))

        categories = []
        for category in merge_category_buckets(draft.categories):
            tasks = []
            for task in category.tasks:
                prior = original_tasks.get(task.id)
                if prior is not None:
                    task = carry_over_fields(task, prior)
                elif not task.task.strip():
                    logger.warning("Dropping new task with an empty description")
                    continue
                tasks.append(normalize_task_fields(task))
            categories.append(category.model_copy(update={"tasks": tasks}))

        updates = {"categories": categories}
        if existing_plan is not None:
            updates["title"] = (draft.title or "").strip() or existing_plan.title
            updates["summary"] = (draft.summary or "").strip() or existing_plan.summary
        return draft.model_copy(update=updates)

    async def _enrich(
        self,
        draft: PlanDraft,
        new_slots: List[Tuple[int, int]],
        reassign: bool,
    ) -> PlanDraft:
        """
        Run the Task Detail Extractor for every new task concurrently.

        Each extraction result is merged into its own task slot after all
        calls have finished. A failed extraction leaves that task as the
        structural pass produced it.
        """
        if not new_slots:
            return draft

        results = await asyncio.gather(
            *(self.extractor.extract(draft.categories[c].tasks[t].task) for c, t in new_slots),
            return_exceptions=True,
        )

        buckets: List[Tuple[str, List[TaskDraft]]] = [
            (category.category, list(category.tasks)) for category in draft.categories
        ]
        moves: List[Tuple[int, int, str]] = []

        for (c_idx, t_idx), result in zip(new_slots, results):
            name, tasks = buckets[c_idx]
            task = tasks[t_idx]
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.warning(
                    f"Task enrichment failed for {task.id}, keeping structural fields: {result}"
                )
                continue

            tasks[t_idx] = apply_details(task, result)
            if reassign and result.category and result.category != name:
                moves.append((c_idx, t_idx, result.category))

        return draft.model_copy(update={"categories": self._apply_moves(buckets, moves)})

    @staticmethod
    def _apply_moves(
        buckets: List[Tuple[str, List[TaskDraft]]],
        moves: List[Tuple[int, int, str]],
    ) -> List[CategoryDraft]:
        """Move enriched tasks into the category bucket the extractor named."""
        moved: Set[Tuple[int, int]] = {(c, t) for c, t, _ in moves}
        ordered: Dict[str, List[TaskDraft]] = {}
        emptied: Set[str] = set()

        for c_idx, (name, tasks) in enumerate(buckets):
            kept = [task for t_idx, task in enumerate(tasks) if (c_idx, t_idx) not in moved]
            ordered.setdefault(name, []).extend(kept)
            if tasks and not kept:
                emptied.add(name)

        for c_idx, t_idx, target in moves:
            ordered.setdefault(target, []).append(buckets[c_idx][1][t_idx])
            emptied.discard(target)

        return [
            CategoryDraft(category=name, tasks=tasks)
            for name, tasks in ordered.items()
            if name not in emptied
        ]

    @staticmethod
    def _finalize(draft: PlanDraft) -> Plan:
        """Default remaining statuses and validate against the Plan schema."""
        categories = []
        for category in draft.categories:
            tasks = [
                task.model_copy(update={"status": normalize_status(task.status)})
                for task in category.tasks
            ]
            categories.append(category.model_copy(update={"tasks": tasks}))
        payload = draft.model_copy(update={"categories": categories}).model_dump()
        for category in payload["categories"]:
            for task in category["tasks"]:
                if task["subtasks"] is None:
                    task["subtasks"] = []
        return ensure_valid(payload, Plan)
