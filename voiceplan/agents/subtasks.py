"""
Subtask Augmenter.

Appends subtasks described in a follow-up recording to one existing task.
"""

from .llm_config import ModelInvoker
from .validation import ensure_valid
from voiceplan.schemas.content import SubTask, Task
from voiceplan.schemas.drafts import NewSubtasksDraft
from voiceplan.utils.exceptions import GenerationError
from voiceplan.utils.ids import new_id
import json
import logging
from typing import List

logger = logging.getLogger(__name__)

SUBTASKS_SYSTEM_PROMPT = """You are a personal assistant. Your job is to add subtasks to an existing task based on transcribed user input.

The user has provided an existing task and a transcription of their voice describing new subtasks.
Analyze the transcribed text and identify every individual subtask mentioned.

Rules:
1. Return ONLY the new subtasks. Do not repeat subtasks the task already has.
2. Each new subtask has a short 'text' and 'completed' set to false.
3. Do not modify any other property of the existing task.

Your output MUST be a single JSON object that strictly follows the output schema.
"""


class SubtaskAugmenter:
    """Adds subtasks to a task without touching the ones it already has."""

    def __init__(self, llm: ModelInvoker):
        self.llm = llm

    async def augment(self, existing_task: Task, transcribed_text: str) -> Task:
        """
        Return ``existing_task`` with the newly described subtasks appended.

        Existing subtasks keep their ids, order and completion state. Every
        new subtask gets a fresh id and starts uncompleted.

        Raises:
            GenerationError: If the model returns no output
        """
        task_json = json.dumps(existing_task.model_dump(mode="json"), indent=2, ensure_ascii=False)
        prompt = f"""
Existing Task:
{task_json}

Transcribed Text for Subtasks:
{transcribed_text}
"""
        draft = await self.llm.generate(SUBTASKS_SYSTEM_PROMPT, prompt, NewSubtasksDraft)
        if draft is None:
            raise GenerationError("Subtask generation failed: The model did not return any output.")

        existing_texts = {subtask.text.strip().casefold() for subtask in existing_task.subtasks}
        taken = {subtask.id for subtask in existing_task.subtasks}

        added: List[SubTask] = []
        for candidate in draft.subtasks:
            text = candidate.text.strip()
            # Skip blanks and subtasks the task already has
            if not text or text.casefold() in existing_texts:
                continue
            subtask_id = new_id("subtask", taken)
            taken.add(subtask_id)
            existing_texts.add(text.casefold())
            added.append(SubTask(id=subtask_id, text=text, completed=False))

        logger.info(f"Adding {len(added)} subtasks to task {existing_task.id}")
        updated = existing_task.model_dump()
        updated["subtasks"] = updated["subtasks"] + [subtask.model_dump() for subtask in added]
        return ensure_valid(updated, Task)
