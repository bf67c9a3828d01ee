"""
Task Detail Extractor.

Derives category, priority, deadline and emoji for a single task
description. Used by the Plan Generator to enrich tasks that the structural
pass produced with bare descriptions.
"""

from .llm_config import ModelInvoker
from .repair import normalize_priority, resolve_emoji
from .validation import ensure_valid
from voiceplan.schemas.content import TaskDetails
from voiceplan.schemas.drafts import TaskDetailsDraft
from voiceplan.utils.exceptions import ExtractionError
import logging

logger = logging.getLogger(__name__)

TASK_DETAILS_SYSTEM_PROMPT = """You are a task analysis expert. Your sole job is to extract the details of a single task from the provided text.

You MUST extract the following information:
- task: What is the task?
- category: What category does it belong to (e.g., "Work", "Personal", "Health", "Errands")?
- deadline: If a time or day is mentioned, extract it precisely (e.g., "7:00 AM", "Friday 5pm"). Leave it empty otherwise.
- priority: Determine if the task is High, Medium, or Low priority.
- emoji: Assign a single, relevant Unicode emoji that visually represents the task. If the text contains an emoji shorthand code (like ":briefcase:" or ":tada:"), convert it to the corresponding Unicode character.

Your output must be a single JSON object that strictly follows the output schema.
"""


class TaskDetailExtractor:
    """Extracts enrichment fields for one task description."""

    def __init__(self, llm: ModelInvoker):
        self.llm = llm

    async def extract(self, description: str) -> TaskDetails:
        """
        Extract category, priority, deadline and emoji for a task.

        Args:
            description: The task description

        Returns:
            Validated TaskDetails

        Raises:
            ExtractionError: If the model returns no output
            ValidationError: If the output cannot be made to fit TaskDetails
        """
        logger.debug(f"Extracting task details for: {description[:80]}")

        draft = await self.llm.generate(
            TASK_DETAILS_SYSTEM_PROMPT,
            f'Transcribed Text: "{description}"',
            TaskDetailsDraft,
        )
        if draft is None:
            raise ExtractionError(
                "Failed to extract task details.",
                context={"task": description},
            )

        repaired = draft.model_copy(update={
            "task": draft.task.strip() or description,
            "category": draft.category.strip(),
            "deadline": (draft.deadline or "").strip() or None,
            "priority": normalize_priority(draft.priority),
            "emoji": resolve_emoji(draft.emoji),
        })
        return ensure_valid(repaired, TaskDetails)
