"""
Orchestration facade for the voice planning pipeline.

Every operation takes a recording and returns a result envelope carrying
either a payload or a user-facing ``error`` string. Exceptions raised by the
agents are mapped to messages here and never cross this boundary.
"""

from datetime import datetime, timezone
from typing import Optional, Sequence

from voiceplan.agents.graph import create_content_graph, initial_state
from voiceplan.agents.insights import InsightGenerator
from voiceplan.agents.itinerary import EmptyResult, ItineraryGenerator
from voiceplan.agents.llm_config import ModelInvoker
from voiceplan.agents.planner import PlanGenerator
from voiceplan.agents.router import ContextHint, IntentRouter
from voiceplan.agents.subtasks import SubtaskAugmenter
from voiceplan.agents.task_details import TaskDetailExtractor
from voiceplan.agents.transcriber import TranscriptionAdapter
from voiceplan.schemas.content import (
    Itinerary,
    Plan,
    StoredItinerary,
    StoredPlan,
    Task,
)
from voiceplan.schemas.results import (
    ContentResult,
    GeneratedContent,
    InsightsResult,
    ItineraryUpdateResult,
    PlanUpdateResult,
    TaskUpdateResult,
)
from voiceplan.utils.exceptions import (
    ExtractionError,
    GenerationError,
    TranscriptionError,
    ValidationError,
)
from voiceplan.utils.ids import new_id
from voiceplan.utils.logger import get_logger

logger = get_logger(__name__)

TRANSCRIPTION_FAILED = "Failed to transcribe audio. The recording might be silent or too short."
UNSUPPORTED_REQUEST = (
    "I wasn't able to create a plan or itinerary from that. "
    "Please try describing your tasks or trip more directly."
)
ITINERARY_UPDATE_EMPTY = (
    "Could not update the itinerary from the provided text. "
    "Please ensure it contains enough detail."
)


def describe_error(error: Exception) -> str:
    """Map a pipeline exception to the message shown to the user."""
    if isinstance(error, TranscriptionError):
        return TRANSCRIPTION_FAILED
    if isinstance(error, ValidationError):
        return f"The generated content was malformed: {error.message}"
    if isinstance(error, (GenerationError, ExtractionError)):
        return f"Generation failed: {error.message}"
    return f"An unexpected error occurred on the server: {error}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def stamp_plan(
    plan: Plan,
    user_id: str,
    transcription: str,
    existing: Optional[StoredPlan] = None,
) -> StoredPlan:
    """
    Attach persistence metadata to a generated plan.

    A new plan gets a fresh id and creation time; an updated one keeps the
    id and creation time of ``existing``.
    """
    now = _now()
    return StoredPlan(
        **plan.model_dump(),
        id=existing.id if existing else new_id("plan"),
        user_id=user_id,
        created_at=existing.created_at if existing else now,
        updated_at=now,
        transcription=transcription,
    )


def stamp_itinerary(
    itinerary: Itinerary,
    user_id: str,
    transcription: str,
    existing: Optional[StoredItinerary] = None,
) -> StoredItinerary:
    """Itinerary counterpart of :func:`stamp_plan`."""
    now = _now()
    return StoredItinerary(
        **itinerary.model_dump(),
        id=existing.id if existing else new_id("itinerary"),
        user_id=user_id,
        created_at=existing.created_at if existing else now,
        updated_at=now,
        transcription=transcription,
    )


class VoicePlanPipeline:
    """
    End-to-end operations over the pipeline agents.

    The model invoker is created once by the caller and shared by every
    agent built here.
    """

    def __init__(self, llm: ModelInvoker):
        self.llm = llm
        self.transcriber = TranscriptionAdapter(llm)
        self.router = IntentRouter(llm)
        self.extractor = TaskDetailExtractor(llm)
        self.plan_generator = PlanGenerator(llm, self.extractor)
        self.itinerary_generator = ItineraryGenerator(llm)
        self.subtask_augmenter = SubtaskAugmenter(llm)
        self.insight_generator = InsightGenerator(llm)
        self.content_graph = create_content_graph(
            self.transcriber,
            self.router,
            self.plan_generator,
            self.itinerary_generator,
        )

    async def generate_content_from_voice(
        self,
        audio_data_uri: str,
        context: Optional[ContextHint] = None,
    ) -> ContentResult:
        """Transcribe, route and generate a new plan or itinerary."""
        logger.info("content_generation_started", context=context, audio_data_uri=audio_data_uri)
        try:
            state = await self.content_graph.ainvoke(initial_state(audio_data_uri, context))
        except Exception as e:
            logger.error("content_generation_crashed", error=str(e), exc_info=True)
            return ContentResult(error=describe_error(e))

        transcription = state.get("transcription")
        if state.get("error") is not None:
            logger.error(
                "content_generation_failed",
                agent=state.get("current_agent"),
                error=str(state["error"]),
            )
            return ContentResult(error=describe_error(state["error"]), transcription=transcription)

        content = state.get("content")
        if state.get("intent") == "unsupported" or content is None or isinstance(content, EmptyResult):
            logger.info("content_generation_unsupported", intent=state.get("intent"))
            return ContentResult(error=UNSUPPORTED_REQUEST, transcription=transcription)

        logger.info("content_generation_complete", type=state["intent"])
        return ContentResult(
            content=GeneratedContent(type=state["intent"], data=content),
            transcription=transcription,
        )

    async def update_plan_from_voice(
        self,
        audio_data_uri: str,
        existing_plan: Plan,
        template: Optional[str] = None,
    ) -> PlanUpdateResult:
        """Transcribe and merge the recording into an existing plan."""
        transcription = None
        try:
            transcription = await self.transcriber.transcribe(audio_data_uri)
            updated = await self.plan_generator.generate(transcription, existing_plan, template)
        except Exception as e:
            logger.error("plan_update_failed", error=str(e), exc_info=True)
            return PlanUpdateResult(error=describe_error(e), transcription=transcription)

        logger.info("plan_updated", tasks=len(updated.task_ids()))
        return PlanUpdateResult(updated_plan=updated, transcription=transcription)

    async def update_itinerary_from_voice(
        self,
        audio_data_uri: str,
        existing_itinerary: Itinerary,
    ) -> ItineraryUpdateResult:
        """Transcribe and rewrite an existing itinerary."""
        transcription = None
        try:
            transcription = await self.transcriber.transcribe(audio_data_uri)
            updated = await self.itinerary_generator.generate(transcription, existing_itinerary)
        except Exception as e:
            logger.error("itinerary_update_failed", error=str(e), exc_info=True)
            return ItineraryUpdateResult(error=describe_error(e), transcription=transcription)

        if isinstance(updated, EmptyResult):
            logger.info("itinerary_update_empty")
            return ItineraryUpdateResult(error=ITINERARY_UPDATE_EMPTY, transcription=transcription)

        logger.info("itinerary_updated", days=len(updated.days))
        return ItineraryUpdateResult(updated_itinerary=updated, transcription=transcription)

    async def add_subtasks_from_voice(
        self,
        audio_data_uri: str,
        existing_task: Task,
    ) -> TaskUpdateResult:
        """Transcribe and append the described subtasks to a task."""
        transcription = None
        try:
            transcription = await self.transcriber.transcribe(audio_data_uri)
            updated = await self.subtask_augmenter.augment(existing_task, transcription)
        except Exception as e:
            logger.error("subtask_augmentation_failed", task_id=existing_task.id, error=str(e), exc_info=True)
            return TaskUpdateResult(error=describe_error(e), transcription=transcription)

        logger.info("subtasks_added", task_id=existing_task.id, subtasks=len(updated.subtasks))
        return TaskUpdateResult(updated_task=updated, transcription=transcription)

    async def fetch_user_insights(
        self,
        plan_history: Sequence[StoredPlan],
        itinerary_history: Sequence[StoredItinerary],
    ) -> InsightsResult:
        """Best-effort insights over the user's history."""
        try:
            insights = await self.insight_generator.generate(plan_history, itinerary_history)
        except Exception as e:
            logger.error("insight_generation_failed", error=str(e), exc_info=True)
            return InsightsResult(error=describe_error(e))
        return InsightsResult(insights=insights)
