"""
Itinerary Generator.

Creates a day-by-day travel itinerary from transcribed text, or rewrites an
existing one. Updates are full replacements produced by the model; there is
no id-preserving merge as there is for plans.
"""

from .llm_config import ModelInvoker
from .repair import backfill_itinerary_ids
from .validation import ensure_valid
from voiceplan.schemas.content import Itinerary
from voiceplan.schemas.drafts import ItineraryDraft
from voiceplan.utils.exceptions import GenerationError
from typing import Optional, Union
import json
import logging

logger = logging.getLogger(__name__)


class EmptyResult:
    """
    Outcome of a generation that had too little to work with.

    Not an error: callers check for it explicitly. Falsy so that
    ``if not result`` reads naturally.
    """

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "EMPTY_ITINERARY"


EMPTY_ITINERARY = EmptyResult()

ITINERARY_SYSTEM_PROMPT = """You are a travel agent AI. Your job is to create or update a detailed, day-by-day travel itinerary based on the user's transcribed voice input.

Analyze the transcribed text to identify the destination, travel dates, and any planned activities.

You MUST structure the response as follows:
1. Create a descriptive 'title' for the itinerary (e.g., "Weekend Trip to Paris").
2. Extract the 'startDate' and 'endDate' from the text.
3. Group all activities into a 'days' array. Each element represents one day of the trip.
4. For each day, specify the 'day' number (starting from 1) and a 'title' for that day's theme (e.g., "Cultural Exploration").
5. For each day, list the 'activities' in chronological or logical order. Each activity has a unique 'id', a 'time' (e.g., "9:00 AM"), a 'description', and a 'type' from: 'travel', 'food', 'activity', 'lodging'.
6. For each activity, assign a single relevant Unicode emoji (e.g., "✈️" for a flight, "🏛️" for a museum visit, "🍽️" for a dinner reservation).

IMPORTANT: If the transcribed text is too vague or lacks the necessary information (like dates or a clear destination) to create a plausible itinerary, you MUST NOT invent details. Return an empty JSON object {} instead.

When an existing itinerary is provided, update it based on the new text. This may involve adding, modifying, or removing activities or changing dates. Keep the original properties of an activity unless the new text changes them. Return the complete, coherent updated itinerary, not only the changes.

Your final output MUST be a single JSON object that strictly adheres to the output schema.
"""


class ItineraryGenerator:
    """Creates and rewrites travel itineraries from transcribed text."""

    def __init__(self, llm: ModelInvoker):
        self.llm = llm

    async def generate(
        self,
        transcribed_text: str,
        existing_itinerary: Optional[Itinerary] = None,
    ) -> Union[Itinerary, EmptyResult]:
        """
        Generate an itinerary, or EMPTY_ITINERARY when the text names no
        usable destination or dates.

        Raises:
            GenerationError: If the model returns no output
            ValidationError: If the output cannot be made to fit the Itinerary schema
        """
        prompt = ""
        if existing_itinerary is not None:
            itinerary_json = json.dumps(
                existing_itinerary.model_dump(mode="json", by_alias=True),
                indent=2,
                ensure_ascii=False,
            )
            prompt += f"Existing Itinerary:\n{itinerary_json}\n\n"
        prompt += f"Transcribed Text:\n{transcribed_text}\n"

        draft = await self.llm.generate(ITINERARY_SYSTEM_PROMPT, prompt, ItineraryDraft)
        if draft is None:
            raise GenerationError("Itinerary generation failed: The model did not return any output.")

        if draft.is_empty():
            logger.info("Itinerary generator found too little information, returning empty result")
            return EMPTY_ITINERARY

        itinerary = ensure_valid(backfill_itinerary_ids(draft), Itinerary)
        logger.info(f"Itinerary generated: '{itinerary.title}' with {len(itinerary.days)} days")
        return itinerary
