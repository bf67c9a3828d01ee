"""
Intent Router.

Classifies transcribed text as a request for a plan, a travel itinerary, or
neither.
"""

from .llm_config import ModelInvoker
from voiceplan.schemas.drafts import RecognizeIntentOutput
from typing import Literal, Optional
import logging

logger = logging.getLogger(__name__)

Intent = Literal["plan", "itinerary", "unsupported"]
ContextHint = Literal["plan", "itinerary"]

INTENT_LABELS = {
    "createPlan": "plan",
    "createItinerary": "itinerary",
}

INTENT_SYSTEM_PROMPT = """Analyze the user's transcribed text and determine their primary intent. The user wants to create either a plan (like a to-do list or project plan) or a travel itinerary.

- If the text clearly describes tasks, to-do lists, goals, schedules, or explicitly asks to create a plan, the intent is 'createPlan'.
- If the text describes a trip, vacation, travel dates, destinations, or explicitly asks for an itinerary, the intent is 'createItinerary'.
- If a current context is given, the user is viewing that kind of content and most likely wants to create or update the same kind. Follow the context only when the text does not clearly say otherwise.
- For anything else that doesn't fit (e.g., simple questions, greetings, unrelated statements), the intent is 'unsupported'.

Answer with exactly one of: createPlan, createItinerary, unsupported.
"""


def normalize_intent(raw_intent) -> Intent:
    """Map a raw classifier label onto plan, itinerary or unsupported."""
    if isinstance(raw_intent, str):
        raw_intent = raw_intent.strip()
    return INTENT_LABELS.get(raw_intent, "unsupported")


class IntentRouter:
    """Decides which generator handles a transcription."""

    def __init__(self, llm: ModelInvoker):
        self.llm = llm

    async def route(self, transcribed_text: str, context: Optional[ContextHint] = None) -> Intent:
        """
        Classify the text.

        Ambiguous or missing labels resolve to "unsupported"; errors from
        the model call itself propagate.
        """
        prompt = f"Transcribed Text:\n{transcribed_text}\n"
        if context:
            prompt += f"\nCurrent Context: The user is currently viewing a {context}.\n"

        output = await self.llm.generate(INTENT_SYSTEM_PROMPT, prompt, RecognizeIntentOutput)
        intent = normalize_intent(output.intent if output is not None else None)

        logger.info(f"Routed request to '{intent}' (context={context})")
        return intent
