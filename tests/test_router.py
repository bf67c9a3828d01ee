import pytest

from voiceplan.agents.router import IntentRouter, normalize_intent
from voiceplan.schemas.drafts import RecognizeIntentOutput


@pytest.mark.parametrize("raw, expected", [
    ("createPlan", "plan"),
    ("createItinerary", "itinerary"),
    (" createPlan\n", "plan"),
    ("unsupported", "unsupported"),
    ("createplan", "unsupported"),
    ("weather", "unsupported"),
    ("", "unsupported"),
    (None, "unsupported"),
    (42, "unsupported"),
])
def test_normalize_intent(raw, expected):
    assert normalize_intent(raw) == expected


@pytest.mark.asyncio
@pytest.mark.parametrize("text, label, expected", [
    ("Buy milk, eggs, and bread", "createPlan", "plan"),
    ("Plan a 3-day trip to Lisbon from June 1 to June 3", "createItinerary", "itinerary"),
    ("What's the weather today?", "unsupported", "unsupported"),
])
async def test_route(llm, text, label, expected):
    llm.queue(RecognizeIntentOutput, {"intent": label})

    assert await IntentRouter(llm).route(text) == expected
    assert text in llm.calls[0]["user"]


@pytest.mark.asyncio
async def test_route_without_output_is_unsupported(llm):
    llm.queue(RecognizeIntentOutput, None)

    assert await IntentRouter(llm).route("hmm") == "unsupported"


@pytest.mark.asyncio
async def test_context_hint_reaches_prompt(llm):
    llm.queue(RecognizeIntentOutput, {"intent": "createItinerary"}, {"intent": "createPlan"})
    router = IntentRouter(llm)

    await router.route("add a museum visit", context="itinerary")
    await router.route("add a museum visit")

    assert "viewing a itinerary" in llm.calls[0]["user"]
    assert "Current Context" not in llm.calls[1]["user"]


@pytest.mark.asyncio
async def test_model_errors_propagate(llm):
    llm.queue(RecognizeIntentOutput, RuntimeError("rate limited"))

    with pytest.raises(RuntimeError):
        await IntentRouter(llm).route("Buy milk")
