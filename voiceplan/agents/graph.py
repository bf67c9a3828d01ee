"""
LangGraph workflow for turning a recording into new content.

This module defines the state graph behind "generate content from voice":
the transcription node feeds the intent router, whose decision picks the
plan or itinerary generator node (or ends the run for unsupported requests).
Update flows skip the router and call the generators directly, so they are
not part of this graph.
"""

from langgraph.graph import StateGraph, END
from .itinerary import EmptyResult, ItineraryGenerator
from .planner import PlanGenerator
from .router import ContextHint, Intent, IntentRouter
from .transcriber import TranscriptionAdapter
from voiceplan.schemas.content import Itinerary, Plan
from typing import Optional, TypedDict, Union
import logging

logger = logging.getLogger(__name__)


class ContentState(TypedDict):
    """
    State flowing through the content workflow.

    Each node fills in its own output field. A node that fails stores the
    exception in ``error`` and the run ends after it.
    """
    # Input
    audio_data_uri: str
    context: Optional[ContextHint]

    # Node outputs
    transcription: Optional[str]
    intent: Optional[Intent]
    content: Optional[Union[Plan, Itinerary, EmptyResult]]

    # Metadata
    status: str
    current_agent: str
    error: Optional[Exception]


def initial_state(audio_data_uri: str, context: Optional[ContextHint] = None) -> ContentState:
    return {
        "audio_data_uri": audio_data_uri,
        "context": context,
        "transcription": None,
        "intent": None,
        "content": None,
        "status": "started",
        "current_agent": "",
        "error": None,
    }


def _fail(state: ContentState, agent: str, error: Exception) -> ContentState:
    logger.error(f"{agent} failed: {error}")
    state["error"] = error
    state["status"] = "error"
    state["current_agent"] = agent
    return state


def create_content_graph(
    transcriber: TranscriptionAdapter,
    router: IntentRouter,
    plan_generator: PlanGenerator,
    itinerary_generator: ItineraryGenerator,
):
    """
    Create the LangGraph workflow for new content.

    transcribe → route → generate_plan | generate_itinerary | END

    Returns:
        Compiled LangGraph application
    """
    logger.info("Creating LangGraph workflow for voice content")

    async def transcribe_node(state: ContentState) -> ContentState:
        try:
            state["transcription"] = await transcriber.transcribe(state["audio_data_uri"])
        except Exception as e:
            return _fail(state, "transcriber", e)
        state["status"] = "transcribed"
        state["current_agent"] = "transcriber"
        return state

    async def route_node(state: ContentState) -> ContentState:
        try:
            state["intent"] = await router.route(state["transcription"], state["context"])
        except Exception as e:
            return _fail(state, "router", e)
        state["status"] = "routed"
        state["current_agent"] = "router"
        return state

    async def plan_node(state: ContentState) -> ContentState:
        try:
            state["content"] = await plan_generator.generate(state["transcription"])
        except Exception as e:
            return _fail(state, "plan_generator", e)
        state["status"] = "complete"
        state["current_agent"] = "plan_generator"
        return state

    async def itinerary_node(state: ContentState) -> ContentState:
        try:
            state["content"] = await itinerary_generator.generate(state["transcription"])
        except Exception as e:
            return _fail(state, "itinerary_generator", e)
        state["status"] = "complete"
        state["current_agent"] = "itinerary_generator"
        return state

    def after_transcription(state: ContentState) -> str:
        return "end" if state["error"] is not None else "route"

    def after_routing(state: ContentState) -> str:
        if state["error"] is not None:
            return "end"
        return {"plan": "plan", "itinerary": "itinerary"}.get(state["intent"], "end")

    workflow = StateGraph(ContentState)

    workflow.add_node("transcribe", transcribe_node)
    workflow.add_node("route", route_node)
    workflow.add_node("generate_plan", plan_node)
    workflow.add_node("generate_itinerary", itinerary_node)

    workflow.set_entry_point("transcribe")
    workflow.add_conditional_edges(
        "transcribe", after_transcription, {"route": "route", "end": END}
    )
    workflow.add_conditional_edges(
        "route",
        after_routing,
        {"plan": "generate_plan", "itinerary": "generate_itinerary", "end": END},
    )
    workflow.add_edge("generate_plan", END)
    workflow.add_edge("generate_itinerary", END)

    app = workflow.compile()
    logger.info("LangGraph content workflow compiled successfully")
    return app
