"""
Pipeline agents for turning transcribed speech into plans and itineraries.

This package contains the model invocation capability, the repair and
validation steps, one module per pipeline component, and the LangGraph
workflow that chains them for new content.
"""

from .llm_config import LLMProvider, ModelInvoker, get_llm_provider
from .transcriber import TranscriptionAdapter
from .router import IntentRouter, normalize_intent
from .task_details import TaskDetailExtractor
from .planner import PlanGenerator
from .itinerary import EMPTY_ITINERARY, EmptyResult, ItineraryGenerator
from .subtasks import SubtaskAugmenter
from .insights import InsightGenerator
from .graph import ContentState, create_content_graph

__all__ = [
    "LLMProvider",
    "ModelInvoker",
    "get_llm_provider",
    "TranscriptionAdapter",
    "IntentRouter",
    "normalize_intent",
    "TaskDetailExtractor",
    "PlanGenerator",
    "EMPTY_ITINERARY",
    "EmptyResult",
    "ItineraryGenerator",
    "SubtaskAugmenter",
    "InsightGenerator",
    "ContentState",
    "create_content_graph",
]
