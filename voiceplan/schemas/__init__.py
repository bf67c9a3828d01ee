"""
Pydantic schemas for the VoicePlan API
"""
from .content import (
    SubTask,
    Reminder,
    Task,
    Category,
    Plan,
    ItineraryActivity,
    ItineraryDay,
    Itinerary,
    StoredPlan,
    StoredItinerary,
    Insight,
    UserInsights,
    TaskDetails,
)
from .requests import (
    VoiceRequest,
    GenerateContentRequest,
    UpdatePlanRequest,
    TaskStatusRequest,
    SubTaskCompletedRequest,
    TitleRequest,
)
from .results import (
    GeneratedContent,
    ContentResult,
    PlanUpdateResult,
    ItineraryUpdateResult,
    TaskUpdateResult,
    InsightsResult,
)

__all__ = [
    # Data model
    "SubTask",
    "Reminder",
    "Task",
    "Category",
    "Plan",
    "ItineraryActivity",
    "ItineraryDay",
    "Itinerary",
    "StoredPlan",
    "StoredItinerary",
    "Insight",
    "UserInsights",
    "TaskDetails",
    # API request models
    "VoiceRequest",
    "GenerateContentRequest",
    "UpdatePlanRequest",
    "TaskStatusRequest",
    "SubTaskCompletedRequest",
    "TitleRequest",
    # Facade results
    "GeneratedContent",
    "ContentResult",
    "PlanUpdateResult",
    "ItineraryUpdateResult",
    "TaskUpdateResult",
    "InsightsResult",
]
