"""
Result envelopes returned by the orchestration facade.

Each result carries either a payload or an ``error`` string, never both.
``transcription`` may accompany an error so the user can see what was heard.
"""
from typing import ClassVar, Literal, Optional, Union

from pydantic import BaseModel, model_validator

from .content import Itinerary, Plan, Task, UserInsights


class _Result(BaseModel):
    error: Optional[str] = None

    payload_field: ClassVar[str] = ""

    @model_validator(mode="after")
    def payload_or_error(self):
        payload = getattr(self, self.payload_field, None) if self.payload_field else None
        if payload is not None and self.error is not None:
            raise ValueError("a result carries a payload or an error, not both")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None


class GeneratedContent(BaseModel):
    """Content produced from a new recording"""
    type: Literal["plan", "itinerary"]
    data: Union[Plan, Itinerary]


class ContentResult(_Result):
    content: Optional[GeneratedContent] = None
    transcription: Optional[str] = None

    payload_field: ClassVar[str] = "content"


class PlanUpdateResult(_Result):
    updated_plan: Optional[Plan] = None
    transcription: Optional[str] = None

    payload_field: ClassVar[str] = "updated_plan"


class ItineraryUpdateResult(_Result):
    updated_itinerary: Optional[Itinerary] = None
    transcription: Optional[str] = None

    payload_field: ClassVar[str] = "updated_itinerary"


class TaskUpdateResult(_Result):
    updated_task: Optional[Task] = None
    transcription: Optional[str] = None

    payload_field: ClassVar[str] = "updated_task"


class InsightsResult(_Result):
    insights: Optional[UserInsights] = None

    payload_field: ClassVar[str] = "insights"
