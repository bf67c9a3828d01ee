"""
Pydantic schemas for API request bodies
"""
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .content import TaskStatus


class VoiceRequest(BaseModel):
    """Request body carrying a recorded audio clip"""
    audioDataUri: str = Field(
        ...,
        description="Audio as a data URI: 'data:<mimetype>;base64,<encoded_data>'",
        example="data:audio/wav;base64,UklGRiQAAABXQVZF...",
    )


class GenerateContentRequest(VoiceRequest):
    """Request body for creating a plan or itinerary from voice"""
    context: Optional[Literal["plan", "itinerary"]] = Field(
        default=None,
        description="What the user was looking at when recording",
    )


class UpdatePlanRequest(VoiceRequest):
    """Request body for updating a plan from voice"""
    template: Optional[str] = Field(default=None, description="Optional structural hint for the plan")


class TaskStatusRequest(BaseModel):
    """Request body for changing a task's status"""
    status: TaskStatus


class SubTaskCompletedRequest(BaseModel):
    """Request body for ticking a subtask"""
    completed: bool


class TitleRequest(BaseModel):
    """Request body for renaming a plan or itinerary"""
    title: str = Field(..., min_length=1)
