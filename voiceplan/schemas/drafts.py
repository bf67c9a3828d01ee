"""
Permissive schemas for raw model output.

Every field the model may forget is optional here so that a missing id or a
stray ``"completed": "no"`` never fails parsing. The repair pass turns a
draft into something the strict contracts in ``content.py`` accept.
"""
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from .content import Reminder


class SubTaskDraft(BaseModel):
    """Subtask as returned by the model"""
    id: Optional[str] = Field(default=None, description="Unique identifier for the subtask")
    text: str = Field(default="", description="The description of the subtask")
    completed: Optional[Union[bool, str]] = Field(
        default=None,
        description="Whether the subtask is completed. Always false for new subtasks.",
    )


class TaskDraft(BaseModel):
    """Task as returned by the model"""
    id: Optional[str] = Field(
        default=None,
        description="Identifier of the task. Keep the original id for tasks that already existed.",
    )
    task: str = Field(default="", description="The description of the task")
    emoji: Optional[str] = Field(default=None, description="A single emoji representing the task")
    deadline: Optional[str] = Field(default=None, description="Deadline or scheduled time, if any")
    priority: Optional[str] = Field(default=None, description="High, Medium or Low")
    people: Optional[List[str]] = Field(default=None, description="People associated with the task")
    organizations: Optional[List[str]] = Field(
        default=None, description="Organizations associated with the task"
    )
    status: Optional[str] = Field(default=None, description="To Do, In Progress or Done")
    reminder: Optional[Reminder] = Field(
        default=None, description="Reminder time and a follow-up question, if a reminder was asked for"
    )
    subtasks: Optional[List[SubTaskDraft]] = Field(
        default=None, description="Smaller steps for completing the task"
    )


class CategoryDraft(BaseModel):
    """Category as returned by the model"""
    category: str = Field(default="", description="Name of the category (e.g. 'Work', 'Personal')")
    tasks: List[TaskDraft] = Field(default_factory=list)


class PlanDraft(BaseModel):
    """Plan as returned by the model"""
    title: Optional[str] = Field(default=None, description="Concise and relevant title for the plan")
    summary: Optional[str] = Field(default=None, description="Brief one-sentence summary of the plan")
    categories: List[CategoryDraft] = Field(default_factory=list, description="Categorized tasks")


class ActivityDraft(BaseModel):
    """Itinerary activity as returned by the model"""
    id: Optional[str] = Field(default=None, description="Unique identifier for the activity")
    time: str = Field(default="", description="Time of the activity (e.g. '9:00 AM')")
    description: str = Field(default="", description="Brief description of the activity")
    emoji: Optional[str] = Field(default=None, description="A single emoji representing the activity")
    type: Optional[str] = Field(default=None, description="One of: travel, food, activity, lodging")


class DayDraft(BaseModel):
    """Itinerary day as returned by the model"""
    day: Optional[int] = Field(default=None, description="Day number, starting from 1")
    title: str = Field(default="", description="Title for the day's theme")
    activities: List[ActivityDraft] = Field(default_factory=list)


class ItineraryDraft(BaseModel):
    """
    Itinerary as returned by the model.

    Every field is optional because the model answers ``{}`` when the text
    does not name a destination and dates.
    """
    title: Optional[str] = Field(default=None, description="Descriptive title for the itinerary")
    startDate: Optional[str] = Field(default=None, description="Start date of the trip (e.g. '2024-12-20')")
    endDate: Optional[str] = Field(default=None, description="End date of the trip (e.g. '2024-12-27')")
    days: Optional[List[DayDraft]] = Field(default=None, description="One entry per day of the trip")

    def is_empty(self) -> bool:
        return not self.days


class TaskDetailsDraft(BaseModel):
    """Task details as returned by the model"""
    task: str = Field(default="", description="The detailed description of the task")
    category: str = Field(default="", description='Category of the task (e.g. "Work", "Personal")')
    deadline: Optional[str] = Field(default=None, description="Deadline or time for the task, if mentioned")
    priority: Optional[str] = Field(default=None, description="High, Medium or Low")
    emoji: Optional[str] = Field(default=None, description="A single relevant Unicode emoji for the task")


class NewSubtasksDraft(BaseModel):
    """Subtasks identified in a follow-up recording"""
    subtasks: List[SubTaskDraft] = Field(
        default_factory=list, description="Only the new subtasks mentioned in the text"
    )


class RecognizeIntentOutput(BaseModel):
    """Raw intent label from the classifier"""
    intent: Optional[str] = Field(
        default=None,
        description=(
            "The recognized intent: 'createPlan', 'createItinerary' or 'unsupported'. "
            "Use 'unsupported' when the user is not asking for a plan or an itinerary."
        ),
    )


class InsightDraft(BaseModel):
    """Insight as returned by the model"""
    emoji: Optional[str] = Field(default=None, description="A single emoji for the insight")
    text: Optional[str] = Field(default=None, description="Concise, encouraging insight text")


class UserInsightsDraft(BaseModel):
    """Insights as returned by the model"""
    insights: List[InsightDraft] = Field(default_factory=list, description="3-5 personalized insights")
    productivityPeak: Optional[str] = Field(
        default=None, description="Most productive day of the week, only if a clear pattern exists"
    )
