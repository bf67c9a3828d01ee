"""
Pydantic schemas for plans, itineraries and their stored forms.

These are the validated contracts handed to the rest of the application.
Model output never reaches them directly: it is parsed into the permissive
drafts in ``drafts.py``, repaired, and only then validated against these.
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


Priority = Literal["High", "Medium", "Low"]
TaskStatus = Literal["To Do", "In Progress", "Done"]
ActivityType = Literal["travel", "food", "activity", "lodging"]

PRIORITIES = ("High", "Medium", "Low")
TASK_STATUSES = ("To Do", "In Progress", "Done")
ACTIVITY_TYPES = ("travel", "food", "activity", "lodging")


# ============================================================================
# PLANS
# ============================================================================

class SubTask(BaseModel):
    """A single step of a task"""
    id: str = Field(..., min_length=1, description="Unique identifier within the parent task")
    text: str = Field(..., description="The description of the subtask")
    completed: bool = Field(default=False, description="Whether the subtask is completed")


class Reminder(BaseModel):
    """Reminder notification attached to a task"""
    time: str = Field(..., description="When to remind, as spoken (e.g. '5pm tomorrow')")
    question: str = Field(..., description="Follow-up question for the notification (e.g. 'Are you at the gym?')")


class Task(BaseModel):
    """A task inside a plan category"""
    id: str = Field(..., min_length=1, description="Unique identifier, stable across updates")
    task: str = Field(..., description="The description of the task")
    emoji: Optional[str] = Field(default=None, description="A single emoji representing the task")
    deadline: Optional[str] = Field(default=None, description="Deadline or scheduled time, if any")
    priority: Optional[Priority] = None
    people: Optional[List[str]] = None
    organizations: Optional[List[str]] = None
    status: TaskStatus = "To Do"
    reminder: Optional[Reminder] = None
    subtasks: List[SubTask] = Field(default_factory=list)

    @field_validator("task")
    @classmethod
    def task_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("task description must not be empty")
        return value

    @model_validator(mode="after")
    def subtask_ids_unique(self) -> "Task":
        ids = [subtask.id for subtask in self.subtasks]
        if len(ids) != len(set(ids)):
            raise ValueError(f"duplicate subtask ids in task {self.id}")
        return self


class Category(BaseModel):
    """A named group of tasks"""
    category: str = Field(..., description="Category name (e.g. 'Work', 'Personal')")
    tasks: List[Task] = Field(default_factory=list)


class Plan(BaseModel):
    """A titled collection of categorized tasks"""
    title: str = Field(..., description="Concise title for the plan")
    summary: str = Field(..., description="One-sentence summary of the plan")
    categories: List[Category] = Field(default_factory=list)

    @model_validator(mode="after")
    def names_and_ids_unique(self) -> "Plan":
        names = [category.category for category in self.categories]
        if len(names) != len(set(names)):
            raise ValueError("category names must be unique within a plan")
        task_ids = [task.id for task in self.iter_tasks()]
        if len(task_ids) != len(set(task_ids)):
            raise ValueError("task ids must be unique within a plan")
        return self

    def iter_tasks(self):
        """Yield every task of the plan in category order."""
        for category in self.categories:
            yield from category.tasks

    def task_ids(self) -> set:
        return {task.id for task in self.iter_tasks()}


# ============================================================================
# ITINERARIES
# ============================================================================

class ItineraryActivity(BaseModel):
    """Single activity in a day of the itinerary"""
    id: str = Field(..., min_length=1)
    time: str = Field(..., description="Time of day (e.g. '9:00 AM')")
    description: str
    emoji: Optional[str] = None
    type: ActivityType


class ItineraryDay(BaseModel):
    """A single day of the itinerary"""
    day: int = Field(..., ge=1, description="1-based day number")
    title: str = Field(..., description="Theme of the day (e.g. 'Arrival and Exploration')")
    activities: List[ItineraryActivity] = Field(default_factory=list)


class Itinerary(BaseModel):
    """A titled, dated, multi-day travel schedule"""
    title: str
    start_date: str = Field(..., alias="startDate", description="Start date (e.g. '2024-12-20')")
    end_date: str = Field(..., alias="endDate", description="End date (e.g. '2024-12-27')")
    days: List[ItineraryDay] = Field(default_factory=list)

    class Config:
        populate_by_name = True

    @model_validator(mode="after")
    def days_contiguous(self) -> "Itinerary":
        numbers = [day.day for day in self.days]
        if numbers != list(range(1, len(numbers) + 1)):
            raise ValueError(f"day numbers must run 1..n in order, got {numbers}")
        return self


# ============================================================================
# STORED DOCUMENTS
# ============================================================================

class StoredMetadata(BaseModel):
    """Persistence metadata stamped at the orchestration boundary"""
    id: str
    user_id: str = Field(..., alias="userId")
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")
    transcription: str = ""

    class Config:
        populate_by_name = True


class StoredPlan(Plan, StoredMetadata):
    """Plan plus persistence metadata"""

    def to_plan(self) -> Plan:
        return Plan(title=self.title, summary=self.summary, categories=self.categories)


class StoredItinerary(Itinerary, StoredMetadata):
    """Itinerary plus persistence metadata"""

    def to_itinerary(self) -> Itinerary:
        return Itinerary(
            title=self.title,
            start_date=self.start_date,
            end_date=self.end_date,
            days=self.days,
        )


# ============================================================================
# INSIGHTS
# ============================================================================

class Insight(BaseModel):
    """One encouraging observation about the user's history"""
    emoji: str
    text: str


class UserInsights(BaseModel):
    """Insights over the user's plan and itinerary history"""
    insights: List[Insight] = Field(..., min_length=3, max_length=5)
    productivity_peak: Optional[str] = Field(default=None, alias="productivityPeak")

    class Config:
        populate_by_name = True


# ============================================================================
# TASK DETAILS
# ============================================================================

class TaskDetails(BaseModel):
    """Enrichment fields derived for a single task description"""
    task: str
    category: str
    deadline: Optional[str] = None
    priority: Priority
    emoji: str
