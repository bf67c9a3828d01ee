import base64
import inspect
import re
from collections import defaultdict, deque

import pytest
from pydantic import BaseModel

from voiceplan.schemas.content import (
    Itinerary,
    Plan,
    StoredItinerary,
    StoredPlan,
    Task,
)
from voiceplan.schemas.drafts import TaskDetailsDraft

TASK_TEXT_PATTERN = re.compile(r'Transcribed Text: "(?P<text>.*)"', re.DOTALL)


def audio_uri(payload: bytes = b"fake recording bytes", mime: str = "audio/webm") -> str:
    return f"data:{mime};base64,{base64.b64encode(payload).decode()}"


class FakeModelInvoker:
    """
    Scripted stand-in for the model provider.

    Responses are queued per output schema. A queued dict is parsed into the
    schema, None means "no output" and an exception instance is raised. A
    handler registered with ``on`` answers every call for its schema instead
    and may be a coroutine function.
    """

    def __init__(self):
        self.responses = defaultdict(deque)
        self.handlers = {}
        self.transcriptions = deque()
        self.calls = []

    def queue(self, schema, *responses):
        self.responses[schema].extend(responses)
        return self

    def on(self, schema, handler):
        self.handlers[schema] = handler
        return self

    def on_task_details(self, handler):
        """Answer extraction calls with ``handler(description)``."""
        def extract(user_prompt):
            return handler(TASK_TEXT_PATTERN.search(user_prompt).group("text"))
        return self.on(TaskDetailsDraft, extract)

    def queue_transcription(self, *texts):
        self.transcriptions.extend(texts)
        return self

    def calls_for(self, schema):
        return [call for call in self.calls if call["schema"] is schema]

    async def _resolve(self, response, schema=None):
        if inspect.isawaitable(response):
            response = await response
        if isinstance(response, BaseException):
            raise response
        if response is None:
            return None
        if schema is not None and isinstance(response, dict):
            return schema.model_validate(response)
        return response

    async def generate(self, system_prompt, user_prompt, schema):
        self.calls.append({"schema": schema, "system": system_prompt, "user": user_prompt})
        if schema in self.handlers:
            return await self._resolve(self.handlers[schema](user_prompt), schema)
        if not self.responses[schema]:
            raise AssertionError(f"unscripted {schema.__name__} call")
        return await self._resolve(self.responses[schema].popleft(), schema)

    async def transcribe(self, audio, prompt):
        self.calls.append({"schema": "transcription", "audio": audio, "user": prompt})
        if not self.transcriptions:
            raise AssertionError("unscripted transcription call")
        return await self._resolve(self.transcriptions.popleft())


def details(task, category="Personal", priority="Medium", emoji="📝", deadline=None):
    return {
        "task": task,
        "category": category,
        "priority": priority,
        "emoji": emoji,
        "deadline": deadline,
    }


@pytest.fixture
def llm():
    return FakeModelInvoker()


@pytest.fixture
def sample_plan():
    return Plan.model_validate({
        "title": "Busy Week",
        "summary": "Work and errands for the week.",
        "categories": [
            {
                "category": "Work",
                "tasks": [
                    {
                        "id": "task-1",
                        "task": "Finish quarterly report",
                        "emoji": "📊",
                        "deadline": "Friday 5pm",
                        "priority": "High",
                        "status": "In Progress",
                        "people": ["Dana"],
                        "subtasks": [
                            {"id": "s1", "text": "Collect numbers", "completed": True},
                            {"id": "s2", "text": "Write summary", "completed": False},
                        ],
                    },
                ],
            },
            {
                "category": "Personal",
                "tasks": [
                    {"id": "task-2", "task": "Buy milk", "emoji": "🥛", "priority": "Low"},
                ],
            },
        ],
    })


@pytest.fixture
def sample_task():
    return Task.model_validate({
        "id": "task-9",
        "task": "Go to the beach",
        "emoji": "🏖️",
        "subtasks": [{"id": "s1", "text": "Pack towels", "completed": True}],
    })


@pytest.fixture
def sample_itinerary():
    return Itinerary.model_validate({
        "title": "Weekend in Lisbon",
        "startDate": "2024-06-01",
        "endDate": "2024-06-02",
        "days": [
            {
                "day": 1,
                "title": "Arrival",
                "activities": [
                    {"id": "a1", "time": "9:00 AM", "description": "Fly to Lisbon", "emoji": "✈️", "type": "travel"},
                    {"id": "a2", "time": "8:00 PM", "description": "Dinner in Alfama", "emoji": "🍽️", "type": "food"},
                ],
            },
            {
                "day": 2,
                "title": "Belém",
                "activities": [
                    {"id": "a3", "time": "10:00 AM", "description": "Visit Jerónimos Monastery", "type": "activity"},
                ],
            },
        ],
    })


def stored_plan(plan, plan_id="plan-1", user_id="user-1", created_at="2024-06-01T09:00:00+00:00",
                updated_at=None):
    return StoredPlan(
        **plan.model_dump(),
        id=plan_id,
        user_id=user_id,
        created_at=created_at,
        updated_at=updated_at or created_at,
        transcription="original words",
    )


def stored_itinerary(itinerary, itinerary_id="itinerary-1", user_id="user-1",
                     created_at="2024-06-01T09:00:00+00:00"):
    return StoredItinerary(
        **itinerary.model_dump(),
        id=itinerary_id,
        user_id=user_id,
        created_at=created_at,
        updated_at=created_at,
        transcription="trip words",
    )
