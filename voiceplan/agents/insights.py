"""
Insight Generator.

Summarizes a user's plan and itinerary history into a handful of short,
encouraging observations. The model only sees statistics computed here, so
it has no room to invent numbers of its own.
"""

from .llm_config import ModelInvoker
from .repair import resolve_emoji
from .validation import ensure_valid
from voiceplan.schemas.content import StoredItinerary, StoredPlan, UserInsights
from voiceplan.schemas.drafts import UserInsightsDraft
from voiceplan.utils.exceptions import GenerationError
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
import json
import logging

logger = logging.getLogger(__name__)

MIN_INSIGHTS = 3
MAX_INSIGHTS = 5

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

GENERIC_INSIGHTS = [
    {"emoji": "🚀", "text": "Every plan starts with a single step. Record your next idea and let's get going!"},
    {"emoji": "🗂️", "text": "Grouping tasks into categories makes a busy day feel lighter. Give it a try!"},
    {"emoji": "✈️", "text": "Dreaming of a getaway? Describe your trip and I'll sketch the itinerary."},
    {"emoji": "💪", "text": "Small wins add up. Ticking off even one task today keeps the momentum going."},
    {"emoji": "🌟", "text": "You're building a great habit by planning ahead. Keep it up!"},
]

INSIGHTS_SYSTEM_PROMPT = """You are a friendly and encouraging personal productivity assistant. Your job is to turn statistics about a user's plans and travels into short, actionable, and positive insights.

You MUST generate 3-5 unique insights. Focus on patterns, achievements, and gentle suggestions.
- Frame insights positively. Instead of "You are bad at finishing tasks", say "You have a few tasks in progress. Let's get them done!".
- Keep each insight concise (1-2 sentences).
- Provide a single relevant emoji for each insight.
- Set 'productivityPeak' to the weekday given as the most productive day, and only if one is given.
- Comment on travel patterns if they exist (e.g., "You seem to love weekend trips!").
- Acknowledge achievements like completing many tasks or planning several trips.

Use ONLY the numbers in the statistics below. Do not make up data. If there is not enough data for a meaningful insight, give a generic encouraging message instead.

Example insights:
- "You've knocked out 15 tasks! You're on a roll! 🚀"
- "Your most productive day of the week is Tuesday. Keep that momentum going! 💪"
- "Weekend warrior! Your last three trips were short getaways. Planning the next one? ✈️"

Your output MUST be a single JSON object that strictly adheres to the output schema.
"""


def _parse_timestamp(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None


def compute_history_stats(
    plan_history: Sequence[StoredPlan],
    itinerary_history: Sequence[StoredItinerary],
) -> Dict[str, Any]:
    """
    Count what can be counted in the user's history.

    ``productivity_peak`` is the weekday on which plans holding completed
    tasks were most often last updated, or None without such plans.
    """
    status_counts: Counter = Counter()
    categories: Counter = Counter()
    peak_days: Counter = Counter()
    subtasks_total = 0
    subtasks_done = 0

    for plan in plan_history:
        done_in_plan = 0
        for category in plan.categories:
            categories[category.category] += len(category.tasks)
            for task in category.tasks:
                status_counts[task.status] += 1
                subtasks_total += len(task.subtasks)
                subtasks_done += sum(1 for subtask in task.subtasks if subtask.completed)
                if task.status == "Done":
                    done_in_plan += 1
        updated = _parse_timestamp(plan.updated_at)
        if done_in_plan and updated is not None:
            peak_days[WEEKDAYS[updated.weekday()]] += done_in_plan

    trip_lengths = [len(itinerary.days) for itinerary in itinerary_history]

    return {
        "plans": len(plan_history),
        "tasks_total": sum(status_counts.values()),
        "tasks_done": status_counts.get("Done", 0),
        "tasks_in_progress": status_counts.get("In Progress", 0),
        "tasks_to_do": status_counts.get("To Do", 0),
        "subtasks_total": subtasks_total,
        "subtasks_done": subtasks_done,
        "top_categories": [name for name, _ in categories.most_common(3)],
        "itineraries": len(itinerary_history),
        "trip_lengths_days": trip_lengths,
        "short_trips": sum(1 for length in trip_lengths if 0 < length <= 3),
        "destinations": [itinerary.title for itinerary in itinerary_history[:5]],
        "productivity_peak": peak_days.most_common(1)[0][0] if peak_days else None,
    }


def _generic_insights(count: int, skip: Sequence[str] = ()) -> List[Dict[str, str]]:
    return [item for item in GENERIC_INSIGHTS if item["text"] not in skip][:count]


class InsightGenerator:
    """Produces 3-5 encouraging insights over a user's history."""

    def __init__(self, llm: ModelInvoker):
        self.llm = llm

    async def generate(
        self,
        plan_history: Sequence[StoredPlan],
        itinerary_history: Sequence[StoredItinerary],
    ) -> UserInsights:
        """
        Generate insights from read-only history.

        With no history at all the model is not called and generic
        encouragement is returned.

        Raises:
            GenerationError: If the model returns no output
        """
        if not plan_history and not itinerary_history:
            logger.info("No history available, returning generic insights")
            return UserInsights(insights=_generic_insights(MIN_INSIGHTS))

        stats = compute_history_stats(plan_history, itinerary_history)
        prompt = f"User history statistics:\n{json.dumps(stats, indent=2, ensure_ascii=False)}\n"

        draft = await self.llm.generate(INSIGHTS_SYSTEM_PROMPT, prompt, UserInsightsDraft)
        if draft is None:
            raise GenerationError("Insight generation failed: The model did not return any output.")

        insights = []
        for item in draft.insights:
            text = (item.text or "").strip()
            if not text:
                continue
            insights.append({"emoji": resolve_emoji(item.emoji) or "✨", "text": text})
        insights = insights[:MAX_INSIGHTS]
        if len(insights) < MIN_INSIGHTS:
            insights += _generic_insights(
                MIN_INSIGHTS - len(insights), skip=[item["text"] for item in insights]
            )

        # The model may only echo the day the history supports
        peak = (draft.productivityPeak or "").strip().capitalize()
        if peak not in WEEKDAYS or peak != stats["productivity_peak"]:
            peak = None

        logger.info(f"Generated {len(insights)} insights (peak={peak})")
        return ensure_valid({"insights": insights, "productivityPeak": peak}, UserInsights)
