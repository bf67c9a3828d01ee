from voiceplan.agents.repair import (
    backfill_itinerary_ids,
    backfill_plan_ids,
    coerce_completed,
    normalize_activity_type,
    normalize_priority,
    normalize_status,
    normalize_task_fields,
    resolve_emoji,
)
from voiceplan.schemas.drafts import ItineraryDraft, PlanDraft, TaskDraft
from voiceplan.utils.ids import new_id


def plan_draft(categories):
    return PlanDraft.model_validate({"title": "T", "summary": "S", "categories": categories})


def all_ids(draft):
    return [
        (task.id, [subtask.id for subtask in task.subtasks or []])
        for category in draft.categories
        for task in category.tasks
    ]


def test_new_id_has_prefix_and_avoids_existing():
    first = new_id("task")
    assert first.startswith("task-")
    assert new_id("task", {first}) != first


def test_backfill_assigns_missing_and_duplicate_ids():
    draft = plan_draft([
        {"category": "Work", "tasks": [
            {"task": "No id", "subtasks": [{"text": "a"}, {"id": "x", "text": "b"}, {"id": "x", "text": "c"}]},
            {"id": "task-1", "task": "One"},
            {"id": "task-1", "task": "Duplicate"},
        ]},
    ])

    repaired = backfill_plan_ids(draft)

    tasks = repaired.categories[0].tasks
    ids = [task.id for task in tasks]
    assert all(ids)
    assert len(set(ids)) == 3
    assert ids[1] == "task-1"
    subtask_ids = [subtask.id for subtask in tasks[0].subtasks]
    assert all(subtask_ids) and len(set(subtask_ids)) == 3
    assert subtask_ids[1] == "x"


def test_backfill_is_noop_on_populated_plan():
    draft = plan_draft([
        {"category": "Work", "tasks": [
            {"id": "task-1", "task": "One", "subtasks": [{"id": "s1", "text": "a", "completed": True}]},
            {"id": "task-2", "task": "Two"},
        ]},
    ])

    once = backfill_plan_ids(draft)
    twice = backfill_plan_ids(once)

    assert all_ids(once) == all_ids(draft)
    assert all_ids(twice) == all_ids(once)


def test_backfill_does_not_mutate_input():
    draft = plan_draft([{"category": "Work", "tasks": [{"task": "No id"}]}])

    backfill_plan_ids(draft)

    assert draft.categories[0].tasks[0].id is None


def test_backfill_replaces_ids_outside_keep_set():
    draft = plan_draft([
        {"category": "Work", "tasks": [
            {"id": "task-1", "task": "Kept", "subtasks": [{"id": "s1", "text": "a"}]},
            {"id": "new-1", "task": "New", "subtasks": [{"id": "s1", "text": "b"}]},
        ]},
    ])

    repaired = backfill_plan_ids(draft, keep_task_ids={"task-1"})

    kept, new = repaired.categories[0].tasks
    assert kept.id == "task-1"
    assert kept.subtasks[0].id == "s1"
    assert new.id.startswith("task-") and new.id != "new-1"
    assert new.subtasks[0].id.startswith("subtask-")


def test_completed_flags_are_coerced():
    draft = plan_draft([
        {"category": "Work", "tasks": [
            {"id": "t", "task": "x", "subtasks": [
                {"id": "a", "text": "a", "completed": "yes"},
                {"id": "b", "text": "b", "completed": True},
                {"id": "c", "text": "c", "completed": None},
            ]},
        ]},
    ])

    subtasks = backfill_plan_ids(draft).categories[0].tasks[0].subtasks

    assert [subtask.completed for subtask in subtasks] == [False, True, False]
    assert coerce_completed("true") is False


def test_label_normalization():
    assert normalize_priority("high") == "High"
    assert normalize_priority(" LOW ") == "Low"
    assert normalize_priority(None) is None
    assert normalize_priority("urgent") == "urgent"
    assert normalize_status("in progress") == "In Progress"
    assert normalize_status("to_do") == "To Do"
    assert normalize_status(None) == "To Do"
    assert normalize_status("", default=None) is None
    assert normalize_activity_type("Food") == "food"


def test_resolve_emoji():
    assert resolve_emoji(":tada:") == "🎉"
    assert resolve_emoji(":briefcase:") == "💼"
    assert resolve_emoji("🛒") == "🛒"
    assert resolve_emoji("🛒 groceries") == "🛒"
    assert resolve_emoji(":not_a_real_shortcode:") is None
    assert resolve_emoji("") is None
    assert resolve_emoji(None) is None


def test_normalize_task_fields():
    task = TaskDraft(id="t", task="Write", priority="medium", status="done", emoji=":memo:", deadline="  ")

    normalized = normalize_task_fields(task)

    assert normalized.priority == "Medium"
    assert normalized.status == "Done"
    assert normalized.emoji == "📝"
    assert normalized.deadline is None


def test_itinerary_days_renumbered_and_activity_ids_filled():
    draft = ItineraryDraft.model_validate({
        "title": "Trip",
        "startDate": "2024-06-01",
        "endDate": "2024-06-03",
        "days": [
            {"day": 3, "title": "Third", "activities": [{"time": "9", "description": "c", "type": "Lodging"}]},
            {"day": 1, "title": "First", "activities": [
                {"id": "a1", "time": "9", "description": "a", "type": "travel", "emoji": ":pizza:"},
                {"id": "a1", "time": "10", "description": "b", "type": "food"},
            ]},
        ],
    })

    repaired = backfill_itinerary_ids(draft)

    assert [day.day for day in repaired.days] == [1, 2]
    assert [day.title for day in repaired.days] == ["First", "Third"]
    first_day = repaired.days[0].activities
    assert first_day[0].id == "a1"
    assert first_day[1].id != "a1" and first_day[1].id.startswith("activity-")
    assert first_day[0].emoji == "🍕"
    assert repaired.days[1].activities[0].type == "lodging"
    assert repaired.days[1].activities[0].id


def test_itinerary_backfill_leaves_empty_draft_alone():
    draft = ItineraryDraft()

    assert backfill_itinerary_ids(draft) is draft
