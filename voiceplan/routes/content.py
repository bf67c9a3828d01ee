"""
API routes for voice-driven plans and itineraries
"""
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from voiceplan.pipeline import VoicePlanPipeline, stamp_itinerary, stamp_plan
from voiceplan.schemas import (
    GenerateContentRequest,
    SubTaskCompletedRequest,
    TaskStatusRequest,
    TitleRequest,
    UpdatePlanRequest,
    VoiceRequest,
)
from voiceplan.storage import (
    ContentStore,
    get_task,
    rename,
    replace_task,
    set_subtask_completed,
    set_task_status,
)
from voiceplan.utils.exceptions import NotFoundError
from voiceplan.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["content"])


def get_pipeline(request: Request) -> VoicePlanPipeline:
    """Pipeline created at application start"""
    return request.app.state.pipeline


def get_store(request: Request) -> ContentStore:
    """Content store created at application start"""
    return request.app.state.store


async def _load(store: ContentStore, kind: str, user_id: str, content_id: str):
    try:
        return await store.get(kind, user_id, content_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)


def _dump(document) -> dict:
    return document.model_dump(mode="json", by_alias=True)


# ============================================================================
# VOICE OPERATIONS
# ============================================================================

@router.post("/users/{user_id}/voice")
async def create_from_voice(
    user_id: str,
    request: GenerateContentRequest,
    pipeline: VoicePlanPipeline = Depends(get_pipeline),
    store: ContentStore = Depends(get_store),
):
    """
    Create a plan or itinerary from a recording.

    The intent router decides which one; the stored document is returned.
    """
    result = await pipeline.generate_content_from_voice(request.audioDataUri, request.context)
    if not result.ok:
        raise HTTPException(status_code=422, detail=result.error)

    content = result.content
    if content.type == "plan":
        document = stamp_plan(content.data, user_id, result.transcription)
    else:
        document = stamp_itinerary(content.data, user_id, result.transcription)
    await store.upsert(content.type, document)

    logger.info("content_created", user_id=user_id, kind=content.type, content_id=document.id)
    return {"type": content.type, "data": _dump(document), "transcription": result.transcription}


@router.post("/users/{user_id}/plans/{plan_id}/voice")
async def update_plan_from_voice(
    user_id: str,
    plan_id: str,
    request: UpdatePlanRequest,
    pipeline: VoicePlanPipeline = Depends(get_pipeline),
    store: ContentStore = Depends(get_store),
):
    """Merge a recording into an existing plan"""
    existing = await _load(store, "plan", user_id, plan_id)
    result = await pipeline.update_plan_from_voice(
        request.audioDataUri, existing.to_plan(), request.template
    )
    if not result.ok:
        raise HTTPException(status_code=422, detail=result.error)

    document = stamp_plan(result.updated_plan, user_id, result.transcription, existing=existing)
    await store.upsert("plan", document)
    return {"data": _dump(document), "transcription": result.transcription}


@router.post("/users/{user_id}/itineraries/{itinerary_id}/voice")
async def update_itinerary_from_voice(
    user_id: str,
    itinerary_id: str,
    request: VoiceRequest,
    pipeline: VoicePlanPipeline = Depends(get_pipeline),
    store: ContentStore = Depends(get_store),
):
    """Rewrite an existing itinerary from a recording"""
    existing = await _load(store, "itinerary", user_id, itinerary_id)
    result = await pipeline.update_itinerary_from_voice(request.audioDataUri, existing.to_itinerary())
    if not result.ok:
        raise HTTPException(status_code=422, detail=result.error)

    document = stamp_itinerary(result.updated_itinerary, user_id, result.transcription, existing=existing)
    await store.upsert("itinerary", document)
    return {"data": _dump(document), "transcription": result.transcription}


@router.post("/users/{user_id}/plans/{plan_id}/tasks/{task_id}/subtasks/voice")
async def add_subtasks_from_voice(
    user_id: str,
    plan_id: str,
    task_id: str,
    request: VoiceRequest,
    pipeline: VoicePlanPipeline = Depends(get_pipeline),
    store: ContentStore = Depends(get_store),
):
    """Append subtasks described in a recording to one task"""
    plan = await _load(store, "plan", user_id, plan_id)
    try:
        task = get_task(plan, task_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)

    result = await pipeline.add_subtasks_from_voice(request.audioDataUri, task)
    if not result.ok:
        raise HTTPException(status_code=422, detail=result.error)

    document = await store.upsert("plan", replace_task(plan, result.updated_task))
    return {
        "data": _dump(document),
        "task": result.updated_task.model_dump(mode="json"),
        "transcription": result.transcription,
    }


# ============================================================================
# HISTORY AND DIRECT EDITS
# ============================================================================

@router.get("/users/{user_id}/plans")
async def list_plans(user_id: str, store: ContentStore = Depends(get_store)):
    """Plan history, newest first"""
    return [_dump(document) for document in await store.list("plan", user_id)]


@router.get("/users/{user_id}/itineraries")
async def list_itineraries(user_id: str, store: ContentStore = Depends(get_store)):
    """Itinerary history, newest first"""
    return [_dump(document) for document in await store.list("itinerary", user_id)]


@router.delete("/users/{user_id}/plans/{plan_id}", status_code=204)
async def delete_plan(user_id: str, plan_id: str, store: ContentStore = Depends(get_store)):
    try:
        await store.delete("plan", user_id, plan_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return Response(status_code=204)


@router.delete("/users/{user_id}/itineraries/{itinerary_id}", status_code=204)
async def delete_itinerary(user_id: str, itinerary_id: str, store: ContentStore = Depends(get_store)):
    try:
        await store.delete("itinerary", user_id, itinerary_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return Response(status_code=204)


@router.patch("/users/{user_id}/plans/{plan_id}/tasks/{task_id}")
async def update_task_status(
    user_id: str,
    plan_id: str,
    task_id: str,
    request: TaskStatusRequest,
    store: ContentStore = Depends(get_store),
):
    """Move a task between To Do, In Progress and Done"""
    plan = await _load(store, "plan", user_id, plan_id)
    try:
        plan = set_task_status(plan, task_id, request.status)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return _dump(await store.upsert("plan", plan))


@router.patch("/users/{user_id}/plans/{plan_id}/tasks/{task_id}/subtasks/{subtask_id}")
async def update_subtask(
    user_id: str,
    plan_id: str,
    task_id: str,
    subtask_id: str,
    request: SubTaskCompletedRequest,
    store: ContentStore = Depends(get_store),
):
    """Tick or untick a subtask"""
    plan = await _load(store, "plan", user_id, plan_id)
    try:
        plan = set_subtask_completed(plan, task_id, subtask_id, request.completed)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    return _dump(await store.upsert("plan", plan))


@router.patch("/users/{user_id}/plans/{plan_id}")
async def rename_plan(
    user_id: str,
    plan_id: str,
    request: TitleRequest,
    store: ContentStore = Depends(get_store),
):
    plan = await _load(store, "plan", user_id, plan_id)
    return _dump(await store.upsert("plan", rename(plan, request.title)))


@router.patch("/users/{user_id}/itineraries/{itinerary_id}")
async def rename_itinerary(
    user_id: str,
    itinerary_id: str,
    request: TitleRequest,
    store: ContentStore = Depends(get_store),
):
    itinerary = await _load(store, "itinerary", user_id, itinerary_id)
    return _dump(await store.upsert("itinerary", rename(itinerary, request.title)))


@router.get("/users/{user_id}/insights")
async def get_insights(
    user_id: str,
    pipeline: VoicePlanPipeline = Depends(get_pipeline),
    store: ContentStore = Depends(get_store),
):
    """Encouraging insights over the user's history"""
    result = await pipeline.fetch_user_insights(
        await store.list("plan", user_id),
        await store.list("itinerary", user_id),
    )
    if not result.ok:
        raise HTTPException(status_code=502, detail=result.error)
    return result.insights.model_dump(mode="json", by_alias=True)


@router.get("/share/{kind}/{content_id}")
async def get_shared(
    kind: Literal["plan", "itinerary"],
    content_id: str,
    store: ContentStore = Depends(get_store),
):
    """Public read-only view of a plan or itinerary"""
    document = await store.get_shared(kind, content_id)
    if document is None:
        raise HTTPException(status_code=404, detail=f"{kind.capitalize()} not found")
    return _dump(document)
