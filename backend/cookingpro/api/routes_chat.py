"""
API routes for chat and meal plan scheduling.
"""
import base64
import binascii

from fastapi import APIRouter, Depends, HTTPException, Request

from cookingpro.core.exceptions import SessionBusyError
from cookingpro.models.schema import (
    ChatRequest,
    ChatResponse,
    MealPlan,
    ScheduleOverride,
    SessionSummary,
)
from cookingpro.services.chat_session import SessionStore
from cookingpro.services.schedule import set_day_schedule

router = APIRouter()


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


@router.post("/chat", response_model=ChatResponse, response_model_by_alias=True)
async def chat(
    payload: ChatRequest,
    store: SessionStore = Depends(get_session_store),
):
    """
    Chat endpoint for recipes and meal plans.

    - **sessionId**: Unique session identifier
    - **message**: User message shown in the conversation
    - **hiddenPrompt**: Optional text sent to the model instead of the message
    - **imageBase64**: Optional food photo, base64 or data URL
    - **zenMode**: Ask for the calm chef persona
    - **preferences**: Onboarding preferences applied to this and later turns

    Returns the conversational reply plus an optional recipe or meal plan.
    A failed model call still returns 200 with an apology as the reply.
    """
    session = store.get_or_create(payload.session_id)
    if payload.preferences is not None:
        session.preferences = payload.preferences
    session.zen_mode = payload.zen_mode

    image = None
    if payload.image_base64:
        image = _decode_image(payload.image_base64)

    try:
        result = await session.send_message(
            payload.message,
            image=image,
            hidden_prompt=payload.hidden_prompt,
            image_mime_type=payload.image_mime_type,
        )
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return ChatResponse(reply=result.text, recipe=result.recipe, meal_plan=result.meal_plan)


@router.get("/chat/session/{session_id}", response_model=SessionSummary, response_model_by_alias=True)
async def get_session_summary(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
):
    """
    Get the state of a chat session: messages, saved recipes and the current plan.
    """
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Unknown session {session_id}")
    return session.summary()


@router.delete("/chat/session/{session_id}")
async def end_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
):
    """Logout: drop the session's history, saved recipes and cached responses."""
    if not store.remove(session_id):
        raise HTTPException(status_code=404, detail=f"Unknown session {session_id}")
    return {"status": "cleared", "session_id": session_id}


@router.post(
    "/chat/session/{session_id}/plan/days/{day}",
    response_model=MealPlan,
    response_model_by_alias=True,
)
async def override_plan_day(
    session_id: str,
    day: int,
    override: ScheduleOverride,
    store: SessionStore = Depends(get_session_store),
):
    """
    Skip or reschedule one day of the session's current meal plan.
    The plan is updated on a copy, so earlier messages keep the original.
    """
    session = store.get(session_id)
    if session is None or session.current_meal_plan is None:
        raise HTTPException(status_code=404, detail="No meal plan for this session")

    try:
        updated = set_day_schedule(session.current_meal_plan, day, override)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Plan has no day {day}")

    session.current_meal_plan = updated
    return updated


def _decode_image(image_base64: str) -> bytes:
    _, sep, data = image_base64.partition(",")
    try:
        return base64.b64decode(data if sep else image_base64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=422, detail="imageBase64 is not valid base64")
