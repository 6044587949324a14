from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Query

from .analytics.aggregator import compute_analytics
from .analytics.store import get_events
from .auth.dependencies import require_admin, require_user
from .catalog.models import Vehicle, VehiclePage
from .catalog.vehicles import catalog_metadata, find_by_id, list_vehicles, search
from .chat.conversations import (
    close_conversation,
    get_conversation,
    get_messages,
    list_conversations,
    record_message,
    start_conversation,
)
from .chat.dialogue import classify_and_respond
from .chat.models import BotResponse, ChatRequest, Conversation, Message, SendMessageResponse
from .preferences.models import PreferenceProfile, PreferencesResponse, PreferenceUpdate
from .preferences.store import delete_preferences, get_preferences, upsert_preferences
from .recommendations.engine import compare_vehicles, get_recommendations, recommend_for_profile
from .recommendations.models import (
    CompareRequest,
    ComparisonResult,
    FilterSet,
    RecommendationRequest,
    RecommendationResponse,
)

app = FastAPI(title="Vehicle Advisor API", version="1.0.0")


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    return catalog_metadata()


# ── Vehicles ─────────────────────────────────────────────────────────────


@app.get("/vehicles", response_model=VehiclePage)
def vehicles(
    budget_min: float | None = Query(default=None, ge=0),
    budget_max: float | None = Query(default=None, ge=0),
    vehicle_type: str | None = None,
    fuel_type: str | None = None,
    transmission: str | None = None,
    make: str | None = None,
    seating_capacity: int | None = Query(default=None, ge=1),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
) -> VehiclePage:
    filters = FilterSet(
        budget_min=budget_min,
        budget_max=budget_max,
        vehicle_type=vehicle_type,
        fuel_type=fuel_type,
        transmission=transmission,
        make=make,
        seating_capacity=seating_capacity,
    )
    return list_vehicles(filters, page=page, limit=limit)


@app.get("/vehicles/search")
def vehicle_search(q: str | None = None) -> dict:
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Search query required")
    return {"vehicles": search(q)}


@app.get("/vehicles/{vehicle_id}", response_model=Vehicle)
def vehicle_detail(vehicle_id: int) -> Vehicle:
    vehicle = find_by_id(vehicle_id)
    if vehicle is None:
        raise HTTPException(status_code=404, detail="Vehicle not found")
    return vehicle


# ── Chat ─────────────────────────────────────────────────────────────────


@app.post("/chat", response_model=BotResponse)
def chat(body: ChatRequest, user: dict = Depends(require_user)) -> BotResponse:
    return classify_and_respond(user["user_id"], body.message, body.vehicle_ids)


@app.post("/conversations", response_model=Conversation)
def new_conversation(user: dict = Depends(require_user)) -> Conversation:
    return start_conversation(user["user_id"])


@app.get("/conversations")
def conversations(user: dict = Depends(require_user)) -> dict:
    return {"conversations": list_conversations(user["user_id"])}


def _owned_conversation(conversation_id: int, user: dict) -> Conversation:
    conversation = get_conversation(conversation_id, user["user_id"])
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


@app.get("/conversations/{conversation_id}/messages")
def conversation_messages(conversation_id: int, user: dict = Depends(require_user)) -> dict[str, list[Message]]:
    _owned_conversation(conversation_id, user)
    return {"messages": get_messages(conversation_id)}


@app.post("/conversations/{conversation_id}/messages", response_model=SendMessageResponse)
def send_message(
    conversation_id: int,
    body: ChatRequest,
    user: dict = Depends(require_user),
) -> SendMessageResponse:
    _owned_conversation(conversation_id, user)

    # The user's message is stored before any generation is attempted
    record_message(conversation_id, "user", body.message)
    bot_response = classify_and_respond(user["user_id"], body.message, body.vehicle_ids)
    record_message(conversation_id, "bot", bot_response.model_dump_json())

    return SendMessageResponse(user_message=body.message, bot_response=bot_response)


@app.put("/conversations/{conversation_id}/close", response_model=Conversation)
def close_chat(conversation_id: int, user: dict = Depends(require_user)) -> Conversation:
    _owned_conversation(conversation_id, user)
    return close_conversation(conversation_id)


# ── Preferences ──────────────────────────────────────────────────────────


@app.get("/preferences", response_model=PreferencesResponse)
def preferences(user: dict = Depends(require_user)) -> PreferencesResponse:
    profile = get_preferences(user["user_id"])
    return PreferencesResponse(preferences=profile, has_preferences=profile is not None)


@app.post("/preferences", response_model=PreferenceProfile)
def save_preferences(body: PreferenceUpdate, user: dict = Depends(require_user)) -> PreferenceProfile:
    return upsert_preferences(user["user_id"], body)


@app.get("/preferences/recommendations")
def personalized_recommendations(user: dict = Depends(require_user)) -> dict:
    profile = get_preferences(user["user_id"])
    if profile is None:
        raise HTTPException(
            status_code=404,
            detail="No preferences found. Please set your preferences first.",
        )
    return {
        "vehicles": recommend_for_profile(profile),
        "preferences": profile,
        "message": "Personalized recommendations based on your preferences",
    }


@app.delete("/preferences")
def remove_preferences(user: dict = Depends(require_user)) -> dict:
    if not delete_preferences(user["user_id"]):
        raise HTTPException(status_code=404, detail="No preferences found to delete")
    return {"message": "Preferences deleted successfully", "success": True}


# ── Recommendations ──────────────────────────────────────────────────────


@app.post("/recommendations", response_model=RecommendationResponse)
def recommendations(
    body: RecommendationRequest,
    user: dict = Depends(require_user),
) -> RecommendationResponse:
    return get_recommendations(user["user_id"], body)


@app.post("/recommendations/compare", response_model=ComparisonResult)
def compare(body: CompareRequest, user: dict = Depends(require_user)) -> ComparisonResult:
    try:
        vehicles = compare_vehicles(user["user_id"], body.vehicle_ids)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ComparisonResult(vehicles=vehicles)


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/analytics")
def analytics(user: dict = Depends(require_admin)) -> dict:
    return compute_analytics(get_events())
