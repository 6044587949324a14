from __future__ import annotations

import logging
import time

from ..analytics.store import record_event
from ..catalog.config import DEFAULT_CATALOG_CONFIG
from ..catalog.models import Vehicle
from ..catalog.vehicles import find_available, find_by_ids
from ..chat.state import append_turn, record_comparison
from ..llm.groq_client import explain_recommendations
from ..preferences.models import PreferenceProfile
from .filters import extract_filters, merge_filters
from .models import RecommendationRequest, RecommendationResponse
from .scoring import rank_vehicles

logger = logging.getLogger(__name__)


def _with_reasons(vehicles: list[Vehicle], reasons: dict[int, str]) -> list[Vehicle]:
    if not reasons:
        return vehicles
    return [v.model_copy(update={"reason": reasons.get(v.vehicle_id)}) for v in vehicles]


def get_recommendations(user_id: str, request: RecommendationRequest) -> RecommendationResponse:
    """Stateless search: explicit preferences overlaid with filters parsed from ``query``."""
    start_time = time.time()

    filters = request.preferences
    if request.query:
        filters = merge_filters(filters, extract_filters(request.query))

    matches = find_available(filters)
    ranked = rank_vehicles(matches, filters)[: request.limit]

    append_turn(user_id, filters, [v.vehicle_id for v in ranked], source="recommendations")

    record_event("search", {
        "filters": filters.as_dict(),
        "total_matches": len(matches),
        "results_returned": len(ranked),
        "response_time_ms": round((time.time() - start_time) * 1000, 1),
    })

    return RecommendationResponse(
        recommendations=ranked,
        filters_applied=filters.as_dict(),
        total_matches=len(matches),
    )


def recommend_for_profile(
    profile: PreferenceProfile,
    limit: int = DEFAULT_CATALOG_CONFIG.recommendation_limit,
) -> list[Vehicle]:
    """Top vehicles for a saved profile, scored against it, with optional LLM reasons."""
    preferences = profile.as_filter_set()
    ranked = rank_vehicles(find_available(preferences), preferences)[:limit]
    return _with_reasons(ranked, explain_recommendations(preferences, ranked))


def compare_vehicles(user_id: str, vehicle_ids: list[int]) -> list[Vehicle]:
    if len(set(vehicle_ids)) < 2:
        raise ValueError("At least 2 vehicle IDs required")
    vehicles = find_by_ids(vehicle_ids)
    record_comparison(user_id, vehicle_ids)
    logger.info("User %s compared vehicles %s", user_id, vehicle_ids)
    return vehicles
