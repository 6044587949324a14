from __future__ import annotations

from ..catalog.models import Vehicle
from .models import FilterSet


def _budget_score(price: float, budget_max: float | None) -> int:
    if not budget_max:
        return 0
    ratio = price / budget_max
    if ratio <= 0.8:
        return 10
    if ratio <= 1.0:
        return 5
    return 0


def _safety_score(rating: float | None) -> int:
    if rating is None:
        return 0
    if rating >= 4.5:
        return 7
    if rating >= 4.0:
        return 3
    return 0


def score_vehicle(vehicle: Vehicle, preferences: FilterSet) -> int:
    """Additive heuristic score of *vehicle* against *preferences*.

    Components are independent and uncapped. Over-budget vehicles are not
    penalised; callers filter by budget before ranking.
    """
    score = _budget_score(vehicle.price, preferences.budget_max)

    if preferences.primary_use_case == "city driving" and (vehicle.mileage or 0) > 18:
        score += 8

    if preferences.seating_needed and vehicle.seating_capacity >= preferences.seating_needed:
        score += 10

    if preferences.must_have_features:
        owned = set(vehicle.features)
        score += 5 * sum(1 for f in preferences.must_have_features if f in owned)

    score += _safety_score(vehicle.safety_rating)

    if vehicle.year >= 2023:
        score += 5

    return score


def rank_vehicles(vehicles: list[Vehicle], preferences: FilterSet) -> list[Vehicle]:
    """Attach ``recommendation_score`` and sort best first.

    ``sorted`` is stable, so ties keep the incoming catalog order.
    """
    scored = [
        v.model_copy(update={"recommendation_score": score_vehicle(v, preferences)})
        for v in vehicles
    ]
    return sorted(scored, key=lambda v: v.recommendation_score, reverse=True)
