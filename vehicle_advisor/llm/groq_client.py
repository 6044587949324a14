from __future__ import annotations

import json
import logging

from groq import Groq

from ..catalog.models import Vehicle
from ..recommendations.filters import format_lakhs
from ..recommendations.models import FilterSet
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a car buying advisor. "
    "Given a buyer's saved preferences and a list of vehicles that already "
    "match them, write a short, friendly one-sentence reason why each "
    "vehicle suits the buyer. Do not change the order or add vehicles.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"reasons": [{"id": <vehicle_id>, "reason": "<one sentence>"}]}'
)


def _build_user_message(preferences: FilterSet, vehicles: list[Vehicle]) -> str:
    lines = ["## Buyer Preferences"]
    if preferences.budget_max:
        lines.append(f"- Budget: up to ₹{format_lakhs(preferences.budget_max)} lakhs")
    if preferences.fuel_type:
        lines.append(f"- Fuel: {preferences.fuel_type}")
    if preferences.transmission:
        lines.append(f"- Transmission: {preferences.transmission}")
    if preferences.seating_needed:
        lines.append(f"- Seats needed: {preferences.seating_needed}")
    if preferences.primary_use_case:
        lines.append(f"- Primary use: {preferences.primary_use_case}")
    if preferences.must_have_features:
        lines.append(f"- Must-have features: {', '.join(preferences.must_have_features)}")

    lines.append("\n## Vehicles")
    lines.append("| ID | Vehicle | Price | Type | Fuel | Seats | Mileage | Safety | Features |")
    lines.append("|---|---|---|---|---|---|---|---|---|")
    for v in vehicles:
        lines.append(
            f"| {v.vehicle_id} | {v.year} {v.display_name} | ₹{format_lakhs(v.price)}L "
            f"| {v.vehicle_type} | {v.fuel_type} | {v.seating_capacity} "
            f"| {v.mileage if v.mileage is not None else 'N/A'} "
            f"| {v.safety_rating if v.safety_rating is not None else 'N/A'} "
            f"| {', '.join(v.features)} |"
        )

    return "\n".join(lines)


def explain_recommendations(
    preferences: FilterSet,
    vehicles: list[Vehicle],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> dict[int, str]:
    """
    Ask Groq for a one-sentence reason per recommended vehicle.

    Returns a dict mapping vehicle id -> reason string.
    Returns empty dict on any failure (timeout, bad JSON, API error).
    """
    if not config.enabled or not config.api_key:
        return {}

    if not vehicles:
        return {}

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": _build_user_message(preferences, vehicles)},
            ],
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        parsed = json.loads(content)

        known_ids = {v.vehicle_id for v in vehicles}
        results: dict[int, str] = {}
        for item in parsed.get("reasons", []):
            try:
                vid = int(item.get("id"))
            except (TypeError, ValueError):
                continue
            reason = item.get("reason", "")
            if vid in known_ids and reason:
                results[vid] = reason

        return results

    except Exception:
        logger.warning("Groq LLM call failed, returning recommendations without reasons", exc_info=True)
        return {}
