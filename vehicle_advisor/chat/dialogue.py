"""
Chat turn orchestration.

One call handles one user turn: classify the text, run the intent's
handler against the catalog and preference store, build the response
envelope and, for result-producing intents, append a turn record.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from ..analytics.store import record_event
from ..catalog.config import DEFAULT_CATALOG_CONFIG
from ..catalog.models import Vehicle
from ..catalog.vehicles import find_available, find_by_name_tokens
from ..preferences.store import get_preferences, update_budget
from ..recommendations.engine import recommend_for_profile
from ..recommendations.filters import accumulate_filters, extract_filters, format_lakhs
from ..recommendations.models import FilterSet
from ..recommendations.scoring import rank_vehicles
from .comparison import ComparisonOutcome, ComparisonTier, resolve_comparison
from .intent import (
    APPLY_FILTER_LITERALS,
    Intent,
    classify_intent,
    mentioned_models,
    normalize,
)
from .models import (
    BotResponse,
    ComparisonResponse,
    PreferencesFormResponse,
    QuickAction,
    TextResponse,
    TurnRecord,
    VehicleListResponse,
    action,
    literal,
)
from .state import append_turn, latest_turn

logger = logging.getLogger(__name__)

_TYPE_LABELS = {"hatchback": "Hatchback", "sedan": "Sedan", "suv": "SUV", "muv": "MUV"}


@dataclass(frozen=True)
class TurnContext:
    user_id: str
    text: str
    normalized: str
    vehicle_ids: list[int] | None
    latest_turn: TurnRecord | None
    continuation: bool

    @property
    def previous_filters(self) -> FilterSet | None:
        """Filters of the latest turn, only when this turn continues it."""
        if self.continuation and self.latest_turn is not None:
            return self.latest_turn.filters
        return None


# ---------------------------------------------------------------------------
# Shared quick actions and helpers
# ---------------------------------------------------------------------------

_TYPE_CHOICES = [
    literal("Hatchback", "hatchback"),
    literal("Sedan", "sedan"),
    literal("SUV", "suv"),
    literal("MUV", "muv"),
]

_BUDGET_CHOICES = [
    literal("Under 5L", "under 5 lakhs"),
    literal("5-10L", "between 5 and 10 lakhs"),
    literal("10-15L", "between 10 and 15 lakhs"),
    literal("15-20L", "between 15 and 20 lakhs"),
    literal("20L+", "above 20 lakhs"),
]

_COMPARE_DONE = [action("View Details", "details"), action("New Search", "browse_all")]
_SEARCH_AGAIN = [action("Browse All", "browse_all"), action("Search Again", "find_car")]


def error_response(retry_text: str | None = None) -> TextResponse:
    quick_actions = [action("Browse All", "browse_all"), action("Start Over", "find_car")]
    if retry_text:
        quick_actions.insert(0, literal("Try Again", retry_text))
    return TextResponse(
        content="Sorry, I encountered an error. Please try again.",
        quick_actions=quick_actions,
    )


def _profile_budget(user_id: str) -> float | None:
    profile = get_preferences(user_id)
    return profile.budget_max if profile else None


def _log_results(ctx: TurnContext, filters: FilterSet, vehicles: list[Vehicle], source: str) -> None:
    append_turn(ctx.user_id, filters, [v.vehicle_id for v in vehicles], source=source)


def _under(budget: float | None) -> str:
    return f" under ₹{format_lakhs(budget)}L" if budget else ""


def _within(budget: float | None) -> str:
    return f" within ₹{format_lakhs(budget)}L budget" if budget else ""


# ---------------------------------------------------------------------------
# Conversational intents (no turn record)
# ---------------------------------------------------------------------------


def _greeting(ctx: TurnContext) -> BotResponse:
    if get_preferences(ctx.user_id) is not None:
        return TextResponse(
            content=(
                "Hi! Welcome back! I remember your preferences. Would you like to see "
                "personalized recommendations or start fresh?"
            ),
            quick_actions=[
                action("My Recommendations", "my_recommendations"),
                action("Update Preferences", "update_preferences"),
                action("Browse All", "browse_all"),
            ],
        )
    return TextResponse(
        content=(
            "Hi! I'm your vehicle advisor. I can help you find the perfect car based on "
            "your needs and budget. What are you looking for today?"
        ),
        quick_actions=[
            action("Find a car", "find_car"),
            action("Set Budget", "set_budget"),
            action("Browse All", "browse_all"),
            action("Set Preferences", "set_preferences"),
        ],
    )


def _set_preferences(ctx: TurnContext) -> BotResponse:
    return PreferencesFormResponse(
        content="Let me help you set your preferences. This will help me give you better recommendations!",
        quick_actions=[action("Skip for now", "browse_all")],
    )


def _choose_type(ctx: TurnContext) -> BotResponse:
    budget = _profile_budget(ctx.user_id)
    budget_text = f" (Budget: ₹{format_lakhs(budget)}L)" if budget else ""
    return TextResponse(
        content=f"What type of vehicle are you looking for?{budget_text}",
        quick_actions=[
            *_TYPE_CHOICES,
            action("Set Budget", "set_budget"),
            action("All Types", "browse_all"),
        ],
    )


def _refine(ctx: TurnContext) -> BotResponse:
    current = ctx.previous_filters or FilterSet()
    content = "Let's refine your search! Choose additional filters:"
    if current.vehicle_type:
        content += f"\n\nCurrent: {current.vehicle_type}"
    if current.budget_max:
        content += f" • Budget: ₹{format_lakhs(current.budget_max)}L"

    back = (
        literal("Back to Results", current.vehicle_type.lower())
        if current.vehicle_type
        else action("Back to Results", "browse_all")
    )
    return TextResponse(
        content=content,
        quick_actions=[
            action("Transmission", "filter_transmission"),
            action("Fuel Type", "filter_fuel"),
            action("Seating", "filter_seating"),
            action("Budget", "set_budget"),
            back,
        ],
    )


def _filter_prompt(content: str, choices: list[QuickAction]) -> Callable[[TurnContext], BotResponse]:
    def handler(ctx: TurnContext) -> BotResponse:
        return TextResponse(content=content, quick_actions=[*choices, action("Back", "refine")])
    return handler


_filter_transmission = _filter_prompt(
    "What transmission type do you prefer?",
    [literal("Manual", "apply_filter_manual"), literal("Automatic", "apply_filter_automatic")],
)

_filter_fuel = _filter_prompt(
    "What fuel type do you prefer?",
    [
        literal("Petrol", "apply_filter_petrol"),
        literal("Diesel", "apply_filter_diesel"),
        literal("Electric", "apply_filter_electric"),
        literal("CNG", "apply_filter_cng"),
    ],
)

_filter_seating = _filter_prompt(
    "How many seats do you need?",
    [
        literal("5 Seater", "apply_filter_5_seats"),
        literal("7 Seater", "apply_filter_7_seats"),
        literal("8+ Seater", "apply_filter_8_seats"),
    ],
)


def _set_budget(ctx: TurnContext) -> BotResponse:
    return TextResponse(
        content="What's your budget range for the vehicle?",
        quick_actions=list(_BUDGET_CHOICES),
    )


def _budget_statement(ctx: TurnContext) -> BotResponse:
    filters = extract_filters(ctx.text)
    if not filters.budget_max:
        return TextResponse(
            content=(
                "What's your budget range? For example, you can say \"under 10 lakhs\" "
                "or \"between 15-20 lakhs\"."
            ),
            quick_actions=list(_BUDGET_CHOICES),
        )

    update_budget(ctx.user_id, filters.budget_max)
    return TextResponse(
        content=(
            f"Great! I've saved your budget of ₹{format_lakhs(filters.budget_max)} lakhs. "
            "Now, what type of vehicle are you looking for?"
        ),
        quick_actions=[*_TYPE_CHOICES, action("Show All", "show_all_in_budget")],
    )


def _fallback(ctx: TurnContext) -> BotResponse:
    return TextResponse(
        content=(
            "I can help you find the perfect vehicle! You can tell me:\n"
            "• Your budget (e.g., \"under 10 lakhs\")\n"
            "• Vehicle type (SUV, Sedan, Hatchback)\n"
            "• Features you need (automatic, sunroof, etc.)\n"
            "• Or simply say \"show me all cars\""
        ),
        quick_actions=[
            action("Set Budget", "set_budget"),
            action("Choose Type", "choose_type"),
            action("Browse All", "browse_all"),
        ],
    )


# ---------------------------------------------------------------------------
# Comparison
# ---------------------------------------------------------------------------


def _compare(ctx: TurnContext) -> BotResponse:
    resolution = resolve_comparison(ctx.user_id, ctx.text, ctx.vehicle_ids)
    names = ", ".join(resolution.mentioned)
    count = len(resolution.vehicles)

    if resolution.resolved:
        if resolution.tier is ComparisonTier.named:
            content = f"Here's a comparison of {count} vehicles ({names}):"
        elif resolution.tier is ComparisonTier.last_recommendation:
            content = f"Here's a comparison of all {count} vehicles from your search:"
        else:
            content = f"Here's a comparison of {count} vehicles:"
        return ComparisonResponse(
            content=content,
            vehicles=resolution.vehicles,
            quick_actions=list(_COMPARE_DONE),
        )

    if resolution.outcome is ComparisonOutcome.too_few:
        return TextResponse(
            content=f"I found only 1 vehicle matching {names}. I need at least 2 vehicles to compare.",
            quick_actions=list(_SEARCH_AGAIN),
        )

    if resolution.outcome is ComparisonOutcome.not_found:
        return TextResponse(
            content=f"I couldn't find any vehicles matching {names}.",
            quick_actions=list(_SEARCH_AGAIN),
        )

    return TextResponse(
        content=(
            "To compare vehicles, you can:\n\n"
            "• Type \"compare creta and venue\"\n"
            "• First search for cars, then type \"compare these\"\n"
            "• Click \"Browse All\" and then the compare button"
        ),
        quick_actions=[
            action("Browse All", "browse_all"),
            action("Set Budget", "set_budget"),
            action("Find a car", "find_car"),
        ],
    )


# ---------------------------------------------------------------------------
# Result-producing intents (append a turn record)
# ---------------------------------------------------------------------------


def _my_recommendations(ctx: TurnContext) -> BotResponse:
    profile = get_preferences(ctx.user_id)
    if profile is None:
        return TextResponse(
            content="You haven't set your preferences yet. Let me help you set them up!",
            quick_actions=[action("Set Preferences", "set_preferences"), action("Browse All", "browse_all")],
        )

    vehicles = recommend_for_profile(profile)
    if not vehicles:
        return TextResponse(
            content="No vehicles match your exact preferences. Would you like to adjust them or browse all vehicles?",
            quick_actions=[action("Update Preferences", "update_preferences"), action("Browse All", "browse_all")],
        )

    _log_results(ctx, profile.as_filter_set(), vehicles, source="my_recommendations")
    return VehicleListResponse(
        content=f"Based on your preferences, here are {len(vehicles)} vehicles perfect for you:",
        vehicles=vehicles,
        quick_actions=[action("Compare These", "compare"), action("Update Preferences", "update_preferences")],
    )


def _named_search(ctx: TurnContext) -> BotResponse:
    term = mentioned_models(ctx.normalized)[0]
    vehicles = sorted(find_by_name_tokens([term]), key=lambda v: v.price)

    if not vehicles:
        return TextResponse(
            content=f"Sorry, I couldn't find any vehicles matching \"{term}\".",
            quick_actions=[
                action("Browse All", "browse_all"),
                literal("SUVs", "suv"),
                literal("Sedans", "sedan"),
            ],
        )

    _log_results(ctx, FilterSet(), vehicles, source=f"search:{term}")
    return VehicleListResponse(
        content=f"Found {len(vehicles)} vehicle(s) matching \"{term}\":",
        vehicles=vehicles,
        quick_actions=[
            action("Compare These", "compare"),
            action("View Details", "details"),
            action("New Search", "browse_all"),
        ],
    )


def _browse_all(ctx: TurnContext) -> BotResponse:
    vehicles = find_available(limit=DEFAULT_CATALOG_CONFIG.browse_limit)
    _log_results(ctx, FilterSet(), vehicles, source="browse_all")
    return VehicleListResponse(
        content=f"Here are all available vehicles in our inventory ({len(vehicles)} vehicles):",
        vehicles=vehicles,
        quick_actions=[
            action("Filter by Type", "choose_type"),
            action("Set Budget", "set_budget"),
            action("Compare These", "compare"),
        ],
    )


def _show_all_in_budget(ctx: TurnContext) -> BotResponse:
    budget = _profile_budget(ctx.user_id)
    if not budget:
        return TextResponse(
            content="Please set your budget first!",
            quick_actions=[action("Set Budget", "set_budget")],
        )

    filters = FilterSet(budget_max=budget)
    vehicles = find_available(filters, limit=DEFAULT_CATALOG_CONFIG.browse_limit)
    _log_results(ctx, filters, vehicles, source="show_all_in_budget")
    return VehicleListResponse(
        content=f"Here are all {len(vehicles)} vehicles within your budget of ₹{format_lakhs(budget)} lakhs:",
        vehicles=vehicles,
        quick_actions=[
            action("Filter by Type", "choose_type"),
            action("Change Budget", "set_budget"),
            action("Compare These", "compare"),
        ],
    )


def _type_and_budget(ctx: TurnContext) -> BotResponse:
    filters = extract_filters(ctx.text)
    if filters.budget_max:
        update_budget(ctx.user_id, filters.budget_max)

    # Inferred seating and use case are not hard constraints here
    filters = FilterSet(
        vehicle_type=filters.vehicle_type,
        budget_max=filters.budget_max,
        transmission=filters.transmission,
        fuel_type=filters.fuel_type,
    )
    vehicles = find_available(filters)
    label = filters.vehicle_type
    if not vehicles:
        return TextResponse(
            content=f"Sorry, no {label or 'vehicles'} found{_under(filters.budget_max)}.",
            quick_actions=[
                action("Browse All", "browse_all"),
                action("Change Budget", "set_budget"),
                action("Different Type", "choose_type"),
            ],
        )

    _log_results(ctx, filters, vehicles, source="type_and_budget")
    return VehicleListResponse(
        content=f"Found {len(vehicles)} {label or 'vehicle'}(s){_under(filters.budget_max)}:",
        vehicles=vehicles,
        quick_actions=[
            action("Add Filters", "refine"),
            action("Compare These", "compare"),
            action("New Search", "browse_all"),
        ],
    )


def _select_type(ctx: TurnContext) -> BotResponse:
    vehicle_type = _TYPE_LABELS[ctx.normalized]
    previous = ctx.previous_filters
    # Only the budget carries over from the previous turn
    carried = FilterSet(budget_max=previous.budget_max) if previous else None
    filters = accumulate_filters(carried, _profile_budget(ctx.user_id), FilterSet(vehicle_type=vehicle_type))

    vehicles = find_available(filters)
    if not vehicles:
        return TextResponse(
            content=f"Sorry, we don't have any {vehicle_type}s{_within(filters.budget_max)}.",
            quick_actions=[
                action("Browse All", "browse_all"),
                action("Choose Different Type", "choose_type"),
                action("Change Budget", "set_budget"),
            ],
        )

    _log_results(ctx, filters, vehicles, source="select_type")
    return VehicleListResponse(
        content=f"Here are all {vehicle_type}s{_within(filters.budget_max)} ({len(vehicles)} vehicles):",
        vehicles=vehicles,
        quick_actions=[
            action("Change Budget", "set_budget"),
            action("Add Filters", "refine"),
            action("Compare These", "compare"),
        ],
    )


def _describe(filters: FilterSet) -> str:
    parts = [p for p in (filters.vehicle_type, filters.transmission, filters.fuel_type) if p]
    if filters.min_seats:
        parts.append(f"{filters.min_seats}+ seats")
    if filters.budget_max:
        parts.append(f"₹{format_lakhs(filters.budget_max)}L")
    return ", ".join(parts)


def _apply_filter(ctx: TurnContext) -> BotResponse:
    new = FilterSet(**APPLY_FILTER_LITERALS[ctx.normalized])
    filters = accumulate_filters(ctx.previous_filters, _profile_budget(ctx.user_id), new)

    vehicles = find_available(filters)
    if not vehicles:
        return TextResponse(
            content="No vehicles match all your filters. Try removing some filters or changing your criteria.",
            quick_actions=[
                action("Remove Filters", "browse_all"),
                action("Change Budget", "set_budget"),
                action("Try Different Type", "choose_type"),
            ],
        )

    _log_results(ctx, filters, vehicles, source="apply_filter")
    return VehicleListResponse(
        content=f"Found {len(vehicles)} vehicle(s) matching: {_describe(filters)}",
        vehicles=vehicles,
        quick_actions=[
            action("Add More Filters", "refine"),
            action("Compare These", "compare"),
            action("Clear Filters", "browse_all"),
        ],
    )


def _feature_query(ctx: TurnContext) -> BotResponse:
    filters = extract_filters(ctx.text)
    # Transmission is the only hard constraint; everything else ranks
    candidates = find_available(FilterSet(transmission=filters.transmission))
    vehicles = rank_vehicles(candidates, filters)

    if not vehicles:
        return TextResponse(
            content="I couldn't find vehicles with those requirements right now.",
            quick_actions=[action("Browse All", "browse_all"), action("Refine Search", "refine")],
        )

    _log_results(ctx, filters, vehicles, source="feature_query")
    return VehicleListResponse(
        content="Based on your requirements, here are my recommendations:",
        vehicles=vehicles,
        quick_actions=[
            action("Compare These", "compare"),
            action("Refine Search", "refine"),
            action("Browse All", "browse_all"),
        ],
    )


HANDLERS: dict[Intent, Callable[[TurnContext], BotResponse]] = {
    Intent.greeting: _greeting,
    Intent.my_recommendations: _my_recommendations,
    Intent.set_preferences: _set_preferences,
    Intent.compare: _compare,
    Intent.named_search: _named_search,
    Intent.browse_all: _browse_all,
    Intent.show_all_in_budget: _show_all_in_budget,
    Intent.type_and_budget: _type_and_budget,
    Intent.choose_type: _choose_type,
    Intent.select_type: _select_type,
    Intent.refine: _refine,
    Intent.filter_transmission: _filter_transmission,
    Intent.filter_fuel: _filter_fuel,
    Intent.filter_seating: _filter_seating,
    Intent.apply_filter: _apply_filter,
    Intent.set_budget: _set_budget,
    Intent.budget_statement: _budget_statement,
    Intent.feature_query: _feature_query,
    Intent.fallback: _fallback,
}


def classify_and_respond(
    user_id: str,
    utterance: str,
    vehicle_ids: list[int] | None = None,
) -> BotResponse:
    """Run one chat turn. Never raises: failures become an error envelope."""
    start_time = time.time()
    try:
        turn = latest_turn(user_id)
        classification = classify_intent(utterance, turn)
        ctx = TurnContext(
            user_id=user_id,
            text=utterance,
            normalized=normalize(utterance),
            vehicle_ids=vehicle_ids,
            latest_turn=turn,
            continuation=classification.continuation,
        )
        response = HANDLERS[classification.intent](ctx)

        record_event("chat_turn", {
            "intent": classification.intent.value,
            "response_type": response.type,
            "results_count": len(getattr(response, "vehicles", [])),
            "filters": extract_filters(utterance).as_dict(),
            "response_time_ms": round((time.time() - start_time) * 1000, 1),
        })
        return response

    except Exception:
        logger.exception("Failed to generate bot response for user %s", user_id)
        record_event("chat_error", {"message": utterance})
        return error_response(retry_text=utterance)
