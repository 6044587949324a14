"""
Rule-based intent classification for chat turns.

Rules are evaluated in the fixed order of ``INTENT_RULES``; the first
predicate that matches decides the intent, even when later rules would
match too.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .models import TurnRecord

logger = logging.getLogger(__name__)


class Intent(str, Enum):
    greeting = "greeting"
    my_recommendations = "my_recommendations"
    set_preferences = "set_preferences"
    compare = "compare"
    named_search = "named_search"
    browse_all = "browse_all"
    show_all_in_budget = "show_all_in_budget"
    type_and_budget = "type_and_budget"
    choose_type = "choose_type"
    select_type = "select_type"
    refine = "refine"
    filter_transmission = "filter_transmission"
    filter_fuel = "filter_fuel"
    filter_seating = "filter_seating"
    apply_filter = "apply_filter"
    set_budget = "set_budget"
    budget_statement = "budget_statement"
    feature_query = "feature_query"
    fallback = "fallback"


# ---------------------------------------------------------------------------
# Vocabularies
# ---------------------------------------------------------------------------

MODEL_NAMES = [
    "creta", "nexon", "city", "swift", "baleno", "venue", "seltos", "scorpio",
    "fortuner", "innova", "punch", "brezza", "verna", "amaze", "harrier",
    "safari", "xuv", "thar", "sonet", "carens", "ertiga",
]

VEHICLE_TYPE_WORDS = ["hatchback", "sedan", "suv", "muv"]

_BUDGET_WORDS = ["lakh", "budget", "under", "below", "between", "above"]

# Literal values offered as quick actions by the sub-filter prompts
APPLY_FILTER_LITERALS: dict[str, dict] = {
    "apply_filter_manual": {"transmission": "Manual"},
    "apply_filter_automatic": {"transmission": "Automatic"},
    "apply_filter_petrol": {"fuel_type": "Petrol"},
    "apply_filter_diesel": {"fuel_type": "Diesel"},
    "apply_filter_electric": {"fuel_type": "Electric"},
    "apply_filter_cng": {"fuel_type": "CNG"},
    "apply_filter_5_seats": {"seating_capacity": 5},
    "apply_filter_7_seats": {"seating_capacity": 7},
    "apply_filter_8_seats": {"seating_capacity": 8},
}

_GREETING_RE = re.compile(r"^(?:hi|hello|hey|good morning|good evening)\b")

CONTINUATION_INTENTS = frozenset({
    Intent.select_type,
    Intent.refine,
    Intent.apply_filter,
    Intent.compare,
})


def normalize(text: str) -> str:
    return text.strip().lower()


def mentioned_models(text: str) -> list[str]:
    """Known model tokens contained in *text*, in vocabulary order."""
    return [name for name in MODEL_NAMES if name in text]


def _contains(*keywords: str) -> Callable[[str], bool]:
    return lambda text: any(k in text for k in keywords)


def _equals(*literals: str) -> Callable[[str], bool]:
    return lambda text: text in literals


def _either(*predicates: Callable[[str], bool]) -> Callable[[str], bool]:
    return lambda text: any(p(text) for p in predicates)


def _is_type_and_budget(text: str) -> bool:
    return any(t in text for t in VEHICLE_TYPE_WORDS) and any(b in text for b in _BUDGET_WORDS)


def _is_refine(text: str) -> bool:
    # Sub-filter protocol literals contain "filter" but belong to later rules
    if text.startswith(("filter_", "apply_filter_")):
        return False
    return any(k in text for k in ("refine", "add filters", "filter"))


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

IntentRule = tuple[Intent, Callable[[str], bool]]

INTENT_RULES: tuple[IntentRule, ...] = (
    (Intent.greeting, lambda text: bool(_GREETING_RE.match(text))),
    (Intent.my_recommendations, _contains("my recommendations", "my_recommendations", "personalized", "for me")),
    (Intent.set_preferences, _contains(
        "set preferences", "update preferences", "my preferences", "set_preferences", "update_preferences",
    )),
    (Intent.compare, _contains("compare", "comparison")),
    (Intent.named_search, lambda text: bool(mentioned_models(text))),
    (Intent.browse_all, _contains("browse all", "browse_all", "show me all", "all vehicles", "all cars")),
    (Intent.show_all_in_budget, _either(
        _contains("show all in budget", "show_all_in_budget"), _equals("show all"),
    )),
    (Intent.type_and_budget, _is_type_and_budget),
    (Intent.choose_type, _either(
        _contains("choose type", "choose_type", "vehicle type", "select type"),
        _equals("find a car", "find car", "find_car", "i want to find"),
    )),
    (Intent.select_type, _equals(*VEHICLE_TYPE_WORDS)),
    (Intent.refine, _is_refine),
    (Intent.filter_transmission, _contains("filter_transmission")),
    (Intent.filter_fuel, _contains("filter_fuel")),
    (Intent.filter_seating, _contains("filter_seating")),
    (Intent.apply_filter, _equals(*APPLY_FILTER_LITERALS)),
    (Intent.set_budget, _contains("set budget", "set_budget", "help me set my budget")),
    (Intent.budget_statement, _contains("budget", "price", "lakh")),
    (Intent.feature_query, _contains("automatic", "sunroof", "safety", "mileage")),
)


@dataclass(frozen=True)
class Classification:
    intent: Intent
    continuation: bool = False


def classify_intent(text: str, latest_turn: TurnRecord | None = None) -> Classification:
    """Return the first matching intent for *text*.

    ``continuation`` is set when the intent builds on the user's previous
    turn and such a turn exists.
    """
    normalized = normalize(text)
    intent = Intent.fallback
    for candidate, predicate in INTENT_RULES:
        if predicate(normalized):
            intent = candidate
            break

    continuation = latest_turn is not None and intent in CONTINUATION_INTENTS
    logger.debug("Classified %r as %s (continuation=%s)", normalized, intent.value, continuation)
    return Classification(intent=intent, continuation=continuation)
