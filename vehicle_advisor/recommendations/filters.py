from __future__ import annotations

import re

from .models import FilterSet

LAKH = 100_000

# ---------------------------------------------------------------------------
# Vocabularies (scan order matters: later hits overwrite earlier ones)
# ---------------------------------------------------------------------------

_VEHICLE_TYPES: list[tuple[str, str]] = [
    ("suv", "SUV"),
    ("sedan", "Sedan"),
    ("hatchback", "Hatchback"),
    ("muv", "MUV"),
]

_FUEL_TYPES: list[tuple[str, str]] = [
    ("petrol", "Petrol"),
    ("diesel", "Diesel"),
    ("electric", "Electric"),
    ("cng", "CNG"),
]

_FEATURES: list[tuple[str, str]] = [
    ("sunroof", "Sunroof"),
    ("airbag", "Airbags"),
    ("abs", "ABS"),
    ("cruise control", "Cruise Control"),
]

BRANDS = ["maruti", "hyundai", "tata", "honda", "mahindra", "toyota", "kia", "mg"]

_BUDGET_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:lakhs?|l)\b", re.IGNORECASE)
_UNDER_BUDGET_RE = re.compile(r"under\s+(\d+(?:\.\d+)?)\s*(?:lakhs?|l)\b", re.IGNORECASE)
_BRAND_RES = [(brand, re.compile(rf"\b{brand}\b")) for brand in BRANDS]


def lakhs_to_amount(lakhs: float) -> int:
    return int(round(lakhs * LAKH))


def format_lakhs(amount: float) -> str:
    """Render an absolute amount in lakhs, e.g. ``1250000 -> '12.5'``."""
    return f"{amount / LAKH:g}"


def _brand_label(brand: str) -> str:
    return brand.upper() if len(brand) <= 2 else brand.capitalize()


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def extract_filters(text: str) -> FilterSet:
    """Best-effort keyword extraction of search filters from free text.

    Each key is read independently; there is no cross-key validation.
    """
    lower = text.lower()
    found: dict = {}

    match = _BUDGET_RE.search(lower)
    if match:
        found["budget_max"] = lakhs_to_amount(float(match.group(1)))
    match = _UNDER_BUDGET_RE.search(lower)
    if match:
        found["budget_max"] = lakhs_to_amount(float(match.group(1)))

    for keyword, label in _VEHICLE_TYPES:
        if keyword in lower:
            found["vehicle_type"] = label

    for keyword, label in _FUEL_TYPES:
        if keyword in lower:
            found["fuel_type"] = label

    if "automatic" in lower or "auto" in lower:
        found["transmission"] = "Automatic"
    if "manual" in lower:
        found["transmission"] = "Manual"

    # "family" implies a seven-seater even without an explicit seat count
    if "family" in lower:
        found["seating_needed"] = 7
        found["primary_use_case"] = "family"
    if "city" in lower:
        found["primary_use_case"] = "city driving"

    features = [label for keyword, label in _FEATURES if keyword in lower]
    if features:
        found["must_have_features"] = features

    for brand, pattern in _BRAND_RES:
        if pattern.search(lower):
            found["make"] = _brand_label(brand)
            break

    return FilterSet(**found)


# ---------------------------------------------------------------------------
# Accumulation
# ---------------------------------------------------------------------------


def merge_filters(*layers: FilterSet | None) -> FilterSet:
    """Right-biased, key-by-key merge; unset keys never overwrite.

    ``must_have_features`` is replaced wholesale, not unioned.
    """
    merged: dict = {}
    for layer in layers:
        if layer is not None:
            merged.update(layer.as_dict())
    return FilterSet(**merged)


def accumulate_filters(
    previous: FilterSet | None,
    profile_budget: float | None,
    new: FilterSet,
) -> FilterSet:
    """Effective filters for a continuation turn.

    Only the single latest turn's filters are considered; a saved profile
    budget overrides that turn's budget, and *new* overrides both.
    """
    budget_layer = FilterSet(budget_max=profile_budget) if profile_budget else None
    return merge_filters(previous, budget_layer, new)
