"""
Resolve what a "compare" request refers to.

Three tiers are tried in order: vehicles named in the text, ids supplied
by the caller, then the user's last result set. A named mention that finds
fewer than two vehicles ends resolution; it never falls through.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..catalog.models import Vehicle
from ..catalog.vehicles import find_by_ids, find_by_name_tokens
from .intent import mentioned_models, normalize
from .state import latest_turn, record_comparison

logger = logging.getLogger(__name__)

MIN_VEHICLES = 2


class ComparisonOutcome(str, Enum):
    resolved = "resolved"
    too_few = "too_few"
    not_found = "not_found"
    unresolved = "unresolved"


class ComparisonTier(str, Enum):
    named = "named"
    explicit = "explicit"
    last_recommendation = "last_recommendation"


@dataclass(frozen=True)
class ComparisonResolution:
    outcome: ComparisonOutcome
    vehicles: list[Vehicle] = field(default_factory=list)
    tier: ComparisonTier | None = None
    mentioned: list[str] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.outcome is ComparisonOutcome.resolved


_UNRESOLVED = ComparisonResolution(outcome=ComparisonOutcome.unresolved)


def _resolve_named(user_id: str, mentioned: list[str]) -> ComparisonResolution:
    vehicles = find_by_name_tokens(mentioned)
    if len(vehicles) >= MIN_VEHICLES:
        record_comparison(user_id, [v.vehicle_id for v in vehicles])
        return ComparisonResolution(
            ComparisonOutcome.resolved, vehicles, ComparisonTier.named, mentioned,
        )
    outcome = ComparisonOutcome.too_few if vehicles else ComparisonOutcome.not_found
    return ComparisonResolution(outcome, vehicles, ComparisonTier.named, mentioned)


def _resolve_ids(user_id: str, ids: list[int], tier: ComparisonTier) -> ComparisonResolution | None:
    if len(ids) < MIN_VEHICLES:
        return None
    vehicles = find_by_ids(ids)
    if len(vehicles) < MIN_VEHICLES:
        return None
    record_comparison(user_id, ids)
    return ComparisonResolution(ComparisonOutcome.resolved, vehicles, tier)


def resolve_comparison(
    user_id: str,
    text: str,
    explicit_ids: list[int] | None = None,
) -> ComparisonResolution:
    """Find the vehicles a comparison request refers to.

    Catalog failures are logged and reported as unresolved so the caller
    can fall back to its instructional reply.
    """
    try:
        mentioned = mentioned_models(normalize(text))
        if len(mentioned) >= MIN_VEHICLES:
            return _resolve_named(user_id, mentioned)

        if explicit_ids:
            resolution = _resolve_ids(user_id, list(explicit_ids), ComparisonTier.explicit)
            if resolution:
                return resolution

        turn = latest_turn(user_id)
        if turn is not None:
            resolution = _resolve_ids(user_id, turn.vehicle_ids, ComparisonTier.last_recommendation)
            if resolution:
                return resolution

    except Exception:
        logger.warning("Comparison resolution failed for user %s", user_id, exc_info=True)

    return _UNRESOLVED
