"""
Per-user turn log and comparison log.

Rows are stored the way a relational log table would hold them: filters and
vehicle ids as JSON text. Only the most recent row per user is read back.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any

from pydantic import ValidationError

from ..recommendations.models import FilterSet
from .models import TurnRecord

logger = logging.getLogger(__name__)

_turns: list[dict[str, Any]] = []
_comparisons: list[dict[str, Any]] = []


def _decode_filters(raw: str | None) -> FilterSet:
    if not raw:
        return FilterSet()
    try:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        return FilterSet(**data)
    except (ValueError, TypeError, ValidationError):
        logger.warning("Malformed persisted filters, treating as empty: %r", raw, exc_info=True)
        return FilterSet()


def _decode_ids(raw: str | None) -> list[int]:
    if not raw:
        return []
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            return []
        return [int(i) for i in data]
    except (ValueError, TypeError):
        logger.warning("Malformed persisted vehicle ids, treating as empty: %r", raw, exc_info=True)
        return []


def _to_record(row: dict[str, Any]) -> TurnRecord:
    return TurnRecord(
        user_id=row["user_id"],
        filters=_decode_filters(row.get("filters_applied")),
        vehicle_ids=_decode_ids(row.get("recommended_vehicle_ids")),
        source=row.get("source"),
        timestamp=row["timestamp"],
    )


def append_turn(
    user_id: str,
    filters: FilterSet,
    vehicle_ids: list[int],
    source: str | None = None,
) -> TurnRecord:
    row = {
        "user_id": user_id,
        "filters_applied": json.dumps(filters.as_dict()),
        "recommended_vehicle_ids": json.dumps(list(vehicle_ids)),
        "source": source,
        "timestamp": time.time(),
    }
    _turns.append(row)
    return _to_record(row)


def latest_turn(user_id: str) -> TurnRecord | None:
    for row in reversed(_turns):
        if row["user_id"] == user_id:
            return _to_record(row)
    return None


def record_comparison(user_id: str, vehicle_ids: list[int]) -> None:
    _comparisons.append({
        "user_id": user_id,
        "vehicle_ids": json.dumps(list(vehicle_ids)),
        "timestamp": time.time(),
    })


def get_comparisons(user_id: str | None = None) -> list[dict[str, Any]]:
    if user_id is None:
        return _comparisons
    return [row for row in _comparisons if row["user_id"] == user_id]


def clear_state() -> None:
    _turns.clear()
    _comparisons.clear()
