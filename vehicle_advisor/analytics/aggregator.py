from __future__ import annotations

from collections import Counter
from typing import Any

from ..chat.state import get_comparisons


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    turns = [e for e in events if e["type"] == "chat_turn"]
    searches = [e for e in events if e["type"] == "search"]
    errors = [e for e in events if e["type"] == "chat_error"]
    total = len(turns)

    # Average response time across chat turns and direct searches
    times = [e["response_time_ms"] for e in turns + searches if "response_time_ms" in e]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Intent distribution
    intent_counts = dict(Counter(t.get("intent", "unknown") for t in turns))

    # Top vehicle types and makes requested
    requested = [t.get("filters", {}) or {} for t in turns] + [s.get("filters", {}) or {} for s in searches]
    type_counter: Counter[str] = Counter(f["vehicle_type"] for f in requested if f.get("vehicle_type"))
    make_counter: Counter[str] = Counter(f["make"] for f in requested if f.get("make"))
    top_vehicle_types = [{"name": n, "count": c} for n, c in type_counter.most_common(10)]
    top_makes = [{"name": n, "count": c} for n, c in make_counter.most_common(10)]

    # Filter usage rates
    filter_counts = {"budget": 0, "vehicle_type": 0, "fuel_type": 0, "transmission": 0, "features": 0}
    for f in requested:
        if f.get("budget_max") or f.get("budget_min"):
            filter_counts["budget"] += 1
        if f.get("vehicle_type"):
            filter_counts["vehicle_type"] += 1
        if f.get("fuel_type"):
            filter_counts["fuel_type"] += 1
        if f.get("transmission"):
            filter_counts["transmission"] += 1
        if f.get("must_have_features"):
            filter_counts["features"] += 1
    filter_usage = {
        k: round(v / len(requested) * 100, 1) if requested else 0.0
        for k, v in filter_counts.items()
    }

    return {
        "total_turns": total,
        "total_searches": len(searches),
        "total_errors": len(errors),
        "avg_response_time_ms": avg_time,
        "intent_counts": intent_counts,
        "top_vehicle_types": top_vehicle_types,
        "top_makes": top_makes,
        "filter_usage": filter_usage,
        "comparisons": len(get_comparisons()),
    }
