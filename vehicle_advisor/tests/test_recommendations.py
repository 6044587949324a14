from fastapi.testclient import TestClient

from vehicle_advisor.app import app
from vehicle_advisor.chat.state import get_comparisons, latest_turn

client = TestClient(app)

HEADERS = {"X-User-Id": "user-1"}


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_metadata():
    body = client.get("/metadata").json()
    assert "MG" in body["makes"]
    assert body["vehicle_types"] == ["Hatchback", "MUV", "SUV", "Sedan"]
    assert "CNG" in body["fuel_types"]


# ── Vehicles ─────────────────────────────────────────────────────────────


def test_vehicles_filters_and_orders_by_price():
    resp = client.get("/vehicles", params={"vehicle_type": "suv", "budget_max": 1000000})
    assert resp.status_code == 200
    body = resp.json()
    assert [v["vehicle_id"] for v in body["vehicles"]] == [11, 3, 19, 6, 12]
    assert body["pagination"] == {"page": 1, "limit": 20, "total": 5, "pages": 1}


def test_vehicles_pagination():
    body = client.get("/vehicles", params={"page": 2, "limit": 10}).json()
    assert body["pagination"]["total"] == 23
    assert body["pagination"]["pages"] == 3
    assert len(body["vehicles"]) == 10


def test_vehicles_exclude_sold():
    ids = [v["vehicle_id"] for v in client.get("/vehicles", params={"limit": 100}).json()["vehicles"]]
    assert 18 not in ids
    assert 25 not in ids


def test_vehicles_seating():
    body = client.get("/vehicles", params={"seating_capacity": 7}).json()
    assert all(v["seating_capacity"] >= 7 for v in body["vehicles"])
    assert body["pagination"]["total"] == 7


def test_vehicle_detail_includes_sold():
    resp = client.get("/vehicles/18")
    assert resp.status_code == 200
    assert resp.json()["availability_status"] == "Sold"


def test_vehicle_detail_not_found():
    assert client.get("/vehicles/999").status_code == 404


def test_search():
    body = client.get("/vehicles/search", params={"q": "Electric"}).json()
    assert {v["vehicle_id"] for v in body["vehicles"]} == {22, 23}


def test_search_requires_query():
    assert client.get("/vehicles/search").status_code == 400
    assert client.get("/vehicles/search", params={"q": "  "}).status_code == 400


# ── Recommendations ──────────────────────────────────────────────────────


def test_recommendations_returns_scored_results():
    resp = client.post(
        "/recommendations",
        json={"preferences": {"vehicle_type": "SUV", "budget_max": 1000000}},
        headers=HEADERS,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_matches"] == 5
    assert body["filters_applied"] == {"vehicle_type": "SUV", "budget_max": 1000000}
    scores = [v["recommendation_score"] for v in body["recommendations"]]
    assert scores == sorted(scores, reverse=True)


def test_recommendations_query_overrides_preferences():
    resp = client.post(
        "/recommendations",
        json={"preferences": {"vehicle_type": "Sedan"}, "query": "automatic suv"},
        headers=HEADERS,
    )
    body = resp.json()
    assert body["filters_applied"] == {"vehicle_type": "SUV", "transmission": "Automatic"}
    assert all(v["transmission"] == "Automatic" for v in body["recommendations"])


def test_recommendations_respects_limit():
    resp = client.post("/recommendations", json={"limit": 3}, headers=HEADERS)
    body = resp.json()
    assert len(body["recommendations"]) == 3
    assert body["total_matches"] == 23


def test_recommendations_record_turn():
    client.post("/recommendations", json={"preferences": {"make": "Kia"}}, headers=HEADERS)
    turn = latest_turn("user-1")
    assert turn.source == "recommendations"
    assert sorted(turn.vehicle_ids) == [7, 19, 20]


def test_recommendations_validate_limit():
    resp = client.post("/recommendations", json={"limit": 0}, headers=HEADERS)
    assert resp.status_code == 422


# ── Compare ──────────────────────────────────────────────────────────────


def test_compare():
    resp = client.post("/recommendations/compare", json={"vehicle_ids": [13, 4]}, headers=HEADERS)
    assert resp.status_code == 200
    assert [v["vehicle_id"] for v in resp.json()["vehicles"]] == [4, 13]
    assert len(get_comparisons("user-1")) == 1


def test_compare_needs_two_vehicles():
    resp = client.post("/recommendations/compare", json={"vehicle_ids": [4, 4]}, headers=HEADERS)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "At least 2 vehicle IDs required"
