from __future__ import annotations

from vehicle_advisor.catalog.models import Vehicle
from vehicle_advisor.recommendations.models import FilterSet
from vehicle_advisor.recommendations.scoring import rank_vehicles, score_vehicle


def _vehicle(**overrides) -> Vehicle:
    data = {
        "vehicle_id": 1,
        "make": "Tata",
        "model": "Nexon",
        "year": 2021,
        "price": 800000,
        "vehicle_type": "SUV",
        "fuel_type": "Petrol",
        "transmission": "Manual",
        "seating_capacity": 5,
        "mileage": 15.0,
        "safety_rating": 3.5,
        "features": [],
    }
    data.update(overrides)
    return Vehicle(**data)


NO_PREFS = FilterSet()


class TestScoreVehicle:
    def test_baseline_is_zero(self):
        assert score_vehicle(_vehicle(), NO_PREFS) == 0

    def test_budget_well_within(self):
        assert score_vehicle(_vehicle(price=800000), FilterSet(budget_max=1000000)) == 10

    def test_budget_near_limit(self):
        assert score_vehicle(_vehicle(price=950000), FilterSet(budget_max=1000000)) == 5

    def test_over_budget_not_penalised(self):
        assert score_vehicle(_vehicle(price=1500000), FilterSet(budget_max=1000000)) == 0

    def test_city_driving_mileage(self):
        prefs = FilterSet(primary_use_case="city driving")
        assert score_vehicle(_vehicle(mileage=20.0), prefs) == 8
        assert score_vehicle(_vehicle(mileage=18.0), prefs) == 0

    def test_seating_is_binary(self):
        prefs = FilterSet(seating_needed=7)
        assert score_vehicle(_vehicle(seating_capacity=7), prefs) == 10
        assert score_vehicle(_vehicle(seating_capacity=8), prefs) == 10
        assert score_vehicle(_vehicle(seating_capacity=5), prefs) == 0

    def test_features_per_match(self):
        prefs = FilterSet(must_have_features=["Sunroof", "ABS", "Cruise Control"])
        vehicle = _vehicle(features=["Sunroof", "ABS", "Airbags"])
        assert score_vehicle(vehicle, prefs) == 10

    def test_safety_tiers(self):
        assert score_vehicle(_vehicle(safety_rating=4.5), NO_PREFS) == 7
        assert score_vehicle(_vehicle(safety_rating=4.0), NO_PREFS) == 3
        assert score_vehicle(_vehicle(safety_rating=3.9), NO_PREFS) == 0

    def test_safety_tier_jump_adds_four(self):
        low = score_vehicle(_vehicle(safety_rating=4.2), NO_PREFS)
        high = score_vehicle(_vehicle(safety_rating=4.6), NO_PREFS)
        assert high - low == 4

    def test_recent_model_year(self):
        assert score_vehicle(_vehicle(year=2023), NO_PREFS) == 5
        assert score_vehicle(_vehicle(year=2022), NO_PREFS) == 0

    def test_components_add_up(self):
        prefs = FilterSet(
            budget_max=1000000,
            primary_use_case="city driving",
            seating_needed=5,
            must_have_features=["Sunroof"],
        )
        vehicle = _vehicle(
            price=700000, mileage=21.0, features=["Sunroof"], safety_rating=5.0, year=2024,
        )
        assert score_vehicle(vehicle, prefs) == 10 + 8 + 10 + 5 + 7 + 5


class TestRankVehicles:
    def test_sorted_by_score_descending(self):
        vehicles = [
            _vehicle(vehicle_id=1, safety_rating=3.0),
            _vehicle(vehicle_id=2, safety_rating=4.8),
            _vehicle(vehicle_id=3, safety_rating=4.1),
        ]
        ranked = rank_vehicles(vehicles, NO_PREFS)
        assert [v.vehicle_id for v in ranked] == [2, 3, 1]
        assert [v.recommendation_score for v in ranked] == [7, 3, 0]

    def test_ties_keep_input_order(self):
        vehicles = [_vehicle(vehicle_id=i, price=500000 + i) for i in (4, 1, 3)]
        ranked = rank_vehicles(vehicles, NO_PREFS)
        assert [v.vehicle_id for v in ranked] == [4, 1, 3]

    def test_inputs_are_not_mutated(self):
        vehicle = _vehicle()
        rank_vehicles([vehicle], NO_PREFS)
        assert vehicle.recommendation_score is None
