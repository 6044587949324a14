from __future__ import annotations

from pydantic import BaseModel, Field

from ..recommendations.models import FilterSet


class PreferenceUpdate(BaseModel):
    budget_min: float | None = Field(default=None, ge=0)
    budget_max: float | None = Field(default=None, ge=0)
    preferred_vehicle_types: list[str] = Field(default_factory=list)
    preferred_brands: list[str] = Field(default_factory=list)
    fuel_type_preference: str | None = None
    transmission_preference: str | None = None
    must_have_features: list[str] = Field(default_factory=list)
    seating_needed: int | None = Field(default=None, ge=1, le=12)
    primary_use_case: str | None = None


class PreferenceProfile(PreferenceUpdate):
    user_id: str
    created_at: float
    updated_at: float

    def as_filter_set(self) -> FilterSet:
        """Profile fields that drive catalog queries and scoring."""
        return FilterSet(
            budget_min=self.budget_min,
            budget_max=self.budget_max,
            fuel_type=self.fuel_type_preference,
            transmission=self.transmission_preference,
            seating_needed=self.seating_needed,
            must_have_features=self.must_have_features or None,
            primary_use_case=self.primary_use_case,
        )


class PreferencesResponse(BaseModel):
    preferences: PreferenceProfile | None
    has_preferences: bool
