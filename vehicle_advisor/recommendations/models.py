from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ..catalog.models import Vehicle


class FilterSet(BaseModel):
    """Partial constraint bag over vehicle attributes.

    An unset key means "no constraint"; ``as_dict`` never emits ``None``.
    """

    model_config = ConfigDict(extra="ignore")

    budget_min: float | None = None
    budget_max: float | None = None
    vehicle_type: str | None = None
    fuel_type: str | None = None
    transmission: str | None = None
    seating_capacity: int | None = None
    seating_needed: int | None = None
    must_have_features: list[str] | None = None
    primary_use_case: str | None = None
    make: str | None = None

    def as_dict(self) -> dict:
        return self.model_dump(exclude_none=True)

    @property
    def min_seats(self) -> int | None:
        """An explicit ``seating_capacity`` wins over the inferred ``seating_needed``."""
        return self.seating_capacity or self.seating_needed

    def is_empty(self) -> bool:
        return not self.as_dict()


class RecommendationRequest(BaseModel):
    preferences: FilterSet = Field(default_factory=FilterSet)
    query: str | None = Field(default=None, max_length=1000)
    limit: int = Field(default=10, ge=1, le=50)


class RecommendationResponse(BaseModel):
    recommendations: list[Vehicle]
    filters_applied: dict = Field(default_factory=dict)
    total_matches: int


class CompareRequest(BaseModel):
    vehicle_ids: list[int] = Field(default_factory=list)


class ComparisonResult(BaseModel):
    vehicles: list[Vehicle]
