from __future__ import annotations

from pydantic import BaseModel, Field


class Vehicle(BaseModel):
    vehicle_id: int
    make: str
    model: str
    year: int
    price: float
    vehicle_type: str
    fuel_type: str
    transmission: str
    seating_capacity: int
    mileage: float | None = None
    safety_rating: float | None = None
    features: list[str] = Field(default_factory=list)
    availability_status: str = "Available"
    description: str | None = None
    recommendation_score: int | None = None
    reason: str | None = None

    @property
    def display_name(self) -> str:
        return f"{self.make} {self.model}"


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class VehiclePage(BaseModel):
    vehicles: list[Vehicle]
    pagination: Pagination
