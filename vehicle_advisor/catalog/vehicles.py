from __future__ import annotations

import math
from typing import Iterable

import pandas as pd

from ..recommendations.models import FilterSet
from .config import DEFAULT_CATALOG_CONFIG
from .data_store import get_dataframe
from .models import Pagination, Vehicle, VehiclePage


def _optional(value):
    return value if pd.notna(value) else None


def _row_to_vehicle(row: pd.Series) -> Vehicle:
    return Vehicle(
        vehicle_id=int(row["vehicle_id"]),
        make=row["make"],
        model=str(row["model"]),
        year=int(row["year"]),
        price=float(row["price"]),
        vehicle_type=row["vehicle_type"],
        fuel_type=row["fuel_type"],
        transmission=row["transmission"],
        seating_capacity=int(row["seating_capacity"]),
        mileage=_optional(row["mileage"]),
        safety_rating=_optional(row["safety_rating"]),
        features=row["features_list"],
        availability_status=row["availability_status"],
        description=_optional(row["description"]),
    )


def _to_vehicles(frame: pd.DataFrame) -> list[Vehicle]:
    return [_row_to_vehicle(row) for _, row in frame.iterrows()]


def _filter_mask(df: pd.DataFrame, filters: FilterSet | None) -> pd.Series:
    """Build the availability + hard-filter mask for *filters*."""
    mask = df["is_available"].copy()
    if filters is None:
        return mask

    if filters.budget_min:
        mask &= df["price"] >= filters.budget_min
    if filters.budget_max:
        mask &= df["price"] <= filters.budget_max
    if filters.vehicle_type:
        mask &= df["vehicle_type"].str.lower() == filters.vehicle_type.lower()
    if filters.fuel_type:
        mask &= df["fuel_type"].str.lower() == filters.fuel_type.lower()
    if filters.transmission:
        mask &= df["transmission"].str.lower() == filters.transmission.lower()
    if filters.make:
        mask &= df["make_lower"] == filters.make.lower()
    if filters.min_seats:
        mask &= df["seating_capacity"] >= filters.min_seats

    return mask


def _by_price(frame: pd.DataFrame) -> pd.DataFrame:
    # mergesort is stable, so equal prices keep inventory order
    return frame.sort_values("price", kind="mergesort")


def find_available(filters: FilterSet | None = None, limit: int | None = None) -> list[Vehicle]:
    """Available vehicles matching *filters*, cheapest first."""
    df = get_dataframe()
    matches = _by_price(df.loc[_filter_mask(df, filters)])
    if limit is not None:
        matches = matches.head(limit)
    return _to_vehicles(matches)


def find_by_ids(ids: Iterable[int]) -> list[Vehicle]:
    """Vehicles with the given ids, in inventory order, regardless of availability."""
    wanted = {int(i) for i in ids}
    df = get_dataframe()
    return _to_vehicles(df.loc[df["vehicle_id"].isin(wanted)])


def find_by_id(vehicle_id: int) -> Vehicle | None:
    found = find_by_ids([vehicle_id])
    return found[0] if found else None


def find_by_name_tokens(tokens: Iterable[str]) -> list[Vehicle]:
    """Available vehicles whose make or model contains any of *tokens*."""
    df = get_dataframe()
    mask = pd.Series(False, index=df.index)
    for token in tokens:
        token = token.lower()
        mask |= df["model_lower"].str.contains(token, regex=False) | df[
            "make_lower"
        ].str.contains(token, regex=False)
    return _to_vehicles(df.loc[mask & df["is_available"]])


def search(text: str, limit: int = DEFAULT_CATALOG_CONFIG.search_limit) -> list[Vehicle]:
    """Free-text lookup across make, model and description."""
    term = text.strip().lower()
    df = get_dataframe()
    mask = (
        df["make_lower"].str.contains(term, regex=False)
        | df["model_lower"].str.contains(term, regex=False)
        | df["description_lower"].str.contains(term, regex=False)
    )
    return _to_vehicles(df.loc[mask & df["is_available"]].head(limit))


def list_vehicles(filters: FilterSet | None = None, page: int = 1, limit: int = 20) -> VehiclePage:
    df = get_dataframe()
    matches = _by_price(df.loc[_filter_mask(df, filters)])
    total = len(matches)
    offset = (page - 1) * limit
    return VehiclePage(
        vehicles=_to_vehicles(matches.iloc[offset:offset + limit]),
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit) if limit else 0,
        ),
    )


def catalog_metadata() -> dict[str, list[str]]:
    df = get_dataframe()
    return {
        "makes": sorted(df["make"].dropna().unique().tolist()),
        "vehicle_types": sorted(df["vehicle_type"].dropna().unique().tolist()),
        "fuel_types": sorted(df["fuel_type"].dropna().unique().tolist()),
    }
