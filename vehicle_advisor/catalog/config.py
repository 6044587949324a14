from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

_DEFAULT_CSV = Path(__file__).resolve().parent.parent / "data" / "vehicles.csv"


@dataclass(frozen=True)
class CatalogConfig:
    vehicles_csv: Path = Path(os.getenv("VEHICLES_CSV", str(_DEFAULT_CSV)))
    browse_limit: int = 15
    recommendation_limit: int = 10
    search_limit: int = 20


DEFAULT_CATALOG_CONFIG = CatalogConfig()
