from __future__ import annotations

import pandas as pd

from .config import DEFAULT_CATALOG_CONFIG, CatalogConfig

_df: pd.DataFrame | None = None


def _load(config: CatalogConfig) -> pd.DataFrame:
    df = pd.read_csv(config.vehicles_csv)

    # Pre-parse features into lists for scoring and serialisation
    df["features_list"] = (
        df["features"]
        .fillna("")
        .apply(lambda s: [f.strip() for f in str(s).split(",") if f.strip()])
    )

    # Lowercase columns for case-insensitive lookup
    df["make_lower"] = df["make"].fillna("").str.lower()
    df["model_lower"] = df["model"].fillna("").str.lower()
    df["description_lower"] = df["description"].fillna("").str.lower()
    df["is_available"] = df["availability_status"].fillna("").str.lower() == "available"

    return df


def get_dataframe(config: CatalogConfig = DEFAULT_CATALOG_CONFIG) -> pd.DataFrame:
    """Return the in-memory vehicle DataFrame, loading it on first call."""
    global _df
    if _df is None:
        _df = _load(config)
    return _df


def reset_dataframe() -> None:
    """Drop the cached inventory so the next call reloads it."""
    global _df
    _df = None
