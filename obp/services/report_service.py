"""Tabular price grid for admin combination listings."""

from __future__ import annotations

from typing import Optional, Sequence

import pandas as pd

from obp.domain.models import AgeGroup, CombinationEntry
from obp.services.combination_service import build_name
from obp.services.pricing_service import calculate_price, effective_multiplier
from obp.utils.config import Settings, get_settings


PRICE_GRID_COLUMNS = [
    "key",
    "name",
    "adults",
    "children",
    "calculated_multiplier",
    "override_multiplier",
    "effective_multiplier",
    "price",
    "is_active",
]


def build_price_grid(
    table: Sequence[CombinationEntry],
    base_price: float,
    rounding_rule: str,
    age_groups: Sequence[AgeGroup] = (),
    locale: Optional[str] = None,
    *,
    settings: Optional[Settings] = None,
) -> pd.DataFrame:
    """One row per combination; price is NaN where the combination is not sellable."""
    resolved_locale = locale or (settings or get_settings()).default_locale

    rows = []
    for entry in table:
        multiplier = effective_multiplier(entry)
        rows.append(
            {
                "key": entry.key,
                "name": build_name(entry.adults, entry.children, age_groups, resolved_locale),
                "adults": entry.adults,
                "children": entry.child_count,
                "calculated_multiplier": entry.calculated_multiplier,
                "override_multiplier": entry.override_multiplier,
                "effective_multiplier": multiplier,
                "price": (
                    calculate_price(base_price, multiplier, rounding_rule)
                    if multiplier is not None
                    else float("nan")
                ),
                "is_active": entry.is_active,
            }
        )

    frame = pd.DataFrame(rows, columns=PRICE_GRID_COLUMNS)
    frame["price"] = frame["price"].astype(float)
    return frame
