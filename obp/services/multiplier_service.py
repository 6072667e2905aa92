"""Default multiplier tables and per-composition multiplier arithmetic."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from obp.domain.models import AdultMultiplierMap, AgeGroup, ChildMultiplierMap, ChildSlot


ADULT_MULTIPLIER_STEP = 0.2
NEUTRAL_ADULT_MULTIPLIER = 1.0
DEFAULT_CHILD_MULTIPLIER = 0.0

_TWO_PLACES = Decimal("0.01")


def round2(value: float) -> float:
    """Round half-up to 2 decimals through the decimal repr, so 0.999 becomes 1.0."""
    return float(Decimal(repr(float(value))).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def build_default_adult_multipliers(
    max_adults: int,
    base_occupancy: int,
    min_adults: int = 1,
) -> AdultMultiplierMap:
    # Linear around the base occupancy and intentionally unclamped: fewer adults
    # than the base yields a discount below 1.0.
    return {
        adults: round2(NEUTRAL_ADULT_MULTIPLIER + (adults - base_occupancy) * ADULT_MULTIPLIER_STEP)
        for adults in range(min_adults, max_adults + 1)
    }


def build_default_child_multipliers(
    max_children: int,
    age_groups: Sequence[AgeGroup],
) -> ChildMultiplierMap:
    return {
        order: {age_group.code: DEFAULT_CHILD_MULTIPLIER for age_group in age_groups}
        for order in range(1, max_children + 1)
    }


def calculate_multiplier(
    adults: int,
    children: Iterable[ChildSlot],
    adult_multipliers: AdultMultiplierMap,
    child_multipliers: ChildMultiplierMap,
) -> float:
    """Adult multiplier plus every child's order/age-group surcharge.

    Unknown adult counts count as 1.0 and unknown child entries as 0.
    """
    total = adult_multipliers.get(adults, NEUTRAL_ADULT_MULTIPLIER)
    for child in children:
        total += child_multipliers.get(child.order, {}).get(child.age_group, DEFAULT_CHILD_MULTIPLIER)
    return round2(total)
