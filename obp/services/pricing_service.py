"""Quote-time pricing: rounding rules, override resolution and occupancy quotes."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_CEILING, Decimal
from typing import Optional, Sequence

from obp.domain.models import (
    ROUNDING_DOWN,
    ROUNDING_NEAREST,
    ROUNDING_NEAREST_5,
    ROUNDING_NEAREST_10,
    ROUNDING_UP,
    AgeGroup,
    ChildSlot,
    CombinationEntry,
    MultiplierTemplate,
    OccupancyQuote,
    PriceBreakdownLine,
    QuoteChild,
)
from obp.services.combination_service import build_key
from obp.services.multiplier_service import calculate_multiplier
from obp.utils.config import Settings, get_settings
from obp.utils.logger import get_logger


logger = get_logger(__name__)


NOT_SELLABLE_ERROR = "Combination not available for sale"

_BUCKET_SIZES = {
    ROUNDING_NEAREST: 1,
    ROUNDING_NEAREST_5: 5,
    ROUNDING_NEAREST_10: 10,
}


def _to_decimal(value: float) -> Decimal:
    return Decimal(repr(float(value)))


def _round_half_up_to(raw_price: float, bucket: int) -> float:
    step = Decimal(bucket)
    buckets = (_to_decimal(raw_price) / step).quantize(Decimal(1), rounding=ROUND_HALF_CEILING)
    return float(buckets * step)


def round_price(raw_price: float, rule: str) -> float:
    """Snap a raw price to a sellable price point.

    Unknown rules leave the price untouched instead of raising.
    """
    if rule in _BUCKET_SIZES:
        return _round_half_up_to(raw_price, _BUCKET_SIZES[rule])
    if rule == ROUNDING_UP:
        return float(math.ceil(raw_price))
    if rule == ROUNDING_DOWN:
        return float(math.floor(raw_price))
    return raw_price


def calculate_price(base_price: float, multiplier: float, rule: str) -> float:
    # Decimal product keeps 100 * 1.235 at 123.5 rather than 123.49999...
    raw_price = float(_to_decimal(base_price) * _to_decimal(multiplier))
    return round_price(raw_price, rule)


def effective_multiplier(entry: CombinationEntry) -> Optional[float]:
    """Multiplier actually charged for a combination, or None when it is not sellable.

    Precedence is inactive > explicit override > calculated default. An override
    of 0 is a real value meaning the stay is free.
    """
    if not entry.is_active:
        return None
    if entry.override_multiplier is not None:
        return entry.override_multiplier
    return entry.calculated_multiplier


def resolve_child_slots(
    children: Sequence[QuoteChild],
    age_groups: Sequence[AgeGroup],
    default_code: str,
) -> list[ChildSlot]:
    slots: list[ChildSlot] = []
    for order, child in enumerate(children, start=1):
        code = child.age_group
        if not code and child.age is not None:
            matched = next((group for group in age_groups if group.covers_age(child.age)), None)
            code = matched.code if matched is not None else None
        slots.append(ChildSlot(order=order, age_group=code or default_code))
    return slots


def find_combination(
    table: Sequence[CombinationEntry],
    key: str,
) -> Optional[CombinationEntry]:
    return next((entry for entry in table if entry.key == key), None)


def quote_occupancy(
    adults: int,
    children: Sequence[QuoteChild],
    template: MultiplierTemplate,
    base_price: float,
    age_groups: Sequence[AgeGroup] = (),
    *,
    base_occupancy: int = 2,
    settings: Optional[Settings] = None,
) -> OccupancyQuote:
    """Price one guest composition against a multiplier template.

    The persisted combination table is authoritative when it holds the key;
    compositions missing from it fall back to the template's multiplier maps.
    """
    resolved_settings = settings or get_settings()
    slots = resolve_child_slots(children, age_groups, resolved_settings.default_child_age_group)
    key = build_key(adults, slots)
    rounding_rule = template.rounding_rule

    combination = find_combination(template.combination_table, key)
    if combination is not None:
        multiplier = effective_multiplier(combination)
        if multiplier is None:
            logger.info("Quote rejected for inactive combination | key=%s", key)
            return OccupancyQuote(
                combination_key=key,
                base_price=base_price,
                multiplier=None,
                rounding_rule=rounding_rule,
                price=None,
                is_available=False,
                error=NOT_SELLABLE_ERROR,
            )
    else:
        multiplier = calculate_multiplier(
            adults,
            slots,
            template.adult_multipliers,
            template.child_multipliers,
        )
        logger.debug("Combination missing from table, calculated | key=%s | multiplier=%s", key, multiplier)

    price = calculate_price(base_price, multiplier, rounding_rule)
    return OccupancyQuote(
        combination_key=key,
        base_price=base_price,
        multiplier=multiplier,
        rounding_rule=rounding_rule,
        price=price,
        is_available=True,
        breakdown=(
            PriceBreakdownLine(
                type="obp_base",
                description=f"Base price ({base_occupancy} adults)",
                amount=base_price,
            ),
            PriceBreakdownLine(
                type="multiplier",
                description=f"Multiplier for {key}: ×{multiplier}",
                amount=price - base_price,
            ),
        ),
    )
