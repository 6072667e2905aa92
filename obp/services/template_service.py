"""Effective pricing settings across the room type > market > season > rate hierarchy.

Each layer may override part of what the layer below defines. Priority from
lowest to highest:

1. Room type (base multiplier template, minimum adults, pricing type)
2. Market ``pricing_overrides`` entry for the room type
3. Season ``pricing_overrides`` entry for the room type
4. Rate (daily)

Inputs are already-loaded records; nothing here touches storage.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from obp.domain.models import (
    PRICING_TYPE_UNIT,
    AdultMultiplierMap,
    AgeGroup,
    ChildMultiplierMap,
    CombinationEntry,
    MultiplierTemplate,
)
from obp.utils.config import Settings, get_settings


@dataclass(frozen=True)
class MultiplierOverride:
    """Partial template; ``None`` fields inherit from the layer below."""

    adult_multipliers: Optional[AdultMultiplierMap] = None
    child_multipliers: Optional[ChildMultiplierMap] = None
    combination_table: Optional[tuple[CombinationEntry, ...]] = None
    rounding_rule: Optional[str] = None


@dataclass(frozen=True)
class PricingOverride:
    room_type_id: str
    use_min_adults_override: bool = False
    min_adults: Optional[int] = None
    use_pricing_type_override: bool = False
    pricing_type: Optional[str] = None
    use_multiplier_override: bool = False
    multiplier_override: Optional[MultiplierOverride] = None


@dataclass(frozen=True)
class RoomTypePricing:
    room_type_id: str
    min_adults: int = 1
    pricing_type: str = PRICING_TYPE_UNIT
    use_multipliers: bool = False
    multiplier_template: Optional[MultiplierTemplate] = None


@dataclass(frozen=True)
class PricingScope:
    """A market or a season: per-room-type overrides plus its child age settings."""

    pricing_overrides: tuple[PricingOverride, ...] = ()
    inherit_child_age_groups: bool = True
    child_age_groups: tuple[AgeGroup, ...] = ()


@dataclass(frozen=True)
class RatePricing:
    pricing_type: Optional[str] = None
    use_multiplier_override: bool = False
    multiplier_override: Optional[MultiplierOverride] = None


@dataclass(frozen=True)
class EffectiveTemplate:
    use_multipliers: bool
    template: MultiplierTemplate = field(default_factory=MultiplierTemplate)


def _find_override(
    scope: Optional[PricingScope],
    room_type_id: str,
    flag: str,
) -> Optional[PricingOverride]:
    if scope is None:
        return None
    return next(
        (
            override
            for override in scope.pricing_overrides
            if override.room_type_id == room_type_id and getattr(override, flag)
        ),
        None,
    )


def _apply_override(template: MultiplierTemplate, override: MultiplierOverride) -> MultiplierTemplate:
    return MultiplierTemplate(
        adult_multipliers=(
            override.adult_multipliers
            if override.adult_multipliers is not None
            else template.adult_multipliers
        ),
        child_multipliers=(
            override.child_multipliers
            if override.child_multipliers is not None
            else template.child_multipliers
        ),
        combination_table=(
            override.combination_table
            if override.combination_table is not None
            else template.combination_table
        ),
        rounding_rule=override.rounding_rule or template.rounding_rule,
    )


def effective_min_adults(
    room_type: RoomTypePricing,
    market: Optional[PricingScope] = None,
    season: Optional[PricingScope] = None,
) -> int:
    min_adults = room_type.min_adults or 1
    for scope in (market, season):
        override = _find_override(scope, room_type.room_type_id, "use_min_adults_override")
        if override is not None and override.min_adults:
            min_adults = override.min_adults
    return min_adults


def effective_pricing_type(
    room_type: RoomTypePricing,
    market: Optional[PricingScope] = None,
    season: Optional[PricingScope] = None,
    rate: Optional[RatePricing] = None,
) -> str:
    pricing_type = room_type.pricing_type or PRICING_TYPE_UNIT
    for scope in (market, season):
        override = _find_override(scope, room_type.room_type_id, "use_pricing_type_override")
        if override is not None and override.pricing_type:
            pricing_type = override.pricing_type
    # A rate stores the type that was effective when it was saved.
    if rate is not None and rate.pricing_type:
        pricing_type = rate.pricing_type
    return pricing_type


def effective_multiplier_template(
    room_type: RoomTypePricing,
    market: Optional[PricingScope] = None,
    season: Optional[PricingScope] = None,
    rate: Optional[RatePricing] = None,
    *,
    settings: Optional[Settings] = None,
) -> EffectiveTemplate:
    resolved_settings = settings or get_settings()
    use_multipliers = False
    template = MultiplierTemplate(rounding_rule=resolved_settings.default_rounding_rule)

    if room_type.use_multipliers and room_type.multiplier_template is not None:
        use_multipliers = True
        template = room_type.multiplier_template
        if not template.rounding_rule:
            template = _apply_override(
                template,
                MultiplierOverride(rounding_rule=resolved_settings.default_rounding_rule),
            )

    for scope in (market, season):
        override = _find_override(scope, room_type.room_type_id, "use_multiplier_override")
        if override is not None and override.multiplier_override is not None:
            use_multipliers = True
            template = _apply_override(template, override.multiplier_override)

    if rate is not None and rate.use_multiplier_override and rate.multiplier_override is not None:
        use_multipliers = True
        template = _apply_override(template, rate.multiplier_override)

    return EffectiveTemplate(use_multipliers=use_multipliers, template=template)


def effective_rounding_rule(
    room_type: RoomTypePricing,
    market: Optional[PricingScope] = None,
    season: Optional[PricingScope] = None,
    rate: Optional[RatePricing] = None,
    *,
    settings: Optional[Settings] = None,
) -> str:
    resolved_settings = settings or get_settings()
    effective = effective_multiplier_template(room_type, market, season, rate, settings=resolved_settings)
    return effective.template.rounding_rule or resolved_settings.default_rounding_rule


def effective_child_age_groups(
    hotel_age_groups: tuple[AgeGroup, ...],
    market: Optional[PricingScope] = None,
    season: Optional[PricingScope] = None,
) -> tuple[AgeGroup, ...]:
    age_groups = hotel_age_groups
    for scope in (market, season):
        if scope is not None and not scope.inherit_child_age_groups and scope.child_age_groups:
            age_groups = scope.child_age_groups
    return age_groups
