from __future__ import annotations

from dataclasses import replace

from obp.domain.models import PRICING_TYPE_PER_PERSON, AgeGroup, MultiplierTemplate
from obp.services.template_service import (
    MultiplierOverride,
    PricingOverride,
    PricingScope,
    RatePricing,
    RoomTypePricing,
    effective_child_age_groups,
    effective_min_adults,
    effective_multiplier_template,
    effective_pricing_type,
    effective_rounding_rule,
)
from obp.utils.config import get_settings


ROOM_ID = "room-standard"

BASE_TEMPLATE = MultiplierTemplate(
    adult_multipliers={1: 0.8, 2: 1.0},
    child_multipliers={1: {"infant": 0.0}},
    combination_table=(),
    rounding_rule="nearest",
)


def _room_type(**overrides) -> RoomTypePricing:
    defaults = {
        "room_type_id": ROOM_ID,
        "min_adults": 1,
        "pricing_type": PRICING_TYPE_PER_PERSON,
        "use_multipliers": True,
        "multiplier_template": BASE_TEMPLATE,
    }
    defaults.update(overrides)
    return RoomTypePricing(**defaults)


def _scope(*overrides: PricingOverride, **kwargs) -> PricingScope:
    return PricingScope(pricing_overrides=tuple(overrides), **kwargs)


def test_room_type_template_is_the_base():
    effective = effective_multiplier_template(_room_type())

    assert effective.use_multipliers is True
    assert effective.template == BASE_TEMPLATE


def test_no_multipliers_yields_empty_template_with_default_rounding():
    settings = replace(get_settings(), default_rounding_rule="down")

    effective = effective_multiplier_template(
        _room_type(use_multipliers=False),
        settings=settings,
    )

    assert effective.use_multipliers is False
    assert effective.template.adult_multipliers == {}
    assert effective.template.rounding_rule == "down"


def test_market_override_replaces_only_defined_fields():
    market = _scope(
        PricingOverride(
            room_type_id=ROOM_ID,
            use_multiplier_override=True,
            multiplier_override=MultiplierOverride(adult_multipliers={1: 0.9, 2: 1.0}),
        )
    )

    template = effective_multiplier_template(_room_type(), market=market).template

    assert template.adult_multipliers == {1: 0.9, 2: 1.0}
    assert template.child_multipliers == BASE_TEMPLATE.child_multipliers
    assert template.rounding_rule == "nearest"


def test_override_for_other_room_type_is_ignored():
    market = _scope(
        PricingOverride(
            room_type_id="room-suite",
            use_multiplier_override=True,
            multiplier_override=MultiplierOverride(rounding_rule="up"),
        )
    )

    assert effective_rounding_rule(_room_type(), market=market) == "nearest"


def test_priority_is_rate_over_season_over_market():
    market = _scope(
        PricingOverride(
            room_type_id=ROOM_ID,
            use_multiplier_override=True,
            multiplier_override=MultiplierOverride(rounding_rule="nearest5"),
        )
    )
    season = _scope(
        PricingOverride(
            room_type_id=ROOM_ID,
            use_multiplier_override=True,
            multiplier_override=MultiplierOverride(rounding_rule="nearest10"),
        )
    )
    rate = RatePricing(
        use_multiplier_override=True,
        multiplier_override=MultiplierOverride(rounding_rule="up"),
    )

    assert effective_rounding_rule(_room_type(), market=market) == "nearest5"
    assert effective_rounding_rule(_room_type(), market=market, season=season) == "nearest10"
    assert effective_rounding_rule(_room_type(), market, season, rate) == "up"


def test_override_flag_must_be_set():
    season = _scope(
        PricingOverride(
            room_type_id=ROOM_ID,
            use_multiplier_override=False,
            multiplier_override=MultiplierOverride(rounding_rule="up"),
        )
    )

    assert effective_rounding_rule(_room_type(), season=season) == "nearest"


def test_override_enables_multipliers_for_room_without_template():
    rate = RatePricing(
        use_multiplier_override=True,
        multiplier_override=MultiplierOverride(adult_multipliers={2: 1.0}),
    )

    effective = effective_multiplier_template(
        _room_type(use_multipliers=False, multiplier_template=None),
        rate=rate,
    )

    assert effective.use_multipliers is True
    assert effective.template.adult_multipliers == {2: 1.0}


def test_min_adults_season_beats_market():
    market = _scope(PricingOverride(room_type_id=ROOM_ID, use_min_adults_override=True, min_adults=2))
    season = _scope(PricingOverride(room_type_id=ROOM_ID, use_min_adults_override=True, min_adults=3))

    assert effective_min_adults(_room_type()) == 1
    assert effective_min_adults(_room_type(), market=market) == 2
    assert effective_min_adults(_room_type(), market=market, season=season) == 3


def test_pricing_type_stored_on_rate_wins():
    market = _scope(
        PricingOverride(room_type_id=ROOM_ID, use_pricing_type_override=True, pricing_type="unit")
    )

    assert effective_pricing_type(_room_type(), market=market) == "unit"
    assert effective_pricing_type(_room_type(), market=market, rate=RatePricing(pricing_type=PRICING_TYPE_PER_PERSON)) == (
        PRICING_TYPE_PER_PERSON
    )


def test_child_age_groups_inheritance():
    hotel_groups = (AgeGroup(code="infant"), AgeGroup(code="child"))
    market_groups = (AgeGroup(code="baby"),)
    season_groups = (AgeGroup(code="kid"),)

    inheriting_market = _scope(inherit_child_age_groups=True, child_age_groups=market_groups)
    market = _scope(inherit_child_age_groups=False, child_age_groups=market_groups)
    season = _scope(inherit_child_age_groups=False, child_age_groups=season_groups)

    assert effective_child_age_groups(hotel_groups) == hotel_groups
    assert effective_child_age_groups(hotel_groups, market=inheriting_market) == hotel_groups
    assert effective_child_age_groups(hotel_groups, market=market) == market_groups
    assert effective_child_age_groups(hotel_groups, market=market, season=season) == season_groups
