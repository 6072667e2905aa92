from __future__ import annotations

import logging
from dataclasses import replace

import pytest

from obp.domain.models import (
    AgeGroup,
    ChildSlot,
    CombinationEntry,
    MultiplierTemplate,
    OccupancyConfig,
    QuoteChild,
)
from obp.services.combination_service import generate_table
from obp.services.pricing_service import (
    NOT_SELLABLE_ERROR,
    calculate_price,
    effective_multiplier,
    quote_occupancy,
    resolve_child_slots,
    round_price,
)
from obp.utils.config import get_settings


INFANT = AgeGroup(code="infant", name={"tr": "Bebek", "en": "Infant"}, min_age=0, max_age=2)
CHILD = AgeGroup(code="child", name={"tr": "Çocuk", "en": "Child"}, min_age=3, max_age=11)


def _entry(**overrides) -> CombinationEntry:
    defaults = {
        "key": "2",
        "adults": 2,
        "children": (),
        "calculated_multiplier": 1.2,
        "override_multiplier": None,
        "is_active": True,
    }
    defaults.update(overrides)
    return CombinationEntry(**defaults)


def _template(**overrides) -> MultiplierTemplate:
    occupancy = OccupancyConfig(
        min_adults=1,
        max_adults=3,
        max_children=2,
        total_max_guests=4,
        base_occupancy=2,
    )
    defaults = {
        "adult_multipliers": {1: 0.8, 2: 1.0, 3: 1.2},
        "child_multipliers": {1: {"infant": 0.0, "child": 0.5}, 2: {"infant": 0.0, "child": 0.3}},
        "combination_table": tuple(generate_table(occupancy, [INFANT, CHILD])),
        "rounding_rule": "nearest",
    }
    defaults.update(overrides)
    return MultiplierTemplate(**defaults)


# --- Rounding ---

@pytest.mark.parametrize(
    ("raw_price", "rule", "expected"),
    [
        (123.45, "none", 123.45),
        (123.5, "nearest", 124.0),
        (123.49, "nearest", 123.0),
        (123.01, "up", 124.0),
        (123.99, "down", 123.0),
        (122.4, "nearest5", 120.0),
        (122.5, "nearest5", 125.0),
        (124.9, "nearest10", 120.0),
        (125.0, "nearest10", 130.0),
        (123.45, "bankers", 123.45),
        (-12.5, "nearest", -12.0),
        (-12.51, "nearest", -13.0),
        (-122.5, "nearest5", -120.0),
    ],
)
def test_round_price_rules(raw_price, rule, expected):
    assert round_price(raw_price, rule) == expected


def test_calculate_price_examples():
    assert calculate_price(100, 1.235, "nearest") == 124
    assert calculate_price(100, 1.22, "nearest5") == 120
    assert calculate_price(100, 1.23, "nearest5") == 125


def test_calculate_price_without_rounding_keeps_precision():
    assert calculate_price(99.9, 1.15, "none") == pytest.approx(114.885)


# --- Override resolution ---

def test_inactive_entry_is_not_sellable_even_with_override():
    assert effective_multiplier(_entry(is_active=False, override_multiplier=1.5)) is None


def test_zero_override_means_free_stay():
    assert effective_multiplier(_entry(override_multiplier=0)) == 0


def test_override_wins_over_calculated():
    assert effective_multiplier(_entry(override_multiplier=1.5)) == 1.5


def test_calculated_used_without_override():
    assert effective_multiplier(_entry()) == 1.2


# --- Child slot resolution ---

def test_resolve_child_slots_prefers_explicit_code_then_age():
    slots = resolve_child_slots(
        [QuoteChild(age_group="child", age=1), QuoteChild(age=1), QuoteChild(age=15), QuoteChild()],
        [INFANT, CHILD],
        default_code="first",
    )

    assert slots == [
        ChildSlot(order=1, age_group="child"),
        ChildSlot(order=2, age_group="infant"),
        ChildSlot(order=3, age_group="first"),
        ChildSlot(order=4, age_group="first"),
    ]


# --- Quotes ---

def test_quote_uses_table_entry():
    quote = quote_occupancy(2, [QuoteChild(age=5)], _template(), base_price=100.0, age_groups=[INFANT, CHILD])

    assert quote.is_available is True
    assert quote.combination_key == "2+1_child"
    # Table entries were generated with free children, not the template's 0.5 surcharge.
    assert quote.multiplier == 1.0
    assert quote.price == 100.0
    assert [line.type for line in quote.breakdown] == ["obp_base", "multiplier"]


def test_quote_applies_override_and_rounding():
    table = tuple(
        replace(entry, override_multiplier=1.234) if entry.key == "3" else entry
        for entry in _template().combination_table
    )

    quote = quote_occupancy(3, [], _template(combination_table=table), base_price=100.0)

    assert quote.multiplier == 1.234
    assert quote.price == 123.0
    assert quote.breakdown[1].amount == pytest.approx(23.0)


def test_quote_rejects_inactive_combination(caplog):
    table = tuple(
        replace(entry, is_active=False) if entry.key == "1" else entry
        for entry in _template().combination_table
    )

    with caplog.at_level(logging.INFO, logger="obp"):
        quote = quote_occupancy(1, [], _template(combination_table=table), base_price=100.0)

    assert quote.is_available is False
    assert quote.price is None
    assert quote.multiplier is None
    assert quote.error == NOT_SELLABLE_ERROR
    assert "inactive combination" in caplog.text


def test_quote_falls_back_to_template_maps_when_key_missing():
    quote = quote_occupancy(
        2,
        [QuoteChild(age=7), QuoteChild(age=8)],
        _template(combination_table=()),
        base_price=80.0,
        age_groups=[INFANT, CHILD],
    )

    assert quote.combination_key == "2+2_child_child"
    assert quote.multiplier == 1.8
    assert quote.price == 144.0


def test_quote_default_child_age_group_comes_from_settings():
    settings = replace(get_settings(), default_child_age_group="child")

    quote = quote_occupancy(
        2,
        [QuoteChild()],
        _template(combination_table=()),
        base_price=100.0,
        settings=settings,
    )

    assert quote.combination_key == "2+1_child"
    assert quote.to_api_dict()["price"] == 150.0
