"""Combination keys, localized names and full combination-table generation.

A combination is one guest composition for a room: an adult count plus the
children ordered by their position, each tagged with an age-group code. The
generator enumerates every composition an occupancy configuration allows and
attaches the default calculated multiplier to each one.
"""

from __future__ import annotations

from dataclasses import replace
from itertools import product
from typing import Iterable, Optional, Sequence

from obp.domain.constraints import count_combinations
from obp.domain.models import AgeGroup, ChildSlot, CombinationEntry, OccupancyConfig
from obp.services.multiplier_service import (
    build_default_adult_multipliers,
    build_default_child_multipliers,
    calculate_multiplier,
)
from obp.utils.config import Settings, get_settings
from obp.utils.logger import get_logger


logger = get_logger(__name__)


FALLBACK_LOCALE = "tr"

_SINGLE_LABELS = {"tr": "Tek Kişilik", "en": "Single"}
_DOUBLE_LABELS = {"tr": "Çift Kişilik", "en": "Double"}
_ADULTS_TEMPLATES = {"tr": "{count} Yetişkin", "en": "{count} Adults"}


def sort_children(children: Iterable[ChildSlot]) -> list[ChildSlot]:
    return sorted(children, key=lambda child: child.order)


def build_key(adults: int, children: Iterable[ChildSlot] = ()) -> str:
    ordered = sort_children(children)
    if not ordered:
        return str(adults)
    codes = "_".join(child.age_group for child in ordered)
    return f"{adults}+{len(ordered)}_{codes}"


def _localized(labels: dict[str, str], locale: str) -> str:
    return labels.get(locale) or labels[FALLBACK_LOCALE]


def resolve_age_group_label(
    code: str,
    age_groups: Sequence[AgeGroup],
    locale: str,
    fallback_locale: str = FALLBACK_LOCALE,
) -> str:
    """Resolve a child label: exact locale, then the fallback locale, then the raw code."""
    age_group = next((group for group in age_groups if group.code == code), None)
    if age_group is None:
        return code
    for candidate in (locale, fallback_locale):
        label = age_group.name.get(candidate)
        if label:
            return label
    return code


def build_name(
    adults: int,
    children: Iterable[ChildSlot],
    age_groups: Sequence[AgeGroup],
    locale: str,
) -> str:
    ordered = sort_children(children)
    if not ordered:
        if adults == 1:
            return _localized(_SINGLE_LABELS, locale)
        if adults == 2:
            return _localized(_DOUBLE_LABELS, locale)
        return _localized(_ADULTS_TEMPLATES, locale).format(count=adults)

    labels = ", ".join(
        resolve_age_group_label(child.age_group, age_groups, locale) for child in ordered
    )
    return f"{adults}+{len(ordered)} ({labels})"


def _compositions(
    occupancy: OccupancyConfig,
    age_groups: Sequence[AgeGroup],
) -> Iterable[tuple[int, tuple[ChildSlot, ...]]]:
    for adults in range(occupancy.min_adults, occupancy.max_adults + 1):
        for child_count in range(0, occupancy.max_children + 1):
            if adults + child_count > occupancy.total_max_guests:
                continue
            if child_count == 0:
                yield adults, ()
                continue
            for picks in product(age_groups, repeat=child_count):
                yield adults, tuple(
                    ChildSlot(order=order, age_group=age_group.code)
                    for order, age_group in enumerate(picks, start=1)
                )


def generate_table(
    occupancy: OccupancyConfig,
    age_groups: Sequence[AgeGroup],
    *,
    settings: Optional[Settings] = None,
) -> list[CombinationEntry]:
    """Enumerate every composition the occupancy allows, with default multipliers.

    Regeneration is a full replace: persisted overrides are not consulted here,
    see ``reapply_overrides``.
    """
    resolved_settings = settings or get_settings()
    expected_entries = count_combinations(occupancy, len(age_groups))
    if expected_entries > resolved_settings.combination_warning_threshold:
        logger.warning(
            (
                "Combination table exceeds warning threshold | entries=%s | threshold=%s | "
                "max_children=%s | age_groups=%s"
            ),
            expected_entries,
            resolved_settings.combination_warning_threshold,
            occupancy.max_children,
            len(age_groups),
        )

    adult_multipliers = build_default_adult_multipliers(
        occupancy.max_adults,
        occupancy.base_occupancy,
        occupancy.min_adults,
    )
    child_multipliers = build_default_child_multipliers(occupancy.max_children, age_groups)

    table = [
        CombinationEntry(
            key=build_key(adults, children),
            adults=adults,
            children=children,
            calculated_multiplier=calculate_multiplier(
                adults,
                children,
                adult_multipliers,
                child_multipliers,
            ),
            override_multiplier=None,
            is_active=True,
        )
        for adults, children in _compositions(occupancy, age_groups)
    ]
    logger.debug(
        "Combination table generated | entries=%s | min_adults=%s | max_adults=%s",
        len(table),
        occupancy.min_adults,
        occupancy.max_adults,
    )
    return table


def reapply_overrides(
    table: Sequence[CombinationEntry],
    previous_table: Sequence[CombinationEntry],
) -> list[CombinationEntry]:
    """Carry operator edits (override and active flag) onto a regenerated table by key."""
    previous_by_key = {entry.key: entry for entry in previous_table}
    merged: list[CombinationEntry] = []
    for entry in table:
        previous = previous_by_key.pop(entry.key, None)
        if previous is None:
            merged.append(entry)
            continue
        merged.append(
            replace(
                entry,
                override_multiplier=previous.override_multiplier,
                is_active=previous.is_active,
            )
        )

    if previous_by_key:
        logger.info(
            "Dropped edits for combinations no longer reachable | keys=%s",
            sorted(previous_by_key),
        )
    return merged
