"""Domain-level validation rules for room occupancy configuration."""

from __future__ import annotations

from dataclasses import replace

from obp.domain.models import OccupancyConfig


MAX_ADULTS_LIMIT = 10
MAX_CHILDREN_LIMIT = 6
TOTAL_MAX_GUESTS_LIMIT = 12
BASE_OCCUPANCY_LIMIT = 10


def validate_occupancy_config(config: OccupancyConfig) -> None:
    if not 1 <= config.min_adults <= MAX_ADULTS_LIMIT:
        raise ValueError(f"min_adults must be between 1 and {MAX_ADULTS_LIMIT}")
    if not config.min_adults <= config.max_adults <= MAX_ADULTS_LIMIT:
        raise ValueError(f"max_adults must be between min_adults and {MAX_ADULTS_LIMIT}")
    if not 0 <= config.max_children <= MAX_CHILDREN_LIMIT:
        raise ValueError(f"max_children must be between 0 and {MAX_CHILDREN_LIMIT}")
    if not 1 <= config.total_max_guests <= TOTAL_MAX_GUESTS_LIMIT:
        raise ValueError(f"total_max_guests must be between 1 and {TOTAL_MAX_GUESTS_LIMIT}")
    if not 1 <= config.base_occupancy <= BASE_OCCUPANCY_LIMIT:
        raise ValueError(f"base_occupancy must be between 1 and {BASE_OCCUPANCY_LIMIT}")


def normalize_occupancy_config(config: OccupancyConfig) -> OccupancyConfig:
    """Lift total_max_guests so base occupancy and a full adult load always fit."""
    total_max_guests = max(config.total_max_guests, config.base_occupancy, config.max_adults)
    if total_max_guests == config.total_max_guests:
        return config
    return replace(config, total_max_guests=total_max_guests)


def count_combinations(config: OccupancyConfig, age_group_count: int) -> int:
    """Number of entries the generator will emit, computed without enumerating."""
    total = 0
    for adults in range(config.min_adults, config.max_adults + 1):
        for child_count in range(0, config.max_children + 1):
            if adults + child_count > config.total_max_guests:
                continue
            if child_count == 0:
                total += 1
            else:
                total += age_group_count**child_count
    return total
