"""Business checks run over a combination table before an operator edit is saved."""

from __future__ import annotations

from typing import Sequence

from obp.domain.models import CombinationEntry, ValidationIssue, ValidationResult
from obp.utils.logger import get_logger


logger = get_logger(__name__)


NO_ACTIVE_COMBINATION = "NO_ACTIVE_COMBINATION"
DOUBLE_OCCUPANCY_MISSING = "DOUBLE_OCCUPANCY_MISSING"
DOUBLE_OCCUPANCY_INACTIVE = "DOUBLE_OCCUPANCY_INACTIVE"
NEGATIVE_MULTIPLIER = "NEGATIVE_MULTIPLIER"

DOUBLE_OCCUPANCY_KEY = "2"


def _check_any_active(table: Sequence[CombinationEntry]) -> list[ValidationIssue]:
    if any(entry.is_active for entry in table):
        return []
    return [
        ValidationIssue(
            code=NO_ACTIVE_COMBINATION,
            message="At least one combination must be active.",
        )
    ]


def _check_double_occupancy(table: Sequence[CombinationEntry]) -> list[ValidationIssue]:
    double = next(
        (entry for entry in table if entry.adults == 2 and not entry.children),
        None,
    )
    if double is None:
        return [
            ValidationIssue(
                code=DOUBLE_OCCUPANCY_MISSING,
                message="The double occupancy combination (2 adults, no children) is missing.",
                key=DOUBLE_OCCUPANCY_KEY,
            )
        ]
    if not double.is_active:
        return [
            ValidationIssue(
                code=DOUBLE_OCCUPANCY_INACTIVE,
                message="The double occupancy combination (2 adults, no children) must be active.",
                key=double.key,
            )
        ]
    return []


def _check_negative_overrides(table: Sequence[CombinationEntry]) -> list[ValidationIssue]:
    return [
        ValidationIssue(
            code=NEGATIVE_MULTIPLIER,
            message=(
                f"Combination {entry.key} has a negative multiplier override "
                f"({entry.override_multiplier})."
            ),
            key=entry.key,
        )
        for entry in table
        if entry.override_multiplier is not None and entry.override_multiplier < 0
    ]


def validate_table(
    table: Sequence[CombinationEntry],
    min_adults_threshold: int = 2,
) -> ValidationResult:
    """Collect every violation in one pass; nothing short-circuits.

    The double occupancy rule is skipped when the room's minimum adults is
    above 2, since that composition cannot exist.
    """
    issues = _check_any_active(table)
    if min_adults_threshold <= 2:
        issues.extend(_check_double_occupancy(table))
    issues.extend(_check_negative_overrides(table))

    if issues:
        logger.info(
            "Combination table rejected | entries=%s | issues=%s",
            len(table),
            [issue.code for issue in issues],
        )
    return ValidationResult(issues=issues)
