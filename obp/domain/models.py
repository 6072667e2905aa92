"""Domain models for occupancy-based pricing."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


ROUNDING_NONE = "none"
ROUNDING_NEAREST = "nearest"
ROUNDING_UP = "up"
ROUNDING_DOWN = "down"
ROUNDING_NEAREST_5 = "nearest5"
ROUNDING_NEAREST_10 = "nearest10"

ROUNDING_RULES = (
    ROUNDING_NONE,
    ROUNDING_NEAREST,
    ROUNDING_UP,
    ROUNDING_DOWN,
    ROUNDING_NEAREST_5,
    ROUNDING_NEAREST_10,
)

PRICING_TYPE_UNIT = "unit"
PRICING_TYPE_PER_PERSON = "per_person"

AdultMultiplierMap = dict[int, float]
ChildMultiplierMap = dict[int, dict[str, float]]


@dataclass(frozen=True)
class OccupancyConfig:
    min_adults: int
    max_adults: int
    max_children: int
    total_max_guests: int
    base_occupancy: int


@dataclass(frozen=True)
class AgeGroup:
    code: str
    name: dict[str, str] = field(default_factory=dict)
    min_age: Optional[int] = None
    max_age: Optional[int] = None

    def covers_age(self, age: int) -> bool:
        if self.min_age is None or self.max_age is None:
            return False
        return self.min_age <= age <= self.max_age


@dataclass(frozen=True)
class ChildSlot:
    order: int
    age_group: str


@dataclass(frozen=True)
class CombinationEntry:
    key: str
    adults: int
    children: tuple[ChildSlot, ...]
    calculated_multiplier: float
    override_multiplier: Optional[float] = None
    is_active: bool = True

    @property
    def child_count(self) -> int:
        return len(self.children)


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str
    key: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    issues: list[ValidationIssue]

    @property
    def is_valid(self) -> bool:
        return not self.issues

    @property
    def errors(self) -> list[str]:
        return [issue.message for issue in self.issues]

    def to_api_dict(self) -> dict[str, bool | list[str]]:
        return {"isValid": self.is_valid, "errors": self.errors}


@dataclass(frozen=True)
class MultiplierTemplate:
    adult_multipliers: AdultMultiplierMap = field(default_factory=dict)
    child_multipliers: ChildMultiplierMap = field(default_factory=dict)
    combination_table: tuple[CombinationEntry, ...] = ()
    rounding_rule: str = ROUNDING_NONE


@dataclass(frozen=True)
class QuoteChild:
    """A child as it arrives on a booking request, before slot resolution."""

    age: Optional[int] = None
    age_group: Optional[str] = None


@dataclass(frozen=True)
class PriceBreakdownLine:
    type: str
    description: str
    amount: float


@dataclass(frozen=True)
class OccupancyQuote:
    combination_key: str
    base_price: float
    multiplier: Optional[float]
    rounding_rule: str
    price: Optional[float]
    is_available: bool
    error: Optional[str] = None
    breakdown: tuple[PriceBreakdownLine, ...] = ()

    def to_api_dict(self) -> dict[str, object]:
        return {
            "combinationKey": self.combination_key,
            "basePrice": self.base_price,
            "multiplier": self.multiplier,
            "roundingRule": self.rounding_rule,
            "price": self.price,
            "isAvailable": self.is_available,
            "error": self.error,
            "breakdown": [
                {"type": line.type, "description": line.description, "amount": line.amount}
                for line in self.breakdown
            ],
        }
