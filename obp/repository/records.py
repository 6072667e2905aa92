"""Translation between persisted pricing records and domain objects.

Tables, occupancy blocks and age-group catalogs arrive from the owning store
as plain camelCase documents (multiplier map keys are strings there). This
layer validates them with pydantic and hands typed, frozen domain objects to
the services. It performs no I/O.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from obp.domain.constraints import normalize_occupancy_config, validate_occupancy_config
from obp.domain.models import (
    ROUNDING_NONE,
    ROUNDING_RULES,
    AgeGroup,
    ChildSlot,
    CombinationEntry,
    MultiplierTemplate,
    OccupancyConfig,
)
from obp.services.combination_service import build_key
from obp.utils.logger import get_logger


logger = get_logger(__name__)


class RecordValidationError(Exception):
    """Raised when a persisted pricing record cannot be turned into a domain object."""


class _CamelRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ChildSlotRecord(_CamelRecord):
    order: int = Field(ge=1)
    age_group: str = Field(alias="ageGroup", min_length=1)


class CombinationEntryRecord(_CamelRecord):
    key: str = Field(min_length=1)
    adults: int = Field(ge=1)
    children: list[ChildSlotRecord] = Field(default_factory=list)
    calculated_multiplier: float = Field(alias="calculatedMultiplier")
    # Negative multipliers are accepted here so the table validator can report them.
    override_multiplier: Optional[float] = Field(default=None, alias="overrideMultiplier")
    is_active: bool = Field(default=True, alias="isActive")

    @field_validator("children")
    @classmethod
    def validate_unique_orders(cls, value: list[ChildSlotRecord]) -> list[ChildSlotRecord]:
        orders = [child.order for child in value]
        if len(orders) != len(set(orders)):
            raise ValueError("children must have unique order values")
        return value

    @model_validator(mode="after")
    def validate_key_matches_composition(self) -> "CombinationEntryRecord":
        expected = build_key(
            self.adults,
            [ChildSlot(order=child.order, age_group=child.age_group) for child in self.children],
        )
        if self.key != expected:
            raise ValueError(f"key '{self.key}' does not match composition '{expected}'")
        return self

    def to_domain(self) -> CombinationEntry:
        return CombinationEntry(
            key=self.key,
            adults=self.adults,
            children=tuple(
                ChildSlot(order=child.order, age_group=child.age_group)
                for child in sorted(self.children, key=lambda child: child.order)
            ),
            calculated_multiplier=self.calculated_multiplier,
            override_multiplier=self.override_multiplier,
            is_active=self.is_active,
        )


class OccupancyRecord(_CamelRecord):
    min_adults: int = Field(default=1, alias="minAdults")
    max_adults: int = Field(default=2, alias="maxAdults")
    max_children: int = Field(default=2, alias="maxChildren")
    total_max_guests: int = Field(default=4, alias="totalMaxGuests")
    base_occupancy: int = Field(default=2, alias="baseOccupancy")


class AgeGroupRecord(_CamelRecord):
    code: str = Field(min_length=1)
    name: dict[str, str] = Field(default_factory=dict)
    min_age: Optional[int] = Field(default=None, alias="minAge", ge=0)
    max_age: Optional[int] = Field(default=None, alias="maxAge", ge=0)

    @field_validator("max_age")
    @classmethod
    def validate_age_range(cls, value: Optional[int], info: ValidationInfo) -> Optional[int]:
        min_age = info.data.get("min_age")
        if value is not None and min_age is not None and value < min_age:
            raise ValueError("maxAge must be >= minAge")
        return value


class MultiplierTemplateRecord(_CamelRecord):
    adult_multipliers: dict[int, float] = Field(default_factory=dict, alias="adultMultipliers")
    child_multipliers: dict[int, dict[str, float]] = Field(
        default_factory=dict,
        alias="childMultipliers",
    )
    combination_table: list[CombinationEntryRecord] = Field(
        default_factory=list,
        alias="combinationTable",
    )
    rounding_rule: str = Field(default=ROUNDING_NONE, alias="roundingRule")

    @field_validator("rounding_rule", mode="before")
    @classmethod
    def default_empty_rounding_rule(cls, value: Any) -> Any:
        return value or ROUNDING_NONE


def _validate(model: type[BaseModel], raw: Mapping[str, Any], label: str) -> Any:
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise RecordValidationError(f"Invalid {label} record: {exc}") from exc


def table_from_records(records: Iterable[Mapping[str, Any]]) -> list[CombinationEntry]:
    return [
        _validate(CombinationEntryRecord, record, "combination").to_domain()
        for record in records
    ]


def table_to_records(table: Sequence[CombinationEntry]) -> list[dict[str, Any]]:
    records: list[dict[str, Any]] = []
    for entry in table:
        raw = {
            "key": entry.key,
            "adults": entry.adults,
            "children": [
                {"order": child.order, "ageGroup": child.age_group}
                for child in entry.children
            ],
            "calculatedMultiplier": entry.calculated_multiplier,
            "overrideMultiplier": entry.override_multiplier,
            "isActive": entry.is_active,
        }
        records.append(_validate(CombinationEntryRecord, raw, "combination").model_dump(by_alias=True))
    return records


def occupancy_from_record(raw: Mapping[str, Any]) -> OccupancyConfig:
    record = _validate(OccupancyRecord, raw, "occupancy")
    config = normalize_occupancy_config(
        OccupancyConfig(
            min_adults=record.min_adults,
            max_adults=record.max_adults,
            max_children=record.max_children,
            total_max_guests=record.total_max_guests,
            base_occupancy=record.base_occupancy,
        )
    )
    try:
        validate_occupancy_config(config)
    except ValueError as exc:
        raise RecordValidationError(f"Invalid occupancy record: {exc}") from exc
    return config


def age_groups_from_records(records: Iterable[Mapping[str, Any]]) -> list[AgeGroup]:
    age_groups: list[AgeGroup] = []
    seen_codes: set[str] = set()
    for raw in records:
        record = _validate(AgeGroupRecord, raw, "age group")
        if record.code in seen_codes:
            raise RecordValidationError(f"Duplicate age group code '{record.code}'")
        seen_codes.add(record.code)
        age_groups.append(
            AgeGroup(
                code=record.code,
                name=dict(record.name),
                min_age=record.min_age,
                max_age=record.max_age,
            )
        )
    return age_groups


def template_from_record(raw: Mapping[str, Any]) -> MultiplierTemplate:
    record = _validate(MultiplierTemplateRecord, raw, "multiplier template")
    if record.rounding_rule not in ROUNDING_RULES:
        logger.warning(
            "Unknown rounding rule on template, prices stay unrounded | rounding_rule=%s",
            record.rounding_rule,
        )
    return MultiplierTemplate(
        adult_multipliers=dict(record.adult_multipliers),
        child_multipliers={order: dict(codes) for order, codes in record.child_multipliers.items()},
        combination_table=tuple(entry.to_domain() for entry in record.combination_table),
        rounding_rule=record.rounding_rule,
    )
