#!/usr/bin/env python3
"""Validate local OBP engine environment readiness."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from obp.repository.records import age_groups_from_records, occupancy_from_record
from obp.services.combination_service import generate_table
from obp.services.report_service import build_price_grid
from obp.services.validation_service import validate_table
from obp.utils.config import get_settings

SEPARATOR_LINE = "=" * 44

SMOKE_OCCUPANCY = {
    "minAdults": 1,
    "maxAdults": 3,
    "maxChildren": 2,
    "totalMaxGuests": 4,
    "baseOccupancy": 2,
}
SMOKE_AGE_GROUPS = [
    {"code": "infant", "name": {"tr": "Bebek", "en": "Infant"}, "minAge": 0, "maxAge": 2},
    {"code": "child", "name": {"tr": "Çocuk", "en": "Child"}, "minAge": 3, "maxAge": 11},
]


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable with versions
    package_specs = [
        ("pydantic", "pydantic"),
        ("pandas", "pandas"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    from importlib.metadata import version

    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            _ = version(dist_name)
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3: Table generation (17 combinations for the smoke room)
    table = []
    try:
        occupancy = occupancy_from_record(SMOKE_OCCUPANCY)
        age_groups = age_groups_from_records(SMOKE_AGE_GROUPS)
        table = generate_table(occupancy, age_groups)
        if len(table) != 17:
            raise RuntimeError(f"expected 17 combinations, got {len(table)}")
        ok, line = _print_result("Combination table: 17 entries", True)
    except Exception as exc:
        ok, line = _print_result("Combination table", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 4: Table validation
    try:
        validation = validate_table(table)
        if not validation.is_valid:
            raise RuntimeError("; ".join(validation.errors))
        ok, line = _print_result("Table validation", True)
    except Exception as exc:
        ok, line = _print_result("Table validation", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 5: Price grid
    try:
        grid = build_price_grid(table, base_price=100.0, rounding_rule="nearest", locale="en")
        double_price = float(grid.loc[grid["key"] == "2", "price"].item())
        if double_price != 100.0:
            raise RuntimeError(f"double occupancy priced at {double_price}, expected 100.0")
        ok, line = _print_result("Price grid", True, f": {len(grid)} rows")
    except Exception as exc:
        ok, line = _print_result("Price grid", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    settings = get_settings()
    print(f" {settings.app_name} v{settings.app_version}: Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
