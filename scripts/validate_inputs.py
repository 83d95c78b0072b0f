#!/usr/bin/env python
"""
Validate a deal export before uploading it to the dashboard.

Usage:
    python scripts/validate_inputs.py deals.csv
    python scripts/validate_inputs.py deals.csv --json
"""
import argparse
import json
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pandas as pd
from src.config import configure_logging, ROLE_WEIGHTS, STAGE_WEIGHTS, COL_START_DATE, COL_END_DATE, COL_DEAL_STAGE
from src.data.expansion import expand_assignments
from src.data.loader import CsvParseError, get_deal_status, load_deals
from src.data.schema import get_column_info, validate_schema
from src.metrics.load import score_frame
from src.metrics.timeline import parse_contract_date


def _unparseable(values: pd.Series) -> list:
    bad = [v for v in values.unique() if str(v).strip() and parse_contract_date(v) is None]
    return sorted(str(v) for v in bad)


def validate_file(filepath: Path) -> dict:
    """Validate a single deal export."""
    result = {
        "exists": filepath.exists(),
        "rows": 0,
        "columns": 0,
        "valid": False,
        "missing_required": [],
        "missing_optional": [],
        "missing_role_columns": [],
        "duplicate_columns": [],
        "deals": 0,
        "consultants": 0,
        "assignments": 0,
        "zero_weight_assignments": 0,
        "unknown_roles": [],
        "unknown_stages": [],
        "unparseable_dates": [],
        "errors": [],
    }

    if not result["exists"]:
        result["errors"].append(f"File not found: {filepath}")
        return result

    try:
        df = load_deals(filepath)
    except CsvParseError as e:
        result["errors"].append(f"Failed to parse: {e}")
        return result

    result["rows"] = len(df)
    result["deals"] = get_deal_status(df)["deals"]
    result["columns"] = len(df.columns)

    schema_result = validate_schema(df, "deals", strict=False)
    result["valid"] = schema_result["is_valid"]
    result["missing_required"] = schema_result["missing_required"]
    result["missing_optional"] = schema_result["missing_optional"]
    result["missing_role_columns"] = schema_result["missing_role_columns"]
    result["duplicate_columns"] = schema_result["duplicate_columns"]
    if not result["valid"]:
        return result

    assignments = expand_assignments(df)
    result["assignments"] = len(assignments)
    result["consultants"] = int(assignments["consultant"].nunique())
    result["zero_weight_assignments"] = int((score_frame(assignments) == 0).sum())
    result["unknown_roles"] = sorted(set(assignments["role"]) - set(ROLE_WEIGHTS))
    result["unknown_stages"] = sorted(set(df[COL_DEAL_STAGE]) - set(STAGE_WEIGHTS))
    result["unparseable_dates"] = sorted(
        set(_unparseable(df[COL_START_DATE])) | set(_unparseable(df[COL_END_DATE]))
    )
    return result


def print_report(filepath: Path, result: dict):
    print("=" * 60)
    print("Deal Export Validation")
    print("=" * 60)
    print(f"File: {filepath}")
    print()

    for err in result["errors"]:
        print(f"  ✗ Error: {err}")
    if result["errors"]:
        return

    print(f"  Rows: {result['rows']:,}")
    print(f"  Columns: {result['columns']}")

    if result["valid"]:
        print("  ✓ Schema valid")
    else:
        print("  ✗ Schema invalid")
        print(f"    Missing required: {result['missing_required']}")
        return

    if result["missing_role_columns"]:
        print(f"  ⚠ Role columns missing (read as empty): {result['missing_role_columns']}")
    if result["missing_optional"]:
        print(f"  ⚠ Missing optional: {result['missing_optional']}")
    if result["duplicate_columns"]:
        print(f"  ⚠ Repeated headers (first copy is used): {result['duplicate_columns']}")

    print(f"  Deals: {result['deals']:,}")
    print(f"  Consultants: {result['consultants']:,}")
    print(f"  Assignments: {result['assignments']:,}")
    if result["zero_weight_assignments"]:
        print(f"  ⚠ Assignments with zero load: {result['zero_weight_assignments']:,}")

    if result["unknown_stages"]:
        print(f"  ⚠ Stages scored as 0: {result['unknown_stages']}")
    if result["unknown_roles"]:
        print(f"  ⚠ Roles scored as 0: {result['unknown_roles']}")
    if result["unparseable_dates"]:
        print(f"  ⚠ Dates excluded from the timeline: {result['unparseable_dates']}")


def main():
    parser = argparse.ArgumentParser(description="Validate a deal export CSV")
    parser.add_argument("path", type=str, help="Path to the deal export")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--columns", action="store_true", help="Print a per-column summary")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")

    args = parser.parse_args()
    configure_logging(args.log_level or "WARNING")

    filepath = Path(args.path)
    result = validate_file(filepath)

    if args.json:
        print(json.dumps(result, indent=2, default=str))
    else:
        print_report(filepath, result)
        if args.columns and result["rows"]:
            print()
            print(get_column_info(load_deals(filepath)).to_string(index=False))
        print()
        print("=" * 60)

    ok = result["valid"] and not result["errors"]
    if not args.json:
        print("✓ Validation passed" if ok else "✗ Validation failed - see errors above")
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
