"""
Tests for deal export column checks.
"""
import pytest
import pandas as pd
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.data.schema import (
    validate_required_columns,
    check_optional_columns,
    duplicate_columns,
    validate_schema,
    get_column_info,
    SchemaValidationError
)
from src.config import REQUIRED_COLUMNS, ROLE_COLUMNS


def full_deal_frame() -> pd.DataFrame:
    return pd.DataFrame({col: ["x"] for col in REQUIRED_COLUMNS["deals"] + list(ROLE_COLUMNS)})


class TestValidateRequiredColumns:

    def test_all_columns_present(self):
        is_valid, missing = validate_required_columns(full_deal_frame(), "deals")

        assert is_valid is True
        assert missing == []

    def test_missing_columns_in_declaration_order(self):
        df = pd.DataFrame({"Deal Name": ["Acme"], "Project Lead": ["Alice"]})

        is_valid, missing = validate_required_columns(df, "deals")

        assert is_valid is False
        assert missing[0] == "Contract Start Date"
        assert missing[-1] == "Deal Stage"
        assert "Project Supporting Consultants" not in missing
        assert "Deal Name" not in missing

    def test_unknown_table_has_no_requirements(self):
        is_valid, missing = validate_required_columns(pd.DataFrame({"any_col": [1]}), "unknown_table")

        assert is_valid is True
        assert missing == []


class TestValidateSchema:

    def test_strict_mode_names_missing_columns(self):
        df = pd.DataFrame({"Deal Name": ["Acme"]})

        with pytest.raises(SchemaValidationError, match="Contract Start Date, Contract End Date"):
            validate_schema(df, "deals", strict=True)

    def test_non_strict_returns_result(self):
        df = pd.DataFrame({"Deal Name": ["Acme"]})

        result = validate_schema(df, "deals", strict=False)

        assert result["is_valid"] is False
        assert len(result["missing_required"]) == len(REQUIRED_COLUMNS["deals"]) - 1
        assert result["total_rows"] == 1
        assert result["total_columns"] == 1

    def test_role_columns_reported_separately(self):
        df = full_deal_frame().drop(columns=["Project Co-Lead", "Deal Stage"])

        result = validate_schema(df, strict=False)

        assert result["missing_role_columns"] == ["Project Co-Lead"]
        assert result["missing_required"] == ["Deal Stage"]

    def test_missing_role_column_passes_strict(self):
        df = full_deal_frame().drop(columns=["Project Strategic Advisors"])

        result = validate_schema(df, "deals", strict=True)

        assert result["is_valid"] is True
        assert result["missing_role_columns"] == ["Project Strategic Advisors"]

    def test_valid_frame_passes_strict(self):
        result = validate_schema(full_deal_frame(), "deals", strict=True)

        assert result["is_valid"] is True
        assert "Deal Owner" in result["missing_optional"]


def test_optional_columns_unknown_table():
    assert check_optional_columns(pd.DataFrame({"col": [1]}), "unknown") == []


def test_duplicate_headers_detected():
    df = pd.DataFrame({"Deal Name": ["a"], "Deal Name.1": ["b"], "Version 2.0": ["c"]})

    assert duplicate_columns(df) == ["Deal Name"]


def test_column_info_counts_blank_strings():
    df = pd.DataFrame({"Project Lead": ["Alice", "", "  "]})

    row = get_column_info(df).iloc[0]

    assert row["column"] == "Project Lead"
    assert row["non_blank"] == 1
    assert row["blank_pct"] == "66.7%"
