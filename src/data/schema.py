"""
Column checks for deal exports.

Only column presence is checked here. Cell contents (dates, stages, role
names) are never rejected: bad values are scored or projected as zero
further down the pipeline.
"""
import re
import pandas as pd
from typing import List, Tuple, Dict

from src.config import REQUIRED_COLUMNS, OPTIONAL_COLUMNS, ROLE_COLUMNS


# pandas renames a repeated header "Deal Name" to "Deal Name.1"
_MANGLED_HEADER = re.compile(r"^(?P<base>.+)\.(?P<n>\d+)$")


class SchemaValidationError(Exception):
    """Raised when required columns are missing."""
    pass


def validate_required_columns(df: pd.DataFrame, table_name: str) -> Tuple[bool, List[str]]:
    """Returns (is_valid, missing_columns) in declaration order."""
    present = set(df.columns)
    missing = [col for col in REQUIRED_COLUMNS.get(table_name, []) if col not in present]
    return not missing, missing


def check_optional_columns(df: pd.DataFrame, table_name: str) -> List[str]:
    present = set(df.columns)
    return [col for col in OPTIONAL_COLUMNS.get(table_name, []) if col not in present]


def missing_role_columns(df: pd.DataFrame) -> List[str]:
    """Role columns absent from the file; their roles expand to nobody."""
    present = set(df.columns)
    return [col for col in ROLE_COLUMNS if col not in present]


def duplicate_columns(df: pd.DataFrame) -> List[str]:
    """Headers that appeared more than once in the file."""
    present = set(df.columns)
    dupes = []
    for col in df.columns:
        match = _MANGLED_HEADER.match(str(col))
        if match and match.group("base") in present and match.group("base") not in dupes:
            dupes.append(match.group("base"))
    return dupes


def validate_schema(df: pd.DataFrame, table_name: str = "deals", strict: bool = True) -> Dict:
    """
    Check a deal table has the columns the workload pipeline reads.

    Missing role columns are only reported: a file without them loads
    fine and those roles expand to nobody.

    Raises:
        SchemaValidationError: strict mode and a required column is missing.
    """
    is_valid, missing_required = validate_required_columns(df, table_name)

    result = {
        "is_valid": is_valid,
        "missing_required": missing_required,
        "missing_role_columns": missing_role_columns(df) if table_name == "deals" else [],
        "missing_optional": check_optional_columns(df, table_name),
        "duplicate_columns": duplicate_columns(df),
        "total_columns": len(df.columns),
        "total_rows": len(df),
    }

    if strict and not is_valid:
        raise SchemaValidationError(
            f"Missing required columns in {table_name}: {', '.join(missing_required)}"
        )

    return result


def get_column_info(df: pd.DataFrame) -> pd.DataFrame:
    """Per-column fill summary; blank strings count as empty."""
    rows = []
    for col in df.columns:
        blank = df[col].astype(str).str.strip().eq("")
        rows.append({
            "column": col,
            "non_blank": int((~blank).sum()),
            "blank_pct": f"{blank.mean() * 100:.1f}%" if len(df) else "0.0%",
            "unique": int(df[col].nunique()),
        })
    return pd.DataFrame(rows, columns=["column", "non_blank", "blank_pct", "unique"])
