"""
Role expansion: deal rows into per-consultant assignments.

A deal names its team in four semicolon-delimited role columns. Each name
in each column becomes one Assignment tagged with that column's role.
"""
from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Tuple

import pandas as pd

from src.config import (
    ROLE_COLUMNS,
    COL_DEAL_NAME,
    COL_START_DATE,
    COL_END_DATE,
    COL_BUSINESS_LINE,
    COL_DEAL_STAGE,
)
from src.data.models import Assignment


ASSIGNMENT_COLUMNS = [
    "consultant",
    "project_name",
    "role",
    "start_date",
    "end_date",
    "business_line",
    "deal_stage",
]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return str(value).strip() == ""


def _text(value: Any) -> str:
    """Cell value as text; missing cells become ""."""
    return "" if _is_blank(value) else str(value)


def split_consultants(value: Any) -> List[str]:
    """Split a role cell on ';', trimming names and dropping empty entries."""
    if _is_blank(value):
        return []
    return [part.strip() for part in str(value).split(";") if part.strip()]


def expand_deal(deal: Mapping[str, Any]) -> List[Tuple[str, Assignment]]:
    """
    Expand one deal into (consultant name, Assignment) pairs.

    Order is role-column order (Lead, Co-Lead, Strategic Advisor,
    Supporting) and then name order within the cell. Missing role columns
    count as empty.
    """
    pairs = []
    for column, role in ROLE_COLUMNS.items():
        for name in split_consultants(deal.get(column)):
            assignment = Assignment(
                project_name=_text(deal.get(COL_DEAL_NAME)),
                role=role,
                start_date=_text(deal.get(COL_START_DATE)),
                end_date=_text(deal.get(COL_END_DATE)),
                business_line=_text(deal.get(COL_BUSINESS_LINE)),
                deal_stage=_text(deal.get(COL_DEAL_STAGE)),
            )
            pairs.append((name, assignment))
    return pairs


def group_by_consultant(deals: pd.DataFrame) -> Dict[str, List[Assignment]]:
    """
    Map consultant name -> assignments, in first-appearance order.

    Names are matched exactly (case-sensitive).
    """
    grouped: Dict[str, List[Assignment]] = {}
    for deal in deals.to_dict("records"):
        for name, assignment in expand_deal(deal):
            grouped.setdefault(name, []).append(assignment)
    return grouped


def expand_assignments(deals: pd.DataFrame) -> pd.DataFrame:
    """Flat table with one row per (deal, role column, name)."""
    rows = []
    for deal in deals.to_dict("records"):
        for name, assignment in expand_deal(deal):
            rows.append({"consultant": name, **asdict(assignment)})
    return pd.DataFrame(rows, columns=ASSIGNMENT_COLUMNS)
