"""
Consistent number and display formatting.
"""
import pandas as pd
from typing import Union

from src.config import FORMAT_LOAD, FORMAT_PERCENT, FORMAT_COUNT


# =============================================================================
# NUMBER FORMATTERS
# =============================================================================

def fmt_load(value: Union[float, int, None]) -> str:
    """Format weighted load: 1,234.5"""
    if value is None or pd.isna(value):
        return "—"
    return FORMAT_LOAD.format(value)


def fmt_percent(value: Union[float, int, None]) -> str:
    """Format percentage: 35%"""
    if value is None or pd.isna(value):
        return "—"
    return FORMAT_PERCENT.format(value)


def fmt_count(value: Union[float, int, None]) -> str:
    """Format count: 1,234"""
    if value is None or pd.isna(value):
        return "—"
    return FORMAT_COUNT.format(int(value))


def fmt_date_range(start: str, end: str) -> str:
    """Contract dates as typed in the export."""
    start = start or "?"
    end = end or "?"
    return f"{start} - {end}"


# =============================================================================
# BADGES
# =============================================================================

STATUS_COLORS = {
    "available": "#28a745",
    "at-capacity": "#ffc107",
    "over-capacity": "#dc3545",
    "neutral": "#6c757d",
}

ROLE_BADGES = {
    "Lead": "🟢",
    "Co-Lead": "🔵",
    "Strategic Advisor": "🟡",
}


def status_dot(status: str) -> str:
    """
    Return colored status dot HTML.

    Args:
        status: 'available', 'at-capacity', 'over-capacity' or anything else
    """
    color = STATUS_COLORS.get(status.lower(), STATUS_COLORS["neutral"])
    return f'<span style="color: {color}; font-size: 1.2em;">●</span>'


def role_badge(role: str) -> str:
    """Emoji marker for a role; Supporting and unknown roles are grey."""
    return f"{ROLE_BADGES.get(role, '⚪')} {role}"


def active_projects_label(count: int, max_load: float) -> str:
    """Header label for a consultant, red when at or over the maximum."""
    marker = "🔴" if count >= max_load else "🟢"
    return f"{marker} {fmt_count(count)} Active Projects"
