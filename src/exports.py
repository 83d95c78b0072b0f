"""
Export utilities for the filtered consultant view.
"""
import pandas as pd
from typing import Optional, Sequence
from datetime import datetime

from src.data.models import Consultant
from src.metrics.timeline import timeline_frame


def export_dataframe_csv(df: pd.DataFrame, filename: Optional[str] = None) -> tuple:
    """
    Export dataframe to CSV bytes.

    Returns: (csv_bytes, filename)
    """
    if filename is None:
        filename = f"export_{datetime.now().strftime('%Y%m%d_%H%M%S')}.csv"

    csv_bytes = df.to_csv(index=False).encode('utf-8')

    return csv_bytes, filename


def timeline_export_frame(consultants: Sequence[Consultant]) -> pd.DataFrame:
    """Long table: one row per consultant per month."""
    columns = [
        "Consultant", "Month", "Label", "Projects", "Weighted Load",
        "Capacity", "Internal Work %", "Active Projects",
    ]
    frames = []
    for c in consultants:
        df = timeline_frame(c.timeline)
        frames.append(pd.DataFrame({
            "Consultant": c.name,
            "Month": df["month_start"].dt.strftime("%Y-%m-%d"),
            "Label": df["month"],
            "Projects": df["projects"],
            "Weighted Load": df["weighted_load"],
            "Capacity": df["capacity"],
            "Internal Work %": c.internal_work_pct,
            "Active Projects": df["details"].map(
                lambda details: "; ".join(f"{d['name']} ({d['role']})" for d in details)
            ),
        }))
    if not frames:
        return pd.DataFrame(columns=columns)
    return pd.concat(frames, ignore_index=True)[columns]


def projects_export_frame(consultants: Sequence[Consultant]) -> pd.DataFrame:
    """One row per consultant per distinct project in the view."""
    rows = []
    for c in consultants:
        for p in c.projects:
            rows.append({
                "Consultant": c.name,
                "Deal Name": p.project_name,
                "Role": p.role,
                "Business Line": p.business_line,
                "Deal Stage": p.deal_stage,
                "Contract Start Date": p.start_date,
                "Contract End Date": p.end_date,
            })
    return pd.DataFrame(rows, columns=[
        "Consultant", "Deal Name", "Role", "Business Line", "Deal Stage",
        "Contract Start Date", "Contract End Date",
    ])


def export_timeline_csv(consultants: Sequence[Consultant]) -> tuple:
    """
    Export the consultant timelines to CSV.

    Returns: (csv_bytes, filename)
    """
    filename = f"capacity_timeline_{datetime.now().strftime('%Y%m%d')}.csv"
    return export_dataframe_csv(timeline_export_frame(consultants), filename)


def export_projects_csv(consultants: Sequence[Consultant]) -> tuple:
    """
    Export the consultant project lists to CSV.

    Returns: (csv_bytes, filename)
    """
    filename = f"consultant_projects_{datetime.now().strftime('%Y%m%d')}.csv"
    return export_dataframe_csv(projects_export_frame(consultants), filename)
