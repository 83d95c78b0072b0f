"""
Table builders and renderers for the consultant views.
"""
import streamlit as st
import pandas as pd
from typing import Sequence

from src.data.models import Consultant
from src.metrics.filters import capacity_status_of
from src.ui.formatting import fmt_date_range, role_badge


def projects_table(consultant: Consultant) -> pd.DataFrame:
    """One row per distinct project for a consultant."""
    rows = [
        {
            "Project": p.project_name,
            "Role": role_badge(p.role),
            "Business Line": p.business_line,
            "Stage": p.deal_stage,
            "Timeline": fmt_date_range(p.start_date, p.end_date),
        }
        for p in consultant.projects
    ]
    return pd.DataFrame(rows, columns=["Project", "Role", "Business Line", "Stage", "Timeline"])


def team_summary_table(consultants: Sequence[Consultant]) -> pd.DataFrame:
    """Current-month summary for every consultant in the view."""
    rows = []
    for c in consultants:
        first = c.timeline[0] if c.timeline else None
        rows.append({
            "Consultant": c.name,
            "Active Projects": c.current_load,
            "Load": first.weighted_load if first else 0.0,
            "Capacity": first.capacity if first else 0.0,
            "Internal Work %": c.internal_work_pct,
            "Status": capacity_status_of(first.weighted_load if first else 0.0),
        })
    return pd.DataFrame(
        rows,
        columns=["Consultant", "Active Projects", "Load", "Capacity", "Internal Work %", "Status"],
    )


def render_projects_table(consultant: Consultant, key: str = "projects_table"):
    """Render a consultant's projects."""
    df = projects_table(consultant)
    if len(df) == 0:
        st.info("No projects match the current filters.")
        return

    st.dataframe(df, use_container_width=True, hide_index=True, key=key)


def render_team_summary_table(consultants: Sequence[Consultant], key: str = "team_summary_table"):
    """Render the team summary table."""
    df = team_summary_table(consultants)
    if len(df) == 0:
        st.info("No consultants to display.")
        return

    st.dataframe(
        df,
        use_container_width=True,
        hide_index=True,
        column_config={
            "Load": st.column_config.NumberColumn(format="%.1f"),
            "Capacity": st.column_config.NumberColumn(format="%.1f"),
            "Internal Work %": st.column_config.NumberColumn(format="%.0f%%"),
        },
        key=key,
    )
