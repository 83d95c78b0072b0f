"""
Standard chart wrappers using Plotly.
"""
import plotly.graph_objects as go
import pandas as pd
from typing import Sequence

from src.config import config
from src.data.models import Consultant, MonthBucket
from src.metrics.timeline import capacity_allowance


# =============================================================================
# CHART THEME
# =============================================================================

CHART_COLORS = {
    "primary": "#1f77b4",
    "load": "#8884d8",
    "capacity": "#82ca9d",
    "success": "#28a745",
    "warning": "#ffc107",
    "danger": "#dc3545",
    "neutral": "#6c757d",
}

CHART_TEMPLATE = "plotly_white"

DEFAULT_LAYOUT = {
    "template": CHART_TEMPLATE,
    "font": {"family": "Arial, sans-serif", "size": 12},
    "margin": {"l": 50, "r": 30, "t": 40, "b": 50},
    "hoverlabel": {"bgcolor": "white"},
}


def apply_layout(fig: go.Figure, **kwargs) -> go.Figure:
    """Apply standard layout to figure."""
    layout = {**DEFAULT_LAYOUT, **kwargs}
    fig.update_layout(**layout)
    return fig


# =============================================================================
# TIMELINE CHARTS
# =============================================================================

def bucket_tooltip(bucket: MonthBucket) -> str:
    """Hover text for one month: load, capacity and the active projects."""
    lines = [
        f"<b>{bucket.month}</b>",
        f"Weighted Load: {bucket.weighted_load}",
        f"Available Capacity: {bucket.capacity}",
        "Active Projects:",
    ]
    if bucket.details:
        lines.extend(f"{d.name} ({d.role})" for d in bucket.details)
    else:
        lines.append("none")
    return "<br>".join(lines)


def capacity_timeline_chart(consultant: Consultant,
                            title: str = "12-Month Capacity Timeline") -> go.Figure:
    """
    Dual bar chart of weighted load and available capacity per month.

    A dashed line marks the load allowance after internal work.
    """
    months = [b.month for b in consultant.timeline]
    hover = [bucket_tooltip(b) for b in consultant.timeline]

    fig = go.Figure()

    fig.add_trace(go.Bar(
        name="Project Load",
        x=months,
        y=[b.weighted_load for b in consultant.timeline],
        marker_color=CHART_COLORS["load"],
        hovertext=hover,
        hovertemplate="%{hovertext}<extra></extra>",
    ))

    fig.add_trace(go.Bar(
        name="Available Capacity",
        x=months,
        y=[b.capacity for b in consultant.timeline],
        marker_color=CHART_COLORS["capacity"],
        hovertext=hover,
        hovertemplate="%{hovertext}<extra></extra>",
    ))

    allowance = capacity_allowance(consultant.internal_work_pct)
    fig.add_hline(
        y=allowance,
        line_dash="dash",
        line_color=CHART_COLORS["neutral"],
        annotation_text=f"Allowance: {allowance:,.1f}",
    )

    fig.update_layout(
        barmode="group",
        title=title,
        yaxis_title="Weighted load",
        legend={"orientation": "h", "y": -0.2},
    )

    return apply_layout(fig, height=320)


def team_load_matrix(consultants: Sequence[Consultant]) -> pd.DataFrame:
    """Consultant x month matrix of weighted load."""
    if not consultants:
        return pd.DataFrame()
    data = {
        c.name: {b.month: b.weighted_load for b in c.timeline}
        for c in consultants
    }
    months = [b.month for b in consultants[0].timeline]
    return pd.DataFrame.from_dict(data, orient="index")[months]


def team_load_heatmap(consultants: Sequence[Consultant],
                      title: str = "Team Load by Month") -> go.Figure:
    """
    Heatmap of weighted load for every consultant in the view.

    The colour scale is centred on the recommended maximum so green reads
    as headroom and red as overload.
    """
    matrix = team_load_matrix(consultants)
    max_load = config.max_recommended_load

    fig = go.Figure(data=go.Heatmap(
        z=matrix.values,
        x=list(matrix.columns),
        y=list(matrix.index),
        colorscale="RdYlGn_r",
        zmin=0,
        zmax=max_load * 2,
        hovertemplate="Consultant: %{y}<br>Month: %{x}<br>Load: %{z:.1f}<extra></extra>",
    ))

    fig.update_layout(
        title=title,
        yaxis={"autorange": "reversed"},
        height=max(300, 28 * len(matrix.index) + 120),
    )

    return apply_layout(fig)
