"""
Layout components: header, upload, sidebar filters, consultant cards.
"""
import streamlit as st
from typing import Optional

from src.config import (
    config,
    TIMEFRAME_OPTIONS,
    CAPACITY_STATUS_OPTIONS,
    CAPACITY_FILTER_BASES,
    INTERNAL_WORK_STEP,
)
from src.data.models import Consultant
from src.metrics.consultants import business_lines
from src.metrics.filters import DashboardFilters, capacity_status_of
from src.metrics.timeline import capacity_allowance
from src.ui.charts import capacity_timeline_chart
from src.ui.formatting import fmt_load, fmt_count, fmt_percent, active_projects_label, status_dot
from src.ui.state import (
    DashboardState, dispatch, get_dashboard_state,
    FiltersChanged, PipelineWorkToggled, InternalWorkChanged, ConsultantToggled, ResetFilters,
)
from src.ui.tables import render_projects_table


FILTER_WIDGET_KEYS = (
    "filter_business_line",
    "filter_timeframe",
    "filter_capacity_status",
    "filter_search",
    "filter_remove_pipeline",
    "filter_capacity_basis",
)


# =============================================================================
# HEADER AND UPLOAD
# =============================================================================

def render_header(state: DashboardState):
    """Render app header with the loaded file name."""
    col1, col2 = st.columns([3, 1])

    with col1:
        st.title("Consultant Capacity")

    with col2:
        if state.source_name:
            st.caption(f"Source: {state.source_name}")


def render_upload():
    """Render the CSV uploader and return the uploaded file, if any."""
    return st.file_uploader(
        "Upload Hubspot CSV",
        type=["csv"],
        accept_multiple_files=False,
        key="deal_upload",
        help="Deal export with contract dates, deal stage and the four project role columns.",
    )


def render_status_banners(state: DashboardState):
    """Error, loading and unrecognised-value banners."""
    if state.error:
        st.error(state.error)
    if state.is_loading:
        st.info("Loading data, please wait...")
    if state.has_data:
        for kind, keys in state.unmapped.items():
            info_box(
                f"Unrecognised {kind} values",
                f"{', '.join(keys)} scored as 0 load.",
                type="warning",
            )


# =============================================================================
# SIDEBAR FILTERS
# =============================================================================

def _reset_filter_widgets():
    # Widgets re-read their value from the reset state on the next run
    for key in FILTER_WIDGET_KEYS:
        st.session_state.pop(key, None)
    dispatch(ResetFilters())


def render_sidebar_filters(state: DashboardState):
    """Render sidebar filters and push changes into the dashboard state."""
    st.sidebar.header("Filters")

    remove_pipeline = st.sidebar.checkbox(
        "Remove Pipeline Work",
        value=state.remove_pipeline_work,
        key="filter_remove_pipeline",
        help="Only keep Closed Won deals in the project lists.",
    )

    line_options = ["all"] + business_lines(state.consultants)
    current_line = state.filters.business_line if state.filters.business_line in line_options else "all"
    business_line = st.sidebar.selectbox(
        "Business Line",
        options=line_options,
        format_func=lambda x: "All" if x == "all" else x,
        index=line_options.index(current_line),
        key="filter_business_line",
    )

    timeframe_keys = list(TIMEFRAME_OPTIONS.keys())
    current_timeframe = str(state.filters.timeframe)
    timeframe = st.sidebar.selectbox(
        "Timeframe",
        options=timeframe_keys,
        format_func=lambda x: TIMEFRAME_OPTIONS[x],
        index=timeframe_keys.index(current_timeframe) if current_timeframe in timeframe_keys else 0,
        key="filter_timeframe",
    )

    status_keys = list(CAPACITY_STATUS_OPTIONS.keys())
    capacity_status = st.sidebar.selectbox(
        "Capacity Status",
        options=status_keys,
        format_func=lambda x: CAPACITY_STATUS_OPTIONS[x],
        index=status_keys.index(state.filters.capacity_status),
        key="filter_capacity_status",
    )

    search = st.sidebar.text_input(
        "Search Consultants",
        value=state.filters.consultant_search,
        key="filter_search",
    )

    st.sidebar.divider()

    basis = st.sidebar.radio(
        "Capacity status reads",
        options=list(CAPACITY_FILTER_BASES),
        format_func=lambda x: "Full workload" if x == "baseline" else "Filtered projects",
        index=list(CAPACITY_FILTER_BASES).index(state.filters.capacity_filter_basis),
        key="filter_capacity_basis",
    )

    st.sidebar.button("Reset filters", on_click=_reset_filter_widgets, key="filter_reset")

    filters = DashboardFilters(
        business_line=business_line,
        timeframe=timeframe,
        capacity_status=capacity_status,
        consultant_search=search,
        capacity_filter_basis=basis,
    )
    if filters != state.filters:
        dispatch(FiltersChanged(filters))
    if remove_pipeline != state.remove_pipeline_work:
        dispatch(PipelineWorkToggled(remove_pipeline))


def render_filter_chips(state: DashboardState):
    """Render active filter chips."""
    if state.filters.is_default and not state.remove_pipeline_work:
        return
    filters = []

    if state.remove_pipeline_work:
        filters.append("Closed Won only")
    if state.filters.business_line != "all":
        filters.append(f"Business line: {state.filters.business_line}")
    if state.filters.timeframe != "all":
        filters.append(TIMEFRAME_OPTIONS.get(str(state.filters.timeframe), str(state.filters.timeframe)))
    if state.filters.capacity_status != "all":
        filters.append(CAPACITY_STATUS_OPTIONS[state.filters.capacity_status])
    if state.filters.consultant_search:
        filters.append(f"Search: {state.filters.consultant_search}")

    if filters:
        chips = " | ".join([f"`{f}`" for f in filters])
        st.caption(f"Filters: {chips}")


# =============================================================================
# KPI CARDS
# =============================================================================

def render_kpi_strip(summary: dict):
    """Render headline numbers for the current view."""
    if not summary:
        return
    cols = st.columns(4)
    cols[0].metric("Consultants", fmt_count(summary["consultants"]))
    cols[1].metric("Active Assignments", fmt_count(summary["active_assignments"]))
    cols[2].metric("Avg Load (this month)", fmt_load(summary["avg_load"]))
    cols[3].metric("Max Load (this month)", fmt_load(summary["max_load"]))


# =============================================================================
# CONSULTANT CARDS
# =============================================================================

def _on_internal_work_change(name: str, key: str):
    dispatch(InternalWorkChanged(name=name, pct=st.session_state[key]))


def render_consultant_card(consultant: Consultant, expanded: bool):
    """Render one consultant row, with chart and projects when expanded."""
    with st.container(border=True):
        status = capacity_status_of(consultant.current_weighted_load)
        col1, col2 = st.columns([6, 1])
        with col1:
            st.markdown(
                f"{status_dot(status)} **{consultant.name}** &nbsp; "
                f"{active_projects_label(consultant.current_load, config.max_recommended_load)} &nbsp; "
                f"Load {fmt_load(consultant.current_weighted_load)}",
                unsafe_allow_html=True,
            )
        with col2:
            st.button(
                "▲ Hide" if expanded else "▼ Show",
                key=f"toggle_{consultant.name}",
                on_click=dispatch,
                args=(ConsultantToggled(consultant.name),),
            )

        if not expanded:
            return

        # Slider shows the stored adjustment, not the filtered view's copy
        state = get_dashboard_state()
        slider_key = f"internal_work_{consultant.name}"
        st.slider(
            "Internal Work Adjustment",
            min_value=0,
            max_value=100,
            step=INTERNAL_WORK_STEP,
            value=int(state.internal_work_for(consultant.name)),
            format="%d%%",
            key=slider_key,
            on_change=_on_internal_work_change,
            args=(consultant.name, slider_key),
        )
        if consultant.internal_work_pct:
            st.caption(
                f"{fmt_percent(consultant.internal_work_pct)} internal work: capacity allowance "
                f"{fmt_load(capacity_allowance(consultant.internal_work_pct))}"
            )

        st.plotly_chart(
            capacity_timeline_chart(consultant),
            use_container_width=True,
            key=f"timeline_{consultant.name}",
        )

        st.markdown("**Current Projects**")
        render_projects_table(consultant, key=f"projects_{consultant.name}")


# =============================================================================
# SECTION HEADERS
# =============================================================================

def section_header(title: str, description: Optional[str] = None):
    """Render section header with optional description."""
    st.subheader(title)
    if description:
        st.caption(description)


def info_box(title: str, content: str, type: str = "info"):
    """Render info/warning/error box."""
    if type == "info":
        st.info(f"**{title}**: {content}")
    elif type == "warning":
        st.warning(f"**{title}**: {content}")
    elif type == "error":
        st.error(f"**{title}**: {content}")
    elif type == "success":
        st.success(f"**{title}**: {content}")
