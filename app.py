"""
Consultant Capacity Dashboard

Main entry point for Streamlit app.
"""
import streamlit as st
from pathlib import Path

# Page config must be first Streamlit command
st.set_page_config(
    page_title="Consultant Capacity",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Add src to path
import sys
sys.path.insert(0, str(Path(__file__).parent))

from src.config import config, configure_logging, REQUIRED_COLUMNS, ROLE_COLUMNS
from src.exports import export_timeline_csv, export_projects_csv
from src.metrics.consultants import consultant_summary
from src.ui.charts import team_load_heatmap
from src.ui.layout import (
    render_header, render_upload, render_status_banners, render_sidebar_filters,
    render_filter_chips, render_kpi_strip, render_consultant_card, section_header,
)
from src.ui.state import (
    init_state, get_state, set_state, get_dashboard_state, set_dashboard_state,
    process_upload, visible_consultants,
)
from src.ui.tables import render_team_summary_table


configure_logging()


def _upload_key(uploaded) -> tuple:
    return (uploaded.name, uploaded.size, getattr(uploaded, "file_id", None))


def handle_upload(uploaded):
    """Run a newly uploaded file through the pipeline once per file."""
    if uploaded is None:
        return
    key = _upload_key(uploaded)
    if key == get_state("last_upload_key"):
        return
    set_state("last_upload_key", key)
    with st.spinner("Loading data, please wait..."):
        state = process_upload(get_dashboard_state(), uploaded.getvalue(), uploaded.name)
    set_dashboard_state(state)


def render_empty_state():
    st.info("Upload a Hubspot deal export to see consultant workload.")
    with st.expander("Expected columns", expanded=False):
        st.markdown("\n".join(f"- `{col}`" for col in REQUIRED_COLUMNS["deals"]))
        st.markdown("\n".join(f"- `{col}`" for col in ROLE_COLUMNS))
        st.caption("Role columns hold semicolon-separated consultant names. A missing role column reads as empty.")


def main():
    """Main app entry point."""

    # Initialize session state
    init_state()

    handle_upload(render_upload())

    render_sidebar_filters(get_dashboard_state())
    if not config.is_prod:
        st.sidebar.caption(f"Environment: {config.app_env}")

    state = get_dashboard_state()
    render_header(state)
    render_status_banners(state)

    if not state.has_data:
        render_empty_state()
        return

    view = visible_consultants(state)

    render_filter_chips(state)
    render_kpi_strip(consultant_summary(view))

    tab_consultants, tab_team, tab_export = st.tabs(["Consultants", "Team Overview", "Export"])

    with tab_consultants:
        if not view:
            st.info("No consultants match the current filters.")
        for consultant in view:
            render_consultant_card(consultant, expanded=state.expanded_consultant == consultant.name)

    with tab_team:
        section_header("Team Load", "Weighted load per consultant per month for the filtered view.")
        if view:
            st.plotly_chart(team_load_heatmap(view), use_container_width=True)
        render_team_summary_table(view)

    with tab_export:
        section_header("Export", "Download the filtered view.")
        timeline_bytes, timeline_name = export_timeline_csv(view)
        st.download_button(
            "Download timeline CSV",
            data=timeline_bytes,
            file_name=timeline_name,
            mime="text/csv",
            key="download_timeline",
        )
        projects_bytes, projects_name = export_projects_csv(view)
        st.download_button(
            "Download projects CSV",
            data=projects_bytes,
            file_name=projects_name,
            mime="text/csv",
            key="download_projects",
        )


if __name__ == "__main__":
    main()
