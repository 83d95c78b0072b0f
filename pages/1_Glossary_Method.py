"""
Glossary & Method Page

Definitions and formulas behind the capacity timeline.
"""
import streamlit as st
import pandas as pd
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import (
    config, ROLE_WEIGHTS, STAGE_WEIGHTS, ROLE_COLUMNS,
    FOLLOW_ON_MARKER, FOLLOW_ON_MULTIPLIER,
)
from src.data.models import ROLES
from src.ui.state import init_state
from src.ui.layout import section_header


st.set_page_config(page_title="Glossary & Method", page_icon="📖", layout="wide")

init_state()


def main():
    st.title("Glossary & Method")
    st.caption("How deals become consultant workload")

    # =========================================================================
    # ROLE EXPANSION
    # =========================================================================
    section_header("From Deals to Assignments")

    st.markdown("Each deal row names its team in four role columns:")
    st.dataframe(
        pd.DataFrame({"Column": list(ROLE_COLUMNS), "Role": list(ROLE_COLUMNS.values())}),
        hide_index=True,
        use_container_width=False,
    )
    st.markdown("""
    Names are separated by `;` and trimmed. Every name in every column is one
    **assignment**. A consultant listed twice on a deal (for example Lead and
    Supporting) has two assignments; both count towards load, while the
    project list shows the deal once.
    """)

    st.markdown("---")

    # =========================================================================
    # WEIGHTS
    # =========================================================================
    section_header("Weighted Load")

    st.markdown(f"""
    | Term | Formula |
    |------|---------|
    | **Assignment score** | `role weight × stage weight × follow-on` |
    | **Follow-on** | `{FOLLOW_ON_MULTIPLIER}` when the deal name contains `{FOLLOW_ON_MARKER}`, else `1` |
    | **Weighted load** | `Σ assignment score` over assignments active on the 1st of the month |
    | **Allowance** | `{config.max_recommended_load:g} × (1 − internal work %)` |
    | **Capacity** | `max(0, allowance − weighted load)` |

    Unrecognised roles or stages score `0`. Load and capacity are rounded
    half-up to one decimal place for display.
    """)

    col1, col2 = st.columns(2)
    with col1:
        st.markdown("**Role weights**")
        st.dataframe(
            pd.DataFrame({"Role": list(ROLES), "Weight": [ROLE_WEIGHTS[role] for role in ROLES]}),
            hide_index=True,
        )
    with col2:
        st.markdown("**Stage weights**")
        st.dataframe(
            pd.DataFrame({"Stage": list(STAGE_WEIGHTS), "Weight": list(STAGE_WEIGHTS.values())}),
            hide_index=True,
        )

    st.markdown("---")

    # =========================================================================
    # CAPACITY STATUS
    # =========================================================================
    section_header("Capacity Status")

    threshold = config.at_capacity_threshold
    maximum = config.max_recommended_load
    st.markdown(f"""
    | Status | Current-month weighted load |
    |--------|-----------------------------|
    | Available | `< {threshold:g}` |
    | At capacity | `{threshold:g} – {maximum:g}` |
    | Over capacity | `> {maximum:g}` |

    By default the status reads the full workload built at upload time, so
    narrowing projects by business line or timeframe does not move a
    consultant between statuses. Switch *Capacity status reads* to
    *Filtered projects* to rebuild the timeline from the filtered projects.
    """)


if __name__ == "__main__":
    main()
