"""
Dashboard state: an immutable state object, a pure reducer, and the thin
Streamlit session shell that holds the current state between reruns.
"""
import logging
import streamlit as st
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from src.data.loader import CsvParseError, DealSource, load_deals
from src.data.models import Consultant
from src.metrics.consultants import ProcessingError, build_consultants, with_internal_work
from src.metrics.filters import DashboardFilters, apply_filters
from src.metrics.load import UnmappedKeys, group_unmapped
from src.metrics.timeline import DateLike


logger = logging.getLogger(__name__)


# =============================================================================
# STATE
# =============================================================================

@dataclass(frozen=True)
class DashboardState:
    """Everything the dashboard renders from. Replaced, never mutated."""
    consultants: Tuple[Consultant, ...] = ()
    filters: DashboardFilters = field(default_factory=DashboardFilters)
    remove_pipeline_work: bool = False
    internal_work: Mapping[str, float] = field(default_factory=dict)
    upload_generation: int = 0
    is_loading: bool = False
    error: Optional[str] = None
    expanded_consultant: Optional[str] = None
    source_name: Optional[str] = None
    # kind -> unrecognised keys scored as 0 in the loaded dataset
    unmapped: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def has_data(self) -> bool:
        return len(self.consultants) > 0

    def internal_work_for(self, name: str) -> float:
        return float(self.internal_work.get(name, 0.0))


# =============================================================================
# ACTIONS
# =============================================================================

@dataclass(frozen=True)
class UploadStarted:
    source_name: Optional[str] = None


@dataclass(frozen=True)
class UploadSucceeded:
    generation: int
    consultants: Tuple[Consultant, ...]
    source_name: Optional[str] = None
    unmapped: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)


@dataclass(frozen=True)
class UploadFailed:
    generation: int
    message: str


@dataclass(frozen=True)
class FiltersChanged:
    filters: DashboardFilters


@dataclass(frozen=True)
class PipelineWorkToggled:
    enabled: bool


@dataclass(frozen=True)
class InternalWorkChanged:
    name: str
    pct: float
    reference: Optional[Union[date, datetime]] = None


@dataclass(frozen=True)
class ConsultantToggled:
    name: str


@dataclass(frozen=True)
class ResetFilters:
    pass


Action = Union[
    UploadStarted, UploadSucceeded, UploadFailed, FiltersChanged,
    PipelineWorkToggled, InternalWorkChanged, ConsultantToggled, ResetFilters,
]


# =============================================================================
# REDUCER
# =============================================================================

def _is_stale(state: DashboardState, generation: int) -> bool:
    if generation != state.upload_generation:
        logger.info("Discarding result of upload %d (current is %d)", generation, state.upload_generation)
        return True
    return False


def reduce(state: DashboardState, action: Action) -> DashboardState:
    """Return the state that follows from applying an action."""
    if isinstance(action, UploadStarted):
        return replace(
            state,
            upload_generation=state.upload_generation + 1,
            is_loading=True,
            error=None,
        )

    if isinstance(action, UploadSucceeded):
        if _is_stale(state, action.generation):
            return state
        names = {c.name for c in action.consultants}
        expanded = state.expanded_consultant if state.expanded_consultant in names else None
        return replace(
            state,
            consultants=tuple(action.consultants),
            is_loading=False,
            error=None,
            expanded_consultant=expanded,
            source_name=action.source_name,
            unmapped=dict(action.unmapped),
        )

    if isinstance(action, UploadFailed):
        if _is_stale(state, action.generation):
            return state
        return replace(state, is_loading=False, error=action.message)

    if isinstance(action, FiltersChanged):
        return replace(state, filters=action.filters)

    if isinstance(action, PipelineWorkToggled):
        return replace(state, remove_pipeline_work=bool(action.enabled))

    if isinstance(action, InternalWorkChanged):
        if not (0 <= action.pct <= 100):
            raise ValueError(f"internal work percentage must be in [0, 100], got {action.pct}")
        internal_work = {**state.internal_work, action.name: float(action.pct)}
        consultants = tuple(
            with_internal_work(c, action.pct, action.reference) if c.name == action.name else c
            for c in state.consultants
        )
        return replace(state, internal_work=internal_work, consultants=consultants)

    if isinstance(action, ConsultantToggled):
        expanded = None if state.expanded_consultant == action.name else action.name
        return replace(state, expanded_consultant=expanded)

    if isinstance(action, ResetFilters):
        return replace(state, filters=DashboardFilters(), remove_pipeline_work=False)

    raise TypeError(f"unsupported action {type(action).__name__}")


# =============================================================================
# PIPELINE
# =============================================================================

def process_upload(state: DashboardState,
                   source: DealSource,
                   source_name: Optional[str] = None,
                   reference: Optional[DateLike] = None) -> DashboardState:
    """
    Run one upload through parse and build, returning the resulting state.

    A failed upload leaves the previously loaded consultants in place.
    """
    state = reduce(state, UploadStarted(source_name))
    generation = state.upload_generation
    try:
        deals = load_deals(source)
    except CsvParseError as exc:
        logger.info("Upload %s failed to parse: %s", source_name, exc)
        return reduce(state, UploadFailed(generation, f"Error parsing CSV: {exc}"))

    unmapped: UnmappedKeys = set()
    try:
        consultants = build_consultants(deals, state.internal_work, reference, unmapped)
    except ProcessingError as exc:
        logger.info("Upload %s failed to process: %s", source_name, exc)
        return reduce(state, UploadFailed(generation, f"Error processing data: {exc}"))

    return reduce(
        state,
        UploadSucceeded(generation, tuple(consultants), source_name, group_unmapped(unmapped)),
    )


def visible_consultants(state: DashboardState,
                        reference: Optional[DateLike] = None) -> Sequence[Consultant]:
    """Filtered view of the loaded consultants; recomputed on every call."""
    return apply_filters(state.consultants, state.filters, state.remove_pipeline_work, reference)


# =============================================================================
# SESSION SHELL
# =============================================================================

STATE_KEY = "dashboard_state"

DEFAULTS = {
    "last_upload_key": None,
}


def init_state():
    """Initialize all session state keys with defaults."""
    if STATE_KEY not in st.session_state:
        st.session_state[STATE_KEY] = DashboardState()
    for key, default in DEFAULTS.items():
        if key not in st.session_state:
            st.session_state[key] = default


def get_state(key: str) -> Any:
    """Get state value with default fallback."""
    init_state()
    return st.session_state.get(key, DEFAULTS.get(key))


def set_state(key: str, value: Any):
    """Set state value."""
    st.session_state[key] = value


def get_dashboard_state() -> DashboardState:
    init_state()
    return st.session_state[STATE_KEY]


def set_dashboard_state(state: DashboardState):
    st.session_state[STATE_KEY] = state


def dispatch(action: Action) -> DashboardState:
    """Apply an action to the session's dashboard state."""
    state = reduce(get_dashboard_state(), action)
    set_dashboard_state(state)
    return state
