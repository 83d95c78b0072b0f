"""
Dashboard filters over the consultant collection.

Filtering is a pure derivation: the source consultants are never changed,
and a fresh view is produced on every call.
"""
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Sequence, Union

import pandas as pd

from src.config import (
    config,
    CLOSED_WON_STAGE,
    CAPACITY_STATUS_OPTIONS,
    CAPACITY_FILTER_BASES,
)
from src.data.models import Assignment, Consultant
from src.metrics.consultants import with_internal_work
from src.metrics.timeline import DateLike, parse_contract_date


AssignmentPredicate = Callable[[Assignment], bool]


@dataclass(frozen=True)
class DashboardFilters:
    """User-selected filters. Defaults select everything."""
    business_line: str = "all"
    timeframe: Union[str, int] = "all"
    capacity_status: str = "all"
    consultant_search: str = ""
    capacity_filter_basis: str = field(default_factory=lambda: config.capacity_filter_basis)

    def __post_init__(self):
        if self.capacity_status not in CAPACITY_STATUS_OPTIONS:
            raise ValueError(f"unknown capacity status '{self.capacity_status}'")
        if self.capacity_filter_basis not in CAPACITY_FILTER_BASES:
            raise ValueError(f"capacity filter basis must be one of {CAPACITY_FILTER_BASES}")
        if self.timeframe != "all":
            timeframe_months(self.timeframe)

    @property
    def is_default(self) -> bool:
        return (
            self.business_line == "all"
            and self.timeframe == "all"
            and self.capacity_status == "all"
            and not self.consultant_search
        )


def timeframe_months(timeframe: Union[str, int]) -> int:
    try:
        months = int(timeframe)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"timeframe must be 'all' or a month count, got {timeframe!r}") from exc
    if months <= 0:
        raise ValueError(f"timeframe must be positive, got {months}")
    return months


def timeframe_cutoff(months: int, reference: Optional[DateLike] = None) -> pd.Timestamp:
    """Now (or the reference moment) plus a number of calendar months."""
    ref = pd.Timestamp.now() if reference is None else pd.Timestamp(reference)
    return ref + pd.DateOffset(months=months)


def capacity_status_of(load: float, max_load: Optional[float] = None) -> str:
    """Classify a weighted load as available, at-capacity or over-capacity."""
    max_load = config.max_recommended_load if max_load is None else max_load
    if load < max_load * config.at_capacity_ratio:
        return "available"
    if load <= max_load:
        return "at-capacity"
    return "over-capacity"


def _project_predicates(filters: DashboardFilters,
                        remove_pipeline_work: bool,
                        reference: Optional[DateLike]) -> List[AssignmentPredicate]:
    """Project-level narrowing steps, in application order."""
    predicates: List[AssignmentPredicate] = []

    if remove_pipeline_work:
        predicates.append(lambda a: a.deal_stage == CLOSED_WON_STAGE)

    if filters.business_line != "all":
        line = filters.business_line
        predicates.append(lambda a: a.business_line == line)

    if filters.timeframe != "all":
        cutoff = timeframe_cutoff(timeframe_months(filters.timeframe), reference)

        def ends_by_cutoff(a: Assignment) -> bool:
            end = parse_contract_date(a.end_date)
            return end is not None and end <= cutoff

        predicates.append(ends_by_cutoff)

    return predicates


def _narrow(consultant: Consultant, predicates: Sequence[AssignmentPredicate]) -> Consultant:
    projects = tuple(consultant.projects)
    assignments = tuple(consultant.assignments)
    for predicate in predicates:
        projects = tuple(p for p in projects if predicate(p))
        assignments = tuple(a for a in assignments if predicate(a))
    return replace(consultant, projects=projects, assignments=assignments)


def apply_filters(consultants: Sequence[Consultant],
                  filters: Optional[DashboardFilters] = None,
                  remove_pipeline_work: bool = False,
                  reference: Optional[DateLike] = None) -> List[Consultant]:
    """
    Derive the filtered consultant view.

    Order:
        1. remove pipeline work (keep Closed Won projects)
        2. business line
        3. timeframe (projects ending within N months)
        4. capacity status, read from the first timeline month
        5. name search (case-insensitive substring)

    Steps 1-3 narrow each consultant's projects; 4 and 5 drop consultants.
    With the "baseline" basis the capacity status is read from the timeline
    built at upload time; with "filtered" the timeline is rebuilt from the
    narrowed assignments and that rebuilt timeline is kept in the view.
    """
    filters = filters or DashboardFilters()
    predicates = _project_predicates(filters, remove_pipeline_work, reference)

    view = list(consultants)
    if predicates:
        view = [_narrow(c, predicates) for c in view]
        if filters.capacity_filter_basis == "filtered":
            view = [with_internal_work(c, c.internal_work_pct, reference) for c in view]

    if filters.capacity_status != "all":
        view = [
            c for c in view
            if capacity_status_of(c.current_weighted_load) == filters.capacity_status
        ]

    if filters.consultant_search:
        needle = filters.consultant_search.lower()
        view = [c for c in view if needle in c.name.lower()]

    return view
