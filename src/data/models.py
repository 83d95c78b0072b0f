"""
Domain records for deals expanded into consultant workload.
"""
from dataclasses import dataclass
from datetime import date
from typing import Literal, Tuple, get_args


Role = Literal["Lead", "Co-Lead", "Strategic Advisor", "Supporting"]

# expansion order
ROLES: Tuple[str, ...] = get_args(Role)


@dataclass(frozen=True)
class Assignment:
    """One consultant's role on one deal.

    Dates stay as the raw strings from the export; they are parsed where
    they are compared so a bad value only affects that assignment.
    """
    project_name: str
    role: Role
    start_date: str
    end_date: str
    business_line: str
    deal_stage: str


@dataclass(frozen=True)
class ProjectDetail:
    """Tooltip line for an active project in a month."""
    name: str
    role: Role
    business_line: str


@dataclass(frozen=True)
class MonthBucket:
    """Projected load for one calendar month."""
    month: str
    month_start: date
    project_count: int
    weighted_load: float
    capacity: float
    details: Tuple[ProjectDetail, ...] = ()


@dataclass(frozen=True)
class Consultant:
    """Consultant with projects, full assignment list and 12-month timeline."""
    name: str
    projects: Tuple[Assignment, ...]
    assignments: Tuple[Assignment, ...]
    timeline: Tuple[MonthBucket, ...]
    current_load: int
    internal_work_pct: float = 0.0

    @property
    def current_weighted_load(self) -> float:
        return self.timeline[0].weighted_load if self.timeline else 0.0

    @property
    def business_lines(self) -> Tuple[str, ...]:
        return tuple(dict.fromkeys(p.business_line for p in self.projects if p.business_line))


@dataclass(frozen=True)
class DedupeResult:
    """Outcome of collapsing assignments to one per project name."""
    kept: Tuple[Assignment, ...] = ()
    dropped: Tuple[Assignment, ...] = ()
