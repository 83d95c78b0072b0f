"""
Consultant workload builder.

Turns a deal table into the consultant collection the dashboard renders:
grouped assignments, one project row per deal name, current load and the
monthly timeline.
"""
import logging
from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Sequence

import pandas as pd

from src.data.expansion import group_by_consultant
from src.data.models import Assignment, Consultant, DedupeResult
from src.data.schema import validate_schema
from src.metrics.load import UnmappedKeys
from src.metrics.timeline import DateLike, is_active_on, project_timeline


logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Raised when deal rows cannot be turned into consultant workload."""
    pass


def dedupe_projects(assignments: Sequence[Assignment]) -> DedupeResult:
    """
    Keep the first assignment per project name.

    Later assignments on an already seen project (another role on the same
    deal, or a second deal with the same name) are returned as dropped.
    """
    seen = set()
    kept, dropped = [], []
    for assignment in assignments:
        if assignment.project_name in seen:
            dropped.append(assignment)
            continue
        seen.add(assignment.project_name)
        kept.append(assignment)
    return DedupeResult(kept=tuple(kept), dropped=tuple(dropped))


def count_current_load(assignments: Sequence[Assignment],
                       now: Optional[DateLike] = None) -> int:
    """Number of assignments whose contract interval contains now."""
    moment = pd.Timestamp.now() if now is None else pd.Timestamp(now)
    return sum(1 for a in assignments if is_active_on(a, moment))


def build_consultant(name: str,
                     assignments: Sequence[Assignment],
                     internal_work_pct: float = 0.0,
                     reference: Optional[DateLike] = None,
                     unmapped: Optional[UnmappedKeys] = None) -> Consultant:
    deduped = dedupe_projects(assignments)
    if deduped.dropped:
        logger.debug("%s: %d duplicate project rows collapsed", name, len(deduped.dropped))
    return Consultant(
        name=name,
        projects=deduped.kept,
        assignments=tuple(assignments),
        timeline=tuple(project_timeline(assignments, internal_work_pct, reference, unmapped=unmapped)),
        current_load=count_current_load(assignments, reference),
        internal_work_pct=float(internal_work_pct),
    )


def build_consultants(deals: pd.DataFrame,
                      internal_work: Optional[Mapping[str, float]] = None,
                      reference: Optional[DateLike] = None,
                      unmapped: Optional[UnmappedKeys] = None) -> List[Consultant]:
    """
    Build the consultant collection from a deal table.

    Consultants are ordered by current load, highest first; ties keep the
    order in which names first appear in the export.
    Unrecognised roles and stages are added to ``unmapped`` when given;
    a missing role column reads as empty.

    Raises:
        ProcessingError: required columns are missing or any step fails.
    """
    internal_work = internal_work or {}
    try:
        schema = validate_schema(deals, "deals", strict=True)
        if schema["missing_role_columns"]:
            logger.warning("Role columns missing, read as empty: %s", ", ".join(schema["missing_role_columns"]))
        grouped = group_by_consultant(deals)
        consultants = [
            build_consultant(name, assignments, internal_work.get(name, 0.0), reference, unmapped)
            for name, assignments in grouped.items()
        ]
    except Exception as exc:
        raise ProcessingError(str(exc)) from exc

    consultants.sort(key=lambda c: c.current_load, reverse=True)
    logger.info("Built workload for %d consultants from %d deals", len(consultants), len(deals))
    return consultants


def with_internal_work(consultant: Consultant,
                       internal_work_pct: float,
                       reference: Optional[DateLike] = None) -> Consultant:
    """Copy of the consultant with the timeline regenerated for a new internal work share."""
    timeline = project_timeline(consultant.assignments, internal_work_pct, reference)
    return replace(consultant, timeline=tuple(timeline), internal_work_pct=float(internal_work_pct))


def business_lines(consultants: Sequence[Consultant]) -> List[str]:
    """Distinct non-blank business lines across all projects."""
    lines = {p.business_line for c in consultants for p in c.projects if p.business_line}
    return sorted(lines)


def consultant_summary(consultants: Sequence[Consultant]) -> Dict[str, float]:
    """Headline numbers for the KPI strip."""
    if not consultants:
        return {}
    loads = [c.current_weighted_load for c in consultants]
    return {
        "consultants": len(consultants),
        "active_assignments": sum(c.current_load for c in consultants),
        "avg_load": sum(loads) / len(loads),
        "max_load": max(loads),
    }
