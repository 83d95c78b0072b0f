"""
Monthly load timeline.

Projects a consultant's assignments across the current month and the
following months, giving weighted load and remaining capacity per month.
"""
import logging
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence, Union

import pandas as pd

from src.config import config, MONTH_LABEL_FORMAT
from src.data.models import Assignment, MonthBucket, ProjectDetail
from src.metrics.load import UnmappedKeys, weighted_load


logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, pd.Timestamp, str]


def round_half_up(value: float, digits: int = 1) -> float:
    """Round on the decimal representation, halves away from zero (0.95 -> 1.0)."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def _reference_timestamp(reference: Optional[DateLike]) -> pd.Timestamp:
    if reference is None:
        return pd.Timestamp.now()
    return pd.Timestamp(reference)


def month_starts(reference: Optional[DateLike] = None,
                 months: Optional[int] = None) -> List[pd.Timestamp]:
    """First day of the reference month and each following month."""
    months = config.timeline_months if months is None else months
    ref = _reference_timestamp(reference)
    first = ref.normalize().replace(day=1)
    return list(pd.date_range(start=first, periods=months, freq="MS"))


@lru_cache(maxsize=4096)
def _parse_text(text: str) -> Optional[pd.Timestamp]:
    # pandas reads keywords like "today" and "now" as the wall clock
    if not any(ch.isdigit() for ch in text):
        logger.debug("Contract date without digits %r ignored", text)
        return None
    parsed = pd.to_datetime(text, errors="coerce")
    if pd.isna(parsed):
        logger.debug("Unparseable contract date %r ignored", text)
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert(None)
    return parsed


def parse_contract_date(value: object) -> Optional[pd.Timestamp]:
    """Parse a contract date; blanks and unparseable values give None."""
    if value is None:
        return None
    if isinstance(value, (pd.Timestamp, datetime, date)):
        return pd.Timestamp(value)
    text = str(value).strip()
    if not text:
        return None
    return _parse_text(text)


def is_active_on(assignment: Assignment, moment: DateLike) -> bool:
    """True when both dates parse and start <= moment <= end."""
    start = parse_contract_date(assignment.start_date)
    end = parse_contract_date(assignment.end_date)
    if start is None or end is None:
        return False
    moment = pd.Timestamp(moment)
    return start <= moment <= end


def active_assignments(assignments: Iterable[Assignment], moment: DateLike) -> List[Assignment]:
    return [a for a in assignments if is_active_on(a, moment)]


def _validate_internal_work(pct: float) -> float:
    pct = float(pct)
    if not (0 <= pct <= 100):
        raise ValueError(f"internal work percentage must be in [0, 100], got {pct}")
    return pct


def capacity_allowance(internal_work_pct: float = 0.0,
                       max_load: Optional[float] = None) -> float:
    """Load a consultant can carry after internal (non-billable) work."""
    max_load = config.max_recommended_load if max_load is None else max_load
    pct = _validate_internal_work(internal_work_pct)
    return max_load * (1 - pct / 100)


def project_timeline(assignments: Sequence[Assignment],
                     internal_work_pct: float = 0.0,
                     reference: Optional[DateLike] = None,
                     max_load: Optional[float] = None,
                     months: Optional[int] = None,
                     unmapped: Optional[UnmappedKeys] = None) -> List[MonthBucket]:
    """
    Build the monthly load timeline for one consultant.

    Every assignment counts, including several roles on the same deal.
    An assignment is active in a month when its contract interval contains
    the first day of that month, so a deal ending on the 2nd still counts
    for its final month.
    Unrecognised roles and stages are added to ``unmapped`` when given.

    Returns:
        One MonthBucket per month starting at the reference month.
    """
    allowance = capacity_allowance(internal_work_pct, max_load)
    buckets = []
    for month in month_starts(reference, months):
        active = active_assignments(assignments, month)
        load = weighted_load(active, unmapped)
        capacity = max(0.0, allowance - load)
        buckets.append(MonthBucket(
            month=month.strftime(MONTH_LABEL_FORMAT),
            month_start=month.date(),
            project_count=len(active),
            weighted_load=round_half_up(load),
            capacity=round_half_up(capacity),
            details=tuple(
                ProjectDetail(name=a.project_name, role=a.role, business_line=a.business_line)
                for a in active
            ),
        ))
    return buckets


def timeline_frame(timeline: Sequence[MonthBucket]) -> pd.DataFrame:
    """Timeline as a DataFrame for charts and exports."""
    rows = []
    for bucket in timeline:
        rows.append({
            "month": bucket.month,
            "month_start": pd.Timestamp(bucket.month_start),
            "projects": bucket.project_count,
            "weighted_load": bucket.weighted_load,
            "capacity": bucket.capacity,
            "details": [
                {"name": d.name, "role": d.role, "business_line": d.business_line}
                for d in bucket.details
            ],
        })
    return pd.DataFrame(
        rows, columns=["month", "month_start", "projects", "weighted_load", "capacity", "details"]
    )
