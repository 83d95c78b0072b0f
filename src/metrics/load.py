"""
Weighted load metrics pack.

Single source of truth for: role weight, stage weight, follow-on discount,
per-assignment score and aggregate load.
"""
import logging
from functools import lru_cache
from typing import Dict, Iterable, Mapping, Optional, Set, Tuple

import numpy as np
import pandas as pd

from src.config import ROLE_WEIGHTS, STAGE_WEIGHTS, FOLLOW_ON_MARKER, FOLLOW_ON_MULTIPLIER
from src.data.models import Assignment


logger = logging.getLogger(__name__)

# (kind, key) pairs scored as 0, collected per build by the caller
UnmappedKeys = Set[Tuple[str, str]]


@lru_cache(maxsize=1024)
def _warn_unmapped(kind: str, key: str) -> None:
    logger.warning("Unrecognised %s %r scored as 0", kind, key)


def reset_unmapped_warnings() -> None:
    """Let already-reported keys be logged again."""
    _warn_unmapped.cache_clear()


def weight_of(table: Mapping[str, float], key: str, kind: str,
              unmapped: Optional[UnmappedKeys] = None) -> float:
    """
    Look up a weight, treating unmapped keys as 0.

    Unknown keys are logged once per (kind, key) for the process and added
    to the caller's ``unmapped`` collector so the owning session can show
    them.
    """
    if key in table:
        return float(table[key])
    _warn_unmapped(kind, key)
    if unmapped is not None:
        unmapped.add((kind, key))
    return 0.0


def group_unmapped(unmapped: Iterable[Tuple[str, str]]) -> Dict[str, Tuple[str, ...]]:
    """Collected keys grouped by kind, both sorted."""
    grouped: Dict[str, list] = {}
    for kind, key in sorted(unmapped):
        grouped.setdefault(kind, []).append(key)
    return {kind: tuple(keys) for kind, keys in grouped.items()}


def follow_on_multiplier(project_name: str) -> float:
    return FOLLOW_ON_MULTIPLIER if FOLLOW_ON_MARKER in project_name else 1.0


def score_assignment(assignment: Assignment, unmapped: Optional[UnmappedKeys] = None) -> float:
    """
    Weighted load contribution of one assignment.

    role weight * stage weight * follow-on multiplier. Lies in [0, 1] when
    role and stage are recognised; 0 otherwise.
    """
    role_weight = weight_of(ROLE_WEIGHTS, assignment.role, "role", unmapped)
    stage_weight = weight_of(STAGE_WEIGHTS, assignment.deal_stage, "deal stage", unmapped)
    return role_weight * stage_weight * follow_on_multiplier(assignment.project_name)


def weighted_load(assignments: Iterable[Assignment], unmapped: Optional[UnmappedKeys] = None) -> float:
    """Sum of assignment scores at full precision."""
    return sum(score_assignment(a, unmapped) for a in assignments)


def score_frame(assignments: pd.DataFrame, unmapped: Optional[UnmappedKeys] = None) -> pd.Series:
    """
    Vectorised score for an expanded assignment table.

    Expects role, deal_stage and project_name columns.
    """
    if assignments.empty:
        return pd.Series(dtype=float, index=assignments.index)

    for kind, col, table in (("role", "role", ROLE_WEIGHTS), ("deal stage", "deal_stage", STAGE_WEIGHTS)):
        for key in assignments[col].unique():
            weight_of(table, key, kind, unmapped)

    role_weight = assignments["role"].map(ROLE_WEIGHTS).fillna(0.0)
    stage_weight = assignments["deal_stage"].map(STAGE_WEIGHTS).fillna(0.0)
    follow_on = assignments["project_name"].str.contains(FOLLOW_ON_MARKER, regex=False)
    multiplier = np.where(follow_on, FOLLOW_ON_MULTIPLIER, 1.0)
    return (role_weight * stage_weight * multiplier).astype(float)
