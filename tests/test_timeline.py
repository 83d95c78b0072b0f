"""
Tests for the monthly load timeline.
"""
from datetime import date

import pandas as pd
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.data.models import Assignment
from src.metrics.timeline import (
    month_starts,
    parse_contract_date,
    is_active_on,
    project_timeline,
    capacity_allowance,
    round_half_up,
    timeline_frame,
)

REFERENCE = pd.Timestamp("2026-10-19 10:00")


def make_assignment(project: str = "Acme", role: str = "Lead", stage: str = "Closed Won",
                    start: str = "2026-10-01", end: str = "2026-12-01",
                    line: str = "Strategy") -> Assignment:
    return Assignment(
        project_name=project,
        role=role,
        start_date=start,
        end_date=end,
        business_line=line,
        deal_stage=stage,
    )


class TestMonthStarts:

    def test_twelve_months_from_current(self):
        months = month_starts(REFERENCE)

        assert len(months) == 12
        assert months[0] == pd.Timestamp("2026-10-01")
        assert months[-1] == pd.Timestamp("2027-09-01")

    def test_strictly_increasing_by_one_month(self):
        months = month_starts(REFERENCE)

        for prev, nxt in zip(months, months[1:]):
            assert nxt == prev + pd.DateOffset(months=1)
            assert nxt.day == 1

    def test_first_of_month_reference(self):
        assert month_starts(date(2026, 1, 1), months=2) == [
            pd.Timestamp("2026-01-01"),
            pd.Timestamp("2026-02-01"),
        ]


class TestParseContractDate:

    def test_iso_and_us_formats(self):
        assert parse_contract_date("2026-10-15") == pd.Timestamp("2026-10-15")
        assert parse_contract_date("10/15/2026") == pd.Timestamp("2026-10-15")

    def test_unparseable_is_none(self):
        assert parse_contract_date("TBD") is None
        assert parse_contract_date("") is None
        assert parse_contract_date(None) is None

    def test_relative_keywords_are_not_dates(self):
        assert parse_contract_date("today") is None
        assert parse_contract_date("now") is None
        assert parse_contract_date(" Today ") is None
        assert parse_contract_date("Oct 15 2026") == pd.Timestamp("2026-10-15")


class TestIsActiveOn:

    def test_inclusive_bounds(self):
        a = make_assignment(start="2026-10-01", end="2026-11-01")

        assert is_active_on(a, pd.Timestamp("2026-10-01"))
        assert is_active_on(a, pd.Timestamp("2026-11-01"))
        assert not is_active_on(a, pd.Timestamp("2026-12-01"))

    def test_bad_date_never_active(self):
        assert not is_active_on(make_assignment(start="soon"), pd.Timestamp("2026-11-01"))
        assert not is_active_on(make_assignment(end=""), pd.Timestamp("2026-11-01"))

    def test_today_keyword_never_active(self):
        a = make_assignment(start="2026-01-01", end="today")

        assert not is_active_on(a, pd.Timestamp.now())
        assert not is_active_on(a, pd.Timestamp("2026-06-01"))


class TestRoundHalfUp:

    def test_halves_round_up(self):
        assert round_half_up(0.95) == 1.0
        assert round_half_up(0.25) == 0.3
        assert round_half_up(2.45) == 2.5

    def test_other_values(self):
        assert round_half_up(0.24) == 0.2
        assert round_half_up(7.0) == 7.0
        assert round_half_up(0.1 + 0.2) == 0.3


class TestProjectTimeline:

    def test_always_twelve_buckets(self):
        assert len(project_timeline([], reference=REFERENCE)) == 12

    def test_follow_on_scenario(self):
        """Acme-Follow On, Lead, Closed Won: 0.95 rounds half-up to 1.0."""
        a = make_assignment("Acme-Follow On", start="2026-10-01", end="2026-12-01")

        timeline = project_timeline([a], reference=REFERENCE)

        assert timeline[0].weighted_load == 1.0
        assert timeline[0].month == "Oct 26"
        assert timeline[0].month_start == date(2026, 10, 1)
        assert [b.project_count for b in timeline[:4]] == [1, 1, 1, 0]

    def test_deal_ending_on_second_counts_that_month(self):
        a = make_assignment(start="2026-09-15", end="2026-11-02")

        timeline = project_timeline([a], reference=REFERENCE)

        assert [b.project_count for b in timeline[:3]] == [1, 1, 0]

    def test_start_after_first_of_month_excluded(self):
        a = make_assignment(start="2026-10-02", end="2026-12-31")

        timeline = project_timeline([a], reference=REFERENCE)

        assert [b.project_count for b in timeline[:3]] == [0, 1, 1]

    def test_unparseable_dates_excluded_everywhere(self):
        a = make_assignment(start="2026-10-01", end="TBD")

        timeline = project_timeline([a], reference=REFERENCE)

        assert all(b.project_count == 0 for b in timeline)
        assert all(b.capacity == 8.0 for b in timeline)

    def test_roles_on_same_deal_both_count(self):
        assignments = [
            make_assignment("Acme", role="Lead"),
            make_assignment("Acme", role="Supporting"),
        ]

        first = project_timeline(assignments, reference=REFERENCE)[0]

        assert first.project_count == 2
        assert first.weighted_load == 1.5
        assert first.capacity == 6.5

    def test_details_in_assignment_order(self):
        assignments = [
            make_assignment("Beta", role="Co-Lead", line="Ops"),
            make_assignment("Acme", role="Lead"),
        ]

        details = project_timeline(assignments, reference=REFERENCE)[0].details

        assert [(d.name, d.role, d.business_line) for d in details] == [
            ("Beta", "Co-Lead", "Ops"),
            ("Acme", "Lead", "Strategy"),
        ]

    def test_capacity_floors_at_zero(self):
        assignments = [make_assignment(f"Deal {i}") for i in range(10)]

        first = project_timeline(assignments, reference=REFERENCE)[0]

        assert first.weighted_load == 10.0
        assert first.capacity == 0.0

    def test_internal_work_discount(self):
        first = project_timeline([make_assignment()], internal_work_pct=50, reference=REFERENCE)[0]

        assert first.capacity == 3.0

    def test_capacity_never_negative_and_monotone(self):
        assignments = [
            make_assignment("Acme", role="Lead"),
            make_assignment("Beta", role="Co-Lead", stage="LOE Under Review"),
            make_assignment("Gamma", role="Supporting", stage="Prospect", end="2027-03-01"),
        ]
        previous = None
        for pct in range(0, 101, 5):
            capacities = [b.capacity for b in project_timeline(assignments, pct, REFERENCE)]
            assert all(c >= 0 for c in capacities)
            if previous is not None:
                assert all(c <= p for c, p in zip(capacities, previous))
            previous = capacities

    def test_internal_work_out_of_range(self):
        with pytest.raises(ValueError):
            project_timeline([], internal_work_pct=120, reference=REFERENCE)
        with pytest.raises(ValueError):
            project_timeline([], internal_work_pct=-5, reference=REFERENCE)


def test_capacity_allowance():
    assert capacity_allowance(0) == 8.0
    assert capacity_allowance(25) == 6.0
    assert capacity_allowance(100) == 0.0


def test_timeline_frame():
    timeline = project_timeline([make_assignment()], reference=REFERENCE)

    df = timeline_frame(timeline)

    assert len(df) == 12
    assert df.loc[0, "weighted_load"] == 1.0
    assert df.loc[0, "details"] == [{"name": "Acme", "role": "Lead", "business_line": "Strategy"}]
    assert df.loc[11, "details"] == []
