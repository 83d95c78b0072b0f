"""
Tests for dashboard filtering.
"""
import pandas as pd
import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.metrics.consultants import build_consultants
from src.metrics.filters import (
    DashboardFilters,
    apply_filters,
    capacity_status_of,
    timeframe_cutoff,
    timeframe_months,
)

REFERENCE = pd.Timestamp("2026-10-19 10:00")


def make_deal(name: str, lead: str = "", supporting: str = "", stage: str = "Closed Won",
              line: str = "Strategy", start: str = "2026-10-01", end: str = "2026-12-01") -> dict:
    return {
        "Deal Name": name,
        "Contract Start Date": start,
        "Contract End Date": end,
        "Primary Business Line": line,
        "Deal Stage": stage,
        "Project Lead": lead,
        "Project Co-Lead": "",
        "Project Strategic Advisors": "",
        "Project Supporting Consultants": supporting,
    }


@pytest.fixture
def consultants():
    deals = pd.DataFrame([
        make_deal("Acme", lead="Alice", line="Strategy", end="2026-12-01"),
        make_deal("Beta", lead="Alice", stage="Prospect", line="Operations", end="2027-08-01"),
        make_deal("Gamma", lead="Bob", line="Operations", end="2027-03-01"),
        make_deal("Delta", supporting="Carol", stage="LOE Requested", line="Strategy", end="TBD"),
    ])
    return build_consultants(deals, reference=REFERENCE)


def names(view):
    return [c.name for c in view]


class TestDashboardFilters:

    def test_defaults(self):
        filters = DashboardFilters()

        assert filters.is_default
        assert filters.capacity_filter_basis == "baseline"

    def test_unknown_capacity_status(self):
        with pytest.raises(ValueError):
            DashboardFilters(capacity_status="busy")

    def test_unknown_basis(self):
        with pytest.raises(ValueError):
            DashboardFilters(capacity_filter_basis="projected")

    def test_bad_timeframe(self):
        with pytest.raises(ValueError):
            DashboardFilters(timeframe="soon")
        with pytest.raises(ValueError):
            DashboardFilters(timeframe=0)

    def test_timeframe_as_string_or_int(self):
        assert timeframe_months("6") == 6
        assert timeframe_months(12) == 12


class TestCapacityStatus:

    @pytest.mark.parametrize("load,expected", [
        (0.0, "available"),
        (6.39, "available"),
        (6.4, "at-capacity"),
        (8.0, "at-capacity"),
        (8.01, "over-capacity"),
    ])
    def test_bands(self, load, expected):
        assert capacity_status_of(load) == expected

    def test_custom_max(self):
        assert capacity_status_of(3.5, max_load=4.0) == "at-capacity"


def test_timeframe_cutoff_uses_calendar_months():
    assert timeframe_cutoff(3, REFERENCE) == pd.Timestamp("2027-01-19 10:00")


class TestApplyFilters:

    def test_default_filters_are_identity(self, consultants):
        view = apply_filters(consultants, DashboardFilters(), reference=REFERENCE)

        assert view == consultants

    def test_source_not_mutated(self, consultants):
        before = [(c.name, c.projects, c.timeline) for c in consultants]

        apply_filters(
            consultants,
            DashboardFilters(business_line="Operations", timeframe="6", consultant_search="a"),
            remove_pipeline_work=True,
            reference=REFERENCE,
        )

        assert [(c.name, c.projects, c.timeline) for c in consultants] == before

    def test_remove_pipeline_keeps_closed_won(self, consultants):
        view = apply_filters(consultants, remove_pipeline_work=True, reference=REFERENCE)
        by_name = {c.name: c for c in view}

        assert [p.project_name for p in by_name["Alice"].projects] == ["Acme"]
        assert by_name["Carol"].projects == ()
        assert set(names(view)) == {"Alice", "Bob", "Carol"}

    def test_business_line_narrows_projects(self, consultants):
        view = apply_filters(consultants, DashboardFilters(business_line="Operations"), reference=REFERENCE)
        by_name = {c.name: c for c in view}

        assert [p.project_name for p in by_name["Alice"].projects] == ["Beta"]
        assert [p.project_name for p in by_name["Bob"].projects] == ["Gamma"]
        assert by_name["Carol"].projects == ()

    def test_timeframe_keeps_projects_ending_by_cutoff(self, consultants):
        view = apply_filters(consultants, DashboardFilters(timeframe="6"), reference=REFERENCE)
        by_name = {c.name: c for c in view}

        assert [p.project_name for p in by_name["Alice"].projects] == ["Acme"]
        assert [p.project_name for p in by_name["Bob"].projects] == ["Gamma"]
        assert by_name["Carol"].projects == ()

    def test_baseline_basis_keeps_upload_timeline(self, consultants):
        view = apply_filters(
            consultants,
            DashboardFilters(business_line="Operations", capacity_filter_basis="baseline"),
            reference=REFERENCE,
        )
        alice = next(c for c in view if c.name == "Alice")
        original = next(c for c in consultants if c.name == "Alice")

        assert alice.timeline == original.timeline

    def test_filtered_basis_rebuilds_timeline(self, consultants):
        view = apply_filters(
            consultants,
            DashboardFilters(business_line="Operations", capacity_filter_basis="filtered"),
            reference=REFERENCE,
        )
        alice = next(c for c in view if c.name == "Alice")

        assert alice.timeline[0].weighted_load == 0.4
        assert alice.timeline[0].details[0].name == "Beta"

    def test_capacity_status_filter(self, consultants):
        view = apply_filters(consultants, DashboardFilters(capacity_status="available"), reference=REFERENCE)

        assert names(view) == names(consultants)

        view = apply_filters(consultants, DashboardFilters(capacity_status="over-capacity"), reference=REFERENCE)

        assert view == []

    def test_search_is_case_insensitive_substring(self, consultants):
        view = apply_filters(consultants, DashboardFilters(consultant_search="AL"), reference=REFERENCE)

        assert names(view) == ["Alice"]

    def test_search_text_not_trimmed(self, consultants):
        view = apply_filters(consultants, DashboardFilters(consultant_search=" bob"), reference=REFERENCE)

        assert view == []

    def test_search_filters_are_a_subset(self, consultants):
        view = apply_filters(consultants, DashboardFilters(consultant_search="o"), reference=REFERENCE)

        assert set(names(view)) <= set(names(consultants))
        assert set(names(view)) == {"Bob", "Carol"}

    def test_order_preserved(self, consultants):
        view = apply_filters(consultants, DashboardFilters(business_line="Strategy"), reference=REFERENCE)

        assert names(view) == names(consultants)
