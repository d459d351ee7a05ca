"""
Tests for scan code resolution
"""
import pytest

from models.maintenance import (
    Asset, EntitySnapshot, MaintenancePlan, ScopeFilters, WorkOrder,
)
from models.resolution import AssetMatch, NotFound, PlanSelection, WorkOrderMatch
from services.code_resolver import resolve


def test_work_order_number_any_case(snapshot):
    outcome = resolve("  wo-2026-0001 ", ScopeFilters(), snapshot)

    assert isinstance(outcome, WorkOrderMatch)
    assert outcome.work_order.id == "101"
    assert outcome.dismiss_scanner is True


def test_work_order_id_exact(snapshot):
    outcome = resolve("101", None, snapshot)

    assert isinstance(outcome, WorkOrderMatch)
    assert outcome.work_order.number == "WO-2026-0001"


def test_work_order_beats_plan_substring():
    """A code that is both a work order number and part of a plan id opens the work order"""
    snap = EntitySnapshot(
        work_orders=[WorkOrder(id="9", number="PMT-001")],
        plans=[MaintenancePlan(id="PMT-001-SYS-EQ")],
    )

    outcome = resolve("PMT-001", ScopeFilters(), snap)

    assert isinstance(outcome, WorkOrderMatch)
    assert outcome.work_order.id == "9"


def test_work_order_outside_company_filter_is_skipped(snapshot):
    outcome = resolve("WO-2026-0001", ScopeFilters(company_id="C2"), snapshot)

    assert isinstance(outcome, NotFound)


def test_plan_code_matches_all_containing_plans(snapshot):
    outcome = resolve("PMT-CTC-SYS013-EQ006", ScopeFilters(), snapshot)

    assert isinstance(outcome, PlanSelection)
    assert [p.id for p in outcome.plans] == [
        "PMT-CTC-SYS013-EQ006", "PMT-CTC-SYS013-EQ006-Q"]
    assert outcome.asset is None
    assert outcome.asset_source == "linked"
    assert outcome.dismiss_scanner is True


@pytest.mark.parametrize("code", ["pmt-c2-sys030", "PMT-C2-SYS030-EQ011-UNIT7"])
def test_plan_match_is_bidirectional(snapshot, code):
    """Shorter partial codes and longer suffixed codes both find the plan"""
    outcome = resolve(code, ScopeFilters(), snapshot)

    assert isinstance(outcome, PlanSelection)
    assert [p.id for p in outcome.plans] == ["PMT-C2-SYS030-EQ011"]


def test_plan_match_links_asset_tag_inside_code(snapshot):
    outcome = resolve("PMT-CTC-SYS013-EQ006-LAK-GEN-001", ScopeFilters(), snapshot)

    assert isinstance(outcome, PlanSelection)
    assert [p.id for p in outcome.plans] == ["PMT-CTC-SYS013-EQ006"]
    assert outcome.asset is not None
    assert outcome.asset.id == "AST-0001"
    assert outcome.asset_source == "linked"


def test_company_filter_excludes_other_company_plans():
    snap = EntitySnapshot(plans=[
        MaintenancePlan(id="PMT-X-1-A", company_id="C1"),
        MaintenancePlan(id="PMT-X-1-B", company_id="C2"),
    ])

    outcome = resolve("PMT-X-1", ScopeFilters(company_id="C1"), snap)

    assert isinstance(outcome, PlanSelection)
    assert [p.id for p in outcome.plans] == ["PMT-X-1-A"]


def test_asset_tag_joins_applicable_plans(snapshot):
    outcome = resolve("lak-gen-001", ScopeFilters(), snapshot)

    assert isinstance(outcome, PlanSelection)
    assert outcome.asset.id == "AST-0001"
    assert outcome.asset_source == "scanned"
    assert [p.id for p in outcome.plans] == [
        "PMT-CTC-SYS013-EQ006", "PMT-CTC-SYS013-EQ006-Q"]


def test_asset_without_plans_resolves_to_asset(snapshot):
    outcome = resolve("BKK-CHL-001", ScopeFilters(), snapshot)

    assert isinstance(outcome, AssetMatch)
    assert outcome.asset.id == "AST-0003"
    assert outcome.dismiss_scanner is True


def test_asset_name_contains_code(snapshot):
    outcome = resolve("chill", ScopeFilters(), snapshot)

    assert isinstance(outcome, AssetMatch)
    assert outcome.asset.name == "Chiller"


def test_asset_id_is_exact_case():
    snap = EntitySnapshot(assets=[Asset(id="ast-9", asset_tag="TAG9", name="Fan")])

    assert isinstance(resolve("ast-9", ScopeFilters(), snap), AssetMatch)
    assert isinstance(resolve("AST-9", ScopeFilters(), snap), NotFound)


def test_asset_location_filter(snapshot):
    outcome = resolve("LAK-PMP-002", ScopeFilters(location_id="L1"), snapshot)

    assert isinstance(outcome, NotFound)

    outcome = resolve("LAK-PMP-002", ScopeFilters(location_id="L2"), snapshot)

    assert isinstance(outcome, PlanSelection)
    assert outcome.asset.id == "AST-0002"


def test_numeric_looking_ids_compare_as_strings():
    snap = EntitySnapshot(work_orders=[WorkOrder(id="007", number="")])

    assert isinstance(resolve("007", ScopeFilters(), snap), WorkOrderMatch)
    assert isinstance(resolve("7", ScopeFilters(), snap), NotFound)


@pytest.mark.parametrize("code", ["", "   "])
def test_empty_code_is_not_found(snapshot, code):
    outcome = resolve(code, ScopeFilters(), snapshot)

    assert isinstance(outcome, NotFound)
    assert outcome.dismiss_scanner is False


def test_unknown_code_keeps_scanner_open(snapshot):
    outcome = resolve("ZZZ-404", ScopeFilters(), snapshot)

    assert isinstance(outcome, NotFound)
    assert outcome.dismiss_scanner is False
    assert "ZZZ-404" in outcome.message
