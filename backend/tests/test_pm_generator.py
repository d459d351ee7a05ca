"""
Tests for PM work order generation
"""
import pytest

from conftest import FakeRemote
from models.generation import GenerationContext
from models.maintenance import Asset, Priority, ScopeFilters, Status, WorkType
from services.pm_generator import GenerationError, build_tasks, generate, infer_asset

PLAN_M = "PMT-CTC-SYS013-EQ006"
PLAN_Q = "PMT-CTC-SYS013-EQ006-Q"
PLAN_C2 = "PMT-C2-SYS030-EQ011"


@pytest.mark.asyncio
async def test_tasks_fan_out_in_step_order(snapshot, remote):
    result = await generate([PLAN_M], GenerationContext(), snapshot, remote)

    assert len(result.work_orders) == 1
    wo = result.work_orders[0]
    assert wo.id == "R1"
    assert wo.number == "WO-2026-00001"
    assert [t.description for t in result.tasks] == [
        "Inspect fuel lines", "Check oil level", "Run load test"]
    assert [t.id for t in result.tasks] == ["WOT-R1-0", "WOT-R1-1", "WOT-R1-2"]
    assert all(t.work_order_id == "R1" for t in result.tasks)
    assert all(t.is_completed is False for t in result.tasks)


@pytest.mark.asyncio
async def test_persist_sends_canonical_record(snapshot, remote):
    await generate([PLAN_M], GenerationContext(), snapshot, remote)

    draft = remote.created[0]
    assert draft.id.startswith("WO-GEN-")
    saved_wo, saved_tasks, parts = remote.persisted[0]
    assert saved_wo.id == "R1"
    assert saved_wo.number == "WO-2026-00001"
    assert len(saved_tasks) == 3
    assert parts == []


@pytest.mark.asyncio
async def test_plan_without_steps_skips_persist(snapshot, remote):
    result = await generate([PLAN_C2], GenerationContext(), snapshot, remote)

    assert len(result.work_orders) == 1
    assert result.tasks == []
    assert remote.persisted == []


@pytest.mark.asyncio
async def test_draft_fields(snapshot, remote):
    context = GenerationContext(scanned_code="PMT-CTC", priority=Priority.HIGH,
                                filters=ScopeFilters(location_id="L9"))

    result = await generate([PLAN_Q], context, snapshot, remote)

    wo = result.work_orders[0]
    assert wo.work_type == WorkType.PM.value
    assert wo.status == Status.OPEN.value
    assert wo.priority == Priority.HIGH.value
    assert wo.title == "Generator quarterly PM"
    assert wo.description == "Generated from scan: PMT-CTC"
    assert wo.plan_id == PLAN_Q
    assert wo.company_id == "C1"
    assert wo.system_id == "SYS013"
    assert wo.equipment_type_id == "EQ006"
    assert wo.location_id == "L9"
    assert wo.asset_id == "TBD"
    assert wo.estimated_hours == 4
    assert wo.requested_by_user_id == "System"
    assert result.navigate_to_asset_id is None


@pytest.mark.asyncio
async def test_defaults_to_medium_priority_and_plan_remarks(snapshot, remote):
    result = await generate([PLAN_M], GenerationContext(), snapshot, remote)

    wo = result.work_orders[0]
    assert wo.priority == Priority.MEDIUM.value
    assert wo.description == "Monthly generator check"
    assert wo.estimated_hours == 2


@pytest.mark.asyncio
async def test_scanned_asset_scopes_every_work_order(snapshot, remote):
    asset = snapshot.assets[1]
    context = GenerationContext(asset=asset)

    result = await generate([PLAN_M, PLAN_Q], context, snapshot, remote)

    assert [wo.asset_id for wo in result.work_orders] == ["AST-0002", "AST-0002"]
    assert all(wo.location_id == "L2" for wo in result.work_orders)
    assert result.navigate_to_asset_id == "AST-0002"


@pytest.mark.asyncio
async def test_asset_inferred_from_location(snapshot, remote):
    context = GenerationContext(filters=ScopeFilters(location_id="L1"))

    result = await generate([PLAN_M, PLAN_Q], context, snapshot, remote)

    assert [wo.asset_id for wo in result.work_orders] == ["AST-0001", "AST-0001"]
    assert result.navigate_to_asset_id == "AST-0001"


def test_inference_requires_exactly_one_candidate(snapshot):
    snapshot.assets.append(Asset(id="AST-0009", asset_tag="LAK-GEN-009", name="Generator 9",
                                 company_id="C1", location_id="L1", system_id="SYS013",
                                 equipment_type_id="EQ006"))
    context = GenerationContext(filters=ScopeFilters(location_id="L1"))

    assert infer_asset([PLAN_M], context, snapshot) is None


def test_inference_with_no_candidate(snapshot):
    context = GenerationContext(filters=ScopeFilters(location_id="L3"))

    assert infer_asset([PLAN_M], context, snapshot) is None


def test_inference_needs_location(snapshot):
    assert infer_asset([PLAN_M], GenerationContext(), snapshot) is None


@pytest.mark.asyncio
async def test_ambiguous_location_leaves_whole_batch_unassigned(snapshot, remote):
    snapshot.assets.append(Asset(id="AST-0009", asset_tag="LAK-GEN-009", name="Generator 9",
                                 company_id="C1", location_id="L1", system_id="SYS013",
                                 equipment_type_id="EQ006"))
    context = GenerationContext(filters=ScopeFilters(location_id="L1"))

    result = await generate([PLAN_M, PLAN_Q], context, snapshot, remote)

    assert [wo.asset_id for wo in result.work_orders] == ["TBD", "TBD"]
    assert all(wo.location_id == "L1" for wo in result.work_orders)


@pytest.mark.asyncio
async def test_second_create_failure_aborts_batch(snapshot):
    remote = FakeRemote(fail_on_create=2)

    with pytest.raises(GenerationError) as exc_info:
        await generate([PLAN_M, PLAN_Q, PLAN_C2], GenerationContext(), snapshot, remote)

    error = exc_info.value
    assert len(remote.created) == 2
    assert [wo.id for wo in error.created_work_orders] == ["R1"]
    assert len(error.created_tasks) == 3
    assert error.failed_plan_id == PLAN_Q
    assert error.failed_index == 1
    assert error.remaining_plan_ids == [PLAN_Q, PLAN_C2]


@pytest.mark.asyncio
async def test_refused_task_save_reports_the_created_work_order(snapshot):
    remote = FakeRemote(persist_ok=False)

    with pytest.raises(GenerationError) as exc_info:
        await generate([PLAN_M, PLAN_Q], GenerationContext(), snapshot, remote)

    error = exc_info.value
    assert len(remote.created) == 1
    assert [wo.id for wo in error.created_work_orders] == ["R1"]
    assert error.unsaved_work_order.id == "R1"
    assert error.created_tasks == []
    assert error.failed_plan_id == PLAN_M
    assert error.remaining_plan_ids == [PLAN_Q]
    assert str(error).startswith("Work order WO-2026-00001 was created for plan")
    assert "Generation failed" not in str(error)


@pytest.mark.asyncio
async def test_task_save_exception_keeps_created_work_order(snapshot):
    class BrokenSaveRemote(FakeRemote):
        async def persist_tasks(self, work_order, tasks, parts=None):
            raise ConnectionError("sheet unreachable")

    remote = BrokenSaveRemote()

    with pytest.raises(GenerationError) as exc_info:
        await generate([PLAN_Q, PLAN_M], GenerationContext(), snapshot, remote)

    error = exc_info.value
    assert [wo.plan_id for wo in error.created_work_orders] == [PLAN_Q]
    assert error.remaining_plan_ids == [PLAN_M]
    assert "sheet unreachable" in str(error)


@pytest.mark.asyncio
async def test_failed_create_has_no_unsaved_work_order(snapshot):
    with pytest.raises(GenerationError) as exc_info:
        await generate([PLAN_M], GenerationContext(), snapshot, FakeRemote(fail_on_create=1))

    assert exc_info.value.unsaved_work_order is None
    assert exc_info.value.remaining_plan_ids == [PLAN_M]


@pytest.mark.asyncio
async def test_unknown_plan_is_skipped(snapshot, remote):
    result = await generate(["NO-SUCH-PLAN", PLAN_C2], GenerationContext(), snapshot, remote)

    assert [wo.plan_id for wo in result.work_orders] == [PLAN_C2]
    assert len(remote.created) == 1


@pytest.mark.asyncio
async def test_empty_selection_is_noop(snapshot, remote):
    result = await generate([], GenerationContext(), snapshot, remote)

    assert result.work_orders == []
    assert remote.created == []


def test_build_tasks_orders_by_step_number(snapshot):
    tasks = build_tasks("WO1", snapshot.plan_steps[:3])

    assert [t.description for t in tasks] == [
        "Inspect fuel lines", "Check oil level", "Run load test"]
