"""
Shared fixtures: a small two-company site plus a fake remote system of record
"""
import pytest

from models.generation import CreatedWorkOrder
from models.maintenance import (
    Asset, Company, EntitySnapshot, Location, MaintenancePlan, PlanStep,
    WorkOrder,
)


class FakeRemote:
    """Records calls; can be told to fail the Nth create or refuse saves"""

    def __init__(self, fail_on_create=None, persist_ok=True, snapshot=None):
        self.fail_on_create = fail_on_create
        self.persist_ok = persist_ok
        self.snapshot = snapshot
        self.created = []
        self.persisted = []

    async def create_work_order(self, draft):
        self.created.append(draft)
        n = len(self.created)
        if self.fail_on_create == n:
            raise RuntimeError(f"create #{n} rejected")
        return CreatedWorkOrder(id=f"R{n}", number=f"WO-2026-{n:05d}")

    async def persist_tasks(self, work_order, tasks, parts=None):
        self.persisted.append((work_order, tasks, parts))
        return self.persist_ok

    async def fetch_snapshot(self):
        return self.snapshot


class FakeLedger:
    """In-memory stand-in for the SQLite generation ledger"""

    def __init__(self):
        self.batches = {}

    async def start_batch(self, plan_ids, context):
        batch_id = len(self.batches) + 1
        self.batches[batch_id] = {"plan_ids": list(plan_ids), "status": "running"}
        return batch_id

    async def complete_batch(self, batch_id, result):
        self.batches[batch_id].update(
            status="completed", work_order_ids=[wo.id for wo in result.work_orders])

    async def fail_batch(self, batch_id, error):
        self.batches[batch_id].update(
            status="failed",
            work_order_ids=[wo.id for wo in error.created_work_orders],
            remaining_plan_ids=error.remaining_plan_ids)

    async def list_batches(self, status=None, limit=50):
        rows = [dict(b, id=i) for i, b in sorted(self.batches.items(), reverse=True)]
        if status:
            rows = [r for r in rows if r["status"] == status]
        return rows[:limit]

    async def get_batch(self, batch_id):
        batch = self.batches.get(batch_id)
        return dict(batch, id=batch_id) if batch else None


def make_snapshot():
    companies = [
        Company(id="C1", name="Central Thai Co", code="CTC"),
        Company(id="C2", name="Bangkok Cooling", code="-"),
    ]
    locations = [
        Location(id="L1", company_id="C1", name="Plant 1"),
        Location(id="L2", company_id="C1", name="Plant 2"),
        Location(id="L3", company_id="C2", name="Warehouse"),
    ]
    assets = [
        Asset(id="AST-0001", asset_tag="LAK-GEN-001", name="Generator 1",
              company_id="C1", location_id="L1", system_id="SYS013",
              equipment_type_id="EQ006"),
        Asset(id="AST-0002", asset_tag="LAK-PMP-002", name="Pump 2",
              company_id="C1", location_id="L2", system_id="SYS013",
              equipment_type_id="EQ006"),
        Asset(id="AST-0003", asset_tag="BKK-CHL-001", name="Chiller",
              company_id="C2", location_id="L3", system_id="SYS020",
              equipment_type_id="EQ010"),
    ]
    plans = [
        MaintenancePlan(id="PMT-CTC-SYS013-EQ006", company_id="C1", system_id="SYS013",
                        equipment_type_id="EQ006", name="Generator monthly PM",
                        frequency_type="Monthly", frequency_value=1,
                        estimated_minutes=90, remarks="Monthly generator check"),
        MaintenancePlan(id="PMT-CTC-SYS013-EQ006-Q", company_id="C1", system_id="SYS013",
                        equipment_type_id="EQ006", name="Generator quarterly PM",
                        frequency_type="Monthly", frequency_value=3,
                        estimated_minutes=240),
        MaintenancePlan(id="PMT-C2-SYS030-EQ011", company_id="C2", system_id="SYS030",
                        equipment_type_id="EQ011", name="Cooling tower PM",
                        estimated_minutes=30),
    ]
    plan_steps = [
        PlanStep(id="D2", plan_id="PMT-CTC-SYS013-EQ006", step_number=2,
                 task_description="Check oil level"),
        PlanStep(id="D1", plan_id="PMT-CTC-SYS013-EQ006", step_number=1,
                 task_description="Inspect fuel lines"),
        PlanStep(id="D3", plan_id="PMT-CTC-SYS013-EQ006", step_number=3,
                 task_description="Run load test", is_critical=True),
        PlanStep(id="D4", plan_id="PMT-CTC-SYS013-EQ006-Q", step_number=1,
                 task_description="Replace air filter"),
    ]
    work_orders = [
        WorkOrder(id="101", number="WO-2026-0001", company_id="C1",
                  asset_id="AST-0001", title="Generator noise"),
    ]
    return EntitySnapshot(companies=companies, locations=locations, assets=assets,
                          plans=plans, plan_steps=plan_steps, work_orders=work_orders)


@pytest.fixture
def snapshot():
    return make_snapshot()


@pytest.fixture
def remote():
    return FakeRemote()
