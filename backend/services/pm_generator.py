"""
PM Scan Engine - PM Work Order Generator
Version: 1.2.0

Changelog:
v1.2.0 (2026-10-17): A work order created before its task save failed is
                      reported as created and its plan left out of the retry list
v1.1.0 (2026-10-12): GenerationError carries the partial batch so callers can
                      retry only the plans that did not make it
v1.0.0 (2026-10-05): Initial batch generation from confirmed plan selection

Turns a confirmed plan selection into work orders on the remote system of
record. For each selected plan, in order:

1. Build a PM work order draft (asset fields from the working asset, otherwise
   from the plan plus the scan's location)
2. Create it remotely; the remote assigns the real id and number
3. Instantiate one task per plan step (ordered by step number)
4. Save the finished work order with its tasks
5. Accumulate

Calls are awaited one at a time. The first failure stops the batch. Work
orders already created earlier in the batch stay on the remote: there is no
rollback. They are reported back on the GenerationError instead, including a
work order whose task save failed.
"""

import logging
import math
import time
from datetime import date, datetime
from typing import List, Optional, Protocol, Sequence

from config import settings
from models.generation import CreatedWorkOrder, GenerationContext, GenerationResult
from models.maintenance import (
    Asset, EntitySnapshot, MaintenancePlan, PlanStep, Status, Task, WorkOrder,
    WorkType,
)
from services.plan_matcher import find_assets_for_plan
from services.sheet_client import RemoteError

logger = logging.getLogger(__name__)


class WorkOrderRemote(Protocol):
    """Remote operations the generator needs (see services.sheet_client)"""

    async def create_work_order(self, draft: WorkOrder) -> CreatedWorkOrder: ...

    async def persist_tasks(self, work_order: WorkOrder, tasks: List[Task],
                            parts: Optional[list] = None) -> bool: ...


class GenerationError(Exception):
    """
    A remote call failed part-way through a batch.

    Attributes:
        created_work_orders: Work orders created before the failure (still remote)
        created_tasks: Their tasks
        failed_plan_id: Plan being processed when the call failed
        failed_index: Position of that plan in the selection
        remaining_plan_ids: Plans still to do. The failed plan is included
            unless its work order was already created
        unsaved_work_order: Work order created for the failed plan whose tasks
            were not saved (also in created_work_orders), if any
    """

    def __init__(self, message: str, *,
                 created_work_orders: Optional[List[WorkOrder]] = None,
                 created_tasks: Optional[List[Task]] = None,
                 failed_plan_id: Optional[str] = None,
                 failed_index: Optional[int] = None,
                 remaining_plan_ids: Optional[List[str]] = None,
                 unsaved_work_order: Optional[WorkOrder] = None):
        super().__init__(message)
        self.created_work_orders = created_work_orders or []
        self.created_tasks = created_tasks or []
        self.failed_plan_id = failed_plan_id
        self.failed_index = failed_index
        self.remaining_plan_ids = remaining_plan_ids or []
        self.unsaved_work_order = unsaved_work_order


def infer_asset(selected_plan_ids: Sequence[str], context: GenerationContext,
                snapshot: EntitySnapshot) -> Optional[Asset]:
    """
    Working asset for the whole batch.

    An asset known from the scan always wins. Otherwise, with a location in
    scope, the first selected plan is joined against the assets at that
    location; exactly one candidate is adopted, anything else leaves the batch
    without an asset.
    """
    if context.asset is not None:
        return context.asset
    location_id = context.filters.location_id
    if not location_id or not selected_plan_ids:
        return None

    first_plan = next((p for p in snapshot.plans if p.id == selected_plan_ids[0]), None)
    if first_plan is None:
        return None

    candidates = find_assets_for_plan(first_plan, location_id, snapshot.assets)
    if len(candidates) == 1:
        logger.info(f"Inferred asset {candidates[0].asset_tag} for plan {first_plan.id} "
                    f"at location {location_id}")
        return candidates[0]

    logger.info(f"No single asset for plan {first_plan.id} at location {location_id} "
                f"({len(candidates)} candidates)")
    return None


def build_tasks(work_order_id: str, steps: List[PlanStep]) -> List[Task]:
    """One open task per plan step, ids WOT-{work order id}-{position}."""
    ordered = sorted(steps, key=lambda s: s.step_number)
    return [
        Task(
            id=f"WOT-{work_order_id}-{index}",
            work_order_id=work_order_id,
            description=step.task_description,
            is_completed=False,
        )
        for index, step in enumerate(ordered)
    ]


class PMGenerator:
    """Generates PM work orders and checklists from a plan selection."""

    async def generate(
        self,
        selected_plan_ids: Sequence[str],
        context: GenerationContext,
        snapshot: EntitySnapshot,
        remote: WorkOrderRemote,
    ) -> GenerationResult:
        """
        Generate one work order per selected plan.

        Args:
            selected_plan_ids: Confirmed plan ids, processed in this order
            context: Asset/filters/code carried from the scan
            snapshot: Plans, plan steps, assets, companies and locations
            remote: Remote create/save operations

        Returns:
            GenerationResult with everything created

        Raises:
            GenerationError: On the first failed remote call
        """
        result = GenerationResult()
        if not selected_plan_ids:
            return result

        asset = infer_asset(selected_plan_ids, context, snapshot)
        plan_ids = list(selected_plan_ids)

        for index, plan_id in enumerate(plan_ids):
            plan = next((p for p in snapshot.plans if p.id == plan_id), None)
            if plan is None:
                logger.warning(f"Plan {plan_id} not in snapshot, skipped")
                continue

            draft = self._build_draft(plan, index, asset, context, snapshot)
            work_order: Optional[WorkOrder] = None

            try:
                created = await remote.create_work_order(draft)
                work_order = draft.model_copy(update={"id": created.id,
                                                      "number": created.number})
                steps = [s for s in snapshot.plan_steps if s.plan_id == plan.id]
                tasks = build_tasks(work_order.id, steps)
                if tasks and not await remote.persist_tasks(work_order, tasks, []):
                    raise RemoteError("updateWorkOrder refused")
            except Exception as e:
                logger.error(f"PM generation failed at plan {index + 1}/{len(plan_ids)} "
                             f"({plan_id}): {e}")
                created_work_orders = list(result.work_orders)
                remaining_plan_ids = plan_ids[index:]
                if work_order is not None:
                    # Exists remotely without its checklist
                    created_work_orders.append(work_order)
                    remaining_plan_ids = plan_ids[index + 1:]
                    message = (f"Work order {work_order.number} was created for plan {plan_id} "
                               f"but its tasks were not saved: {e}")
                else:
                    message = f"Generation failed at plan {plan_id}: {e}"
                raise GenerationError(
                    message,
                    created_work_orders=created_work_orders,
                    created_tasks=list(result.tasks),
                    failed_plan_id=plan_id,
                    failed_index=index,
                    remaining_plan_ids=remaining_plan_ids,
                    unsaved_work_order=work_order,
                ) from e

            result.work_orders.append(work_order)
            result.tasks.extend(tasks)
            logger.info(f"Created {work_order.number} from plan {plan.id} "
                        f"with {len(tasks)} tasks")

        result.navigate_to_asset_id = asset.id if asset else None
        return result

    def _build_draft(self, plan: MaintenancePlan, index: int, asset: Optional[Asset],
                     context: GenerationContext, snapshot: EntitySnapshot) -> WorkOrder:
        """Local draft; id and number are placeholders until the remote assigns them."""
        temp_id = f"WO-GEN-{int(time.time() * 1000)}-{index}"

        if plan.remarks:
            description = plan.remarks
        elif context.scanned_code:
            description = f"Generated from scan: {context.scanned_code}"
        else:
            description = f"Generated from plan: {plan.name}"

        if asset is not None:
            company_id = asset.company_id
            location_id = asset.location_id
            system_id = asset.system_id
            equipment_type_id = asset.equipment_type_id
        else:
            company_id = plan.company_id
            location_id = context.filters.location_id or ""
            system_id = plan.system_id
            equipment_type_id = plan.equipment_type_id

        company = next((c for c in snapshot.companies if c.id == company_id), None)
        location = next((l for l in snapshot.locations if l.id == location_id), None)

        return WorkOrder(
            id=temp_id,
            number=temp_id,
            work_type=WorkType.PM.value,
            title=plan.name,
            description=description,
            status=Status.OPEN.value,
            priority=context.priority.value,
            company_id=company_id,
            location_id=location_id,
            system_id=system_id,
            equipment_type_id=equipment_type_id,
            asset_id=asset.id if asset else settings.UNASSIGNED_ASSET_ID,
            plan_id=plan.id,
            created_at=datetime.now().isoformat(),
            scheduled_date=date.today().isoformat(),
            estimated_hours=math.ceil(plan.estimated_minutes / 60),
            requested_by_user_id=context.requested_by or settings.DEFAULT_REQUESTED_BY,
            asset_name=asset.name if asset else settings.UNASSIGNED_ASSET_ID,
            location_name=location.name if location else (location_id or None),
            company_name=company.name if company else company_id,
        )


# Singleton
_generator = PMGenerator()


async def generate(selected_plan_ids: Sequence[str], context: GenerationContext,
                   snapshot: EntitySnapshot, remote: WorkOrderRemote) -> GenerationResult:
    return await _generator.generate(selected_plan_ids, context, snapshot, remote)
