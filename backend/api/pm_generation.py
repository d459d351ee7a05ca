"""
PM Scan Engine - PM Generation API Endpoints
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Batch ledger endpoints; 502 detail carries partial batch
v1.0.0 (2026-10-05): Generate work orders from a confirmed plan selection
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import List, Optional
import logging

from config import settings
from models.generation import GenerationContext, GenerationResult
from models.maintenance import PlanStep, Priority, ScopeFilters
from services.entity_store import BatchInProgressError, EntityStore, get_store
from services.generation_ledger import GenerationLedger, get_ledger
from services.pm_generator import GenerationError

router = APIRouter(prefix="/pm", tags=["pm"])
logger = logging.getLogger(__name__)


# -- Pydantic Models --

class GenerateRequest(BaseModel):
    """Confirmed plan selection from the plan picker"""
    plan_ids: List[str] = Field(default_factory=list)
    asset_id: Optional[str] = Field(None, description="Asset from the scan, if known")
    company_id: Optional[str] = None
    location_id: Optional[str] = None
    scanned_code: str = ""
    priority: Priority = Priority.MEDIUM
    requested_by: Optional[str] = None


# -- Endpoints --

@router.post("/generate", response_model=GenerationResult)
async def generate_work_orders(data: GenerateRequest,
                               store: EntityStore = Depends(get_store)):
    """
    Create one PM work order (plus checklist) per selected plan.

    An empty selection is a no-op. On a remote failure the batch stops and a
    502 is returned; its detail lists the work orders that were created anyway
    and the plan ids still to do.
    """
    if not store.is_loaded:
        raise HTTPException(status_code=503, detail="Entity data not loaded yet")

    asset = None
    if data.asset_id and data.asset_id != settings.UNASSIGNED_ASSET_ID:
        asset = store.find_asset(data.asset_id)
        if asset is None:
            raise HTTPException(status_code=404, detail=f"Asset {data.asset_id} not found")

    context = GenerationContext(
        asset=asset,
        filters=ScopeFilters(company_id=data.company_id or None,
                             location_id=data.location_id or None),
        scanned_code=data.scanned_code,
        priority=data.priority,
        requested_by=data.requested_by,
    )

    try:
        return await store.run_batch(data.plan_ids, context)
    except BatchInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except GenerationError as e:
        raise HTTPException(status_code=502, detail={
            "message": "Failed to generate work orders. Check the batch and retry the remaining plans.",
            "error": str(e),
            "failed_plan_id": e.failed_plan_id,
            "remaining_plan_ids": e.remaining_plan_ids,
            "unsaved_work_order_id": e.unsaved_work_order.id if e.unsaved_work_order else None,
            "created_work_orders": [
                wo.model_dump(by_alias=True, mode="json") for wo in e.created_work_orders
            ],
        })


@router.get("/plans/{plan_id}/steps", response_model=List[PlanStep])
async def get_plan_steps(plan_id: str, store: EntityStore = Depends(get_store)):
    """Checklist preview for a plan, in step order"""
    if not store.is_loaded:
        raise HTTPException(status_code=503, detail="Entity data not loaded yet")
    snapshot = store.snapshot
    if not any(p.id == plan_id for p in snapshot.plans):
        raise HTTPException(status_code=404, detail=f"Plan {plan_id} not found")
    steps = [s for s in snapshot.plan_steps if s.plan_id == plan_id]
    return sorted(steps, key=lambda s: s.step_number)


@router.get("/batches")
async def list_batches(status: Optional[str] = None, limit: int = 50,
                       ledger: GenerationLedger = Depends(get_ledger)):
    """Recent generation batches, newest first"""
    return await ledger.list_batches(status=status, limit=limit)


@router.get("/batches/{batch_id}")
async def get_batch(batch_id: int, ledger: GenerationLedger = Depends(get_ledger)):
    """A generation batch with the work orders it created"""
    batch = await ledger.get_batch(batch_id)
    if not batch:
        raise HTTPException(status_code=404, detail="Batch not found")
    return batch
