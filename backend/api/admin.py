"""
PM Scan Engine - Admin API
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-05): Snapshot reload and inspection
"""

from fastapi import APIRouter, Depends, HTTPException
import logging

from services.entity_store import EntityStore, get_store
from services.sheet_client import RemoteError

router = APIRouter()
logger = logging.getLogger(__name__)


def _counts(store: EntityStore) -> dict:
    snapshot = store.snapshot
    return {
        "companies": len(snapshot.companies),
        "locations": len(snapshot.locations),
        "assets": len(snapshot.assets),
        "plans": len(snapshot.plans),
        "plan_steps": len(snapshot.plan_steps),
        "work_orders": len(snapshot.work_orders),
        "tasks": len(snapshot.tasks),
    }


@router.post("/reload")
async def reload_snapshot(store: EntityStore = Depends(get_store)):
    """Re-fetch all entity data from the sheet web app"""
    if store.batch_running:
        raise HTTPException(status_code=409, detail="A generation batch is running")
    try:
        await store.reload()
    except RemoteError as e:
        logger.error(f"Snapshot reload failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    return {"success": True, "counts": _counts(store)}


@router.get("/snapshot")
async def snapshot_info(store: EntityStore = Depends(get_store)):
    """Collection sizes of the loaded snapshot"""
    if not store.is_loaded:
        return {"loaded": False, "batch_running": store.batch_running}
    return {
        "loaded": True,
        "batch_running": store.batch_running,
        "counts": _counts(store),
    }
