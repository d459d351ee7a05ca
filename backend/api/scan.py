"""
PM Scan Engine - Scan API Endpoints
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-05): Scan resolution and plan code prediction
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import Optional
import logging

from models.maintenance import ScopeFilters
from models.resolution import ResolutionOutcome
from services import code_resolver
from services.code_predictor import predict_plan_code
from services.entity_store import EntityStore, get_store

router = APIRouter(prefix="/scan", tags=["scan"])
logger = logging.getLogger(__name__)


# -- Pydantic Models --

class ScanRequest(BaseModel):
    """Scanner payload or typed code, with the scan screen's filters"""
    code: str = Field(..., description="QR/barcode payload or typed code")
    company_id: Optional[str] = None
    location_id: Optional[str] = None


class PredictedCode(BaseModel):
    code: Optional[str] = None


def _require_snapshot(store: EntityStore) -> None:
    if not store.is_loaded:
        raise HTTPException(status_code=503, detail="Entity data not loaded yet")


# -- Endpoints --

@router.post("/", response_model=ResolutionOutcome)
async def scan_code(data: ScanRequest, store: EntityStore = Depends(get_store)):
    """
    Resolve a scanned code to a work order, a plan selection, an asset, or
    not_found. Only not_found has dismiss_scanner = false.
    """
    _require_snapshot(store)
    filters = ScopeFilters(company_id=data.company_id or None,
                           location_id=data.location_id or None)
    return code_resolver.resolve(data.code, filters, store.snapshot)


@router.get("/predict", response_model=PredictedCode)
async def predict_code(
    company_id: Optional[str] = None,
    system_id: Optional[str] = None,
    equipment_type_id: Optional[str] = None,
    store: EntityStore = Depends(get_store),
):
    """Predicted plan code for the selected dimensions (null until all three are set)"""
    companies = store.snapshot.companies if store.is_loaded else []
    return PredictedCode(code=predict_plan_code(company_id, system_id,
                                                equipment_type_id, companies))
