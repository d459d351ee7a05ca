"""
PM Scan Engine - Work Order Generation Models
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-05): Initial generation context / result models
"""

from pydantic import BaseModel, Field
from typing import List, Optional

from .maintenance import Asset, Priority, ScopeFilters, Task, WorkOrder


class CreatedWorkOrder(BaseModel):
    """Identity assigned by the remote system of record"""
    id: str
    number: str


class GenerationContext(BaseModel):
    """Everything the scan carried into a generation batch"""
    asset: Optional[Asset] = Field(None, description="Asset known from the scan, if any")
    filters: ScopeFilters = Field(default_factory=ScopeFilters)
    scanned_code: str = Field("", description="Code the plans were found with")
    priority: Priority = Priority.MEDIUM
    requested_by: Optional[str] = None


class GenerationResult(BaseModel):
    """Work orders and tasks created by one batch"""
    work_orders: List[WorkOrder] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)
    navigate_to_asset_id: Optional[str] = Field(
        None, description="Asset to show after generation; None means the work order list"
    )
