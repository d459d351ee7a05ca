"""
PM Scan Engine - Scan Resolution Outcomes
Version: 1.0.0

Changelog:
v1.0.0 (2026-10-05): Initial outcome variants for the scan resolver
"""

from pydantic import BaseModel, Field, computed_field
from typing import Annotated, List, Literal, Optional, Union

from .maintenance import Asset, MaintenancePlan, WorkOrder


class WorkOrderMatch(BaseModel):
    """Scanned code is an existing work order: open it"""
    kind: Literal["work_order"] = "work_order"
    code: str
    work_order: WorkOrder

    @computed_field
    @property
    def dismiss_scanner(self) -> bool:
        return True


class PlanSelection(BaseModel):
    """
    One or more maintenance plans are waiting for the operator to pick which
    ones to generate.

    asset_source:
    - 'linked': plans matched the code directly, asset is a best-effort guess
      (None when nothing in the code looked like an asset tag)
    - 'scanned': the code was an asset tag, plans were joined from it
    """
    kind: Literal["plan_selection"] = "plan_selection"
    code: str
    plans: List[MaintenancePlan]
    asset: Optional[Asset] = None
    asset_source: Literal["linked", "scanned"] = "linked"

    @computed_field
    @property
    def dismiss_scanner(self) -> bool:
        return True


class AssetMatch(BaseModel):
    """Scanned code is an asset with no applicable plans: open the asset"""
    kind: Literal["asset"] = "asset"
    code: str
    asset: Asset

    @computed_field
    @property
    def dismiss_scanner(self) -> bool:
        return True


class NotFound(BaseModel):
    """Nothing matched. The scanner stays open so the operator can retry."""
    kind: Literal["not_found"] = "not_found"
    code: str
    message: str = ""

    @computed_field
    @property
    def dismiss_scanner(self) -> bool:
        return False


ResolutionOutcome = Annotated[
    Union[WorkOrderMatch, PlanSelection, AssetMatch, NotFound],
    Field(discriminator="kind"),
]
