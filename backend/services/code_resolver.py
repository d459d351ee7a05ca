"""
PM Scan Engine - Scan Code Resolver
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Asset scans join applicable plans; scope filters apply to
                      work orders, plans and assets
v1.0.0 (2026-10-05): Initial resolver (work order -> plan -> asset cascade)

Decides what a scanned or typed code refers to. Checks run in a fixed order and
the first one that finds something wins:

1. Work order   - number (any case) or id (exact) equals the code
2. Plans        - plan id contains the code, or the code contains the plan id
                  (any case); every such plan is a candidate
3. Asset        - tag equals / is contained in the code, id equals the code,
                  or the name contains the code; plans are then joined from it
4. Not found    - the only outcome that keeps the scanner open

Works on the snapshot handed in; never does I/O and never raises.
"""

import logging
from typing import Iterable, List, Optional

from models.maintenance import (
    Asset, EntitySnapshot, MaintenancePlan, ScopeFilters, WorkOrder,
)
from models.resolution import (
    AssetMatch, NotFound, PlanSelection, ResolutionOutcome, WorkOrderMatch,
)
from services.plan_matcher import (
    asset_in_scope, find_linked_asset, find_plans_for_asset,
)

logger = logging.getLogger(__name__)


class CodeResolver:
    """Resolves a scanned code against an entity snapshot."""

    def resolve(self, raw_code: str, filters: Optional[ScopeFilters],
                snapshot: EntitySnapshot) -> ResolutionOutcome:
        """
        Classify a scanned code.

        Args:
            raw_code: Scanner payload or typed code (trimmed here)
            filters: Optional company/location scope from the scanning screen
            snapshot: Current work orders, plans and assets

        Returns:
            WorkOrderMatch, PlanSelection, AssetMatch or NotFound
        """
        code = (raw_code or "").strip()
        filters = filters or ScopeFilters()

        if not code:
            return NotFound(code=code, message="Empty code")

        work_order = self._match_work_order(code, filters, snapshot.work_orders)
        if work_order is not None:
            logger.info(f"Scan '{code}' -> work order {work_order.number or work_order.id}")
            return WorkOrderMatch(code=code, work_order=work_order)

        plans = self._match_plans(code, filters, snapshot.plans)
        if plans:
            linked = find_linked_asset(code, filters, snapshot.assets)
            logger.info(
                f"Scan '{code}' -> {len(plans)} plan(s), linked asset: "
                f"{linked.asset_tag if linked else 'none'}"
            )
            return PlanSelection(code=code, plans=plans, asset=linked,
                                 asset_source="linked")

        asset = self._match_asset(code, filters, snapshot.assets)
        if asset is not None:
            asset_plans = find_plans_for_asset(asset, snapshot.plans)
            if asset_plans:
                logger.info(f"Scan '{code}' -> asset {asset.asset_tag} "
                            f"with {len(asset_plans)} plan(s)")
                return PlanSelection(code=code, plans=asset_plans, asset=asset,
                                     asset_source="scanned")
            logger.info(f"Scan '{code}' -> asset {asset.asset_tag}")
            return AssetMatch(code=code, asset=asset)

        logger.info(f"Scan '{code}' -> no match")
        return NotFound(code=code, message=f"No work order, plan or asset found for code: {code}")

    def _match_work_order(self, code: str, filters: ScopeFilters,
                          work_orders: Iterable[WorkOrder]) -> Optional[WorkOrder]:
        folded = code.lower()
        for wo in work_orders:
            if filters.company_id and wo.company_id != filters.company_id:
                continue
            if wo.number.lower() == folded or wo.id == code:
                return wo
        return None

    def _match_plans(self, code: str, filters: ScopeFilters,
                     plans: Iterable[MaintenancePlan]) -> List[MaintenancePlan]:
        folded = code.lower()
        matched = []
        for plan in plans:
            if filters.company_id and plan.company_id != filters.company_id:
                continue
            plan_id = plan.id.lower()
            if not plan_id:
                continue
            # Scanned labels may carry a suffix after the template id
            if folded in plan_id or plan_id in folded:
                matched.append(plan)
        return matched

    def _match_asset(self, code: str, filters: ScopeFilters,
                     assets: Iterable[Asset]) -> Optional[Asset]:
        folded = code.lower()
        for asset in assets:
            if not asset_in_scope(asset, filters):
                continue
            tag = asset.asset_tag.lower()
            if (
                tag == folded
                or asset.id == code
                or (tag and tag in folded)
                or folded in asset.name.lower()
            ):
                return asset
        return None


# Singleton
_resolver = CodeResolver()


def resolve(raw_code: str, filters: Optional[ScopeFilters],
            snapshot: EntitySnapshot) -> ResolutionOutcome:
    return _resolver.resolve(raw_code, filters, snapshot)
