"""
PM Scan Engine - Asset / Plan Matcher
Version: 1.0.0

Joins the two sides of the asset <-> maintenance plan relationship:

- find_linked_asset: best-effort asset guess for a code that matched plans
  directly (the code may be an asset tag with a plan suffix glued on)
- find_plans_for_asset: every plan applicable to an asset
- find_assets_for_plan: every asset a plan could be generated against at a
  location

The last two are structural joins on company/system/equipment type (exact
equality). Only find_linked_asset does text matching.
"""

from typing import Iterable, List, Optional

from models.maintenance import Asset, MaintenancePlan, ScopeFilters


def asset_in_scope(asset: Asset, filters: ScopeFilters) -> bool:
    """An unset filter field matches anything"""
    if filters.company_id and asset.company_id != filters.company_id:
        return False
    if filters.location_id and asset.location_id != filters.location_id:
        return False
    return True


def find_linked_asset(code: str, filters: ScopeFilters,
                      assets: Iterable[Asset]) -> Optional[Asset]:
    """First in-scope asset whose tag (any case) or id appears inside the code."""
    folded = code.lower()
    for asset in assets:
        if not asset_in_scope(asset, filters):
            continue
        tag = asset.asset_tag.lower()
        if (tag and tag in folded) or (asset.id and asset.id in code):
            return asset
    return None


def find_plans_for_asset(asset: Asset,
                         plans: Iterable[MaintenancePlan]) -> List[MaintenancePlan]:
    """All plans sharing the asset's company, system and equipment type, in source order."""
    return [
        plan for plan in plans
        if plan.company_id == asset.company_id
        and plan.system_id == asset.system_id
        and plan.equipment_type_id == asset.equipment_type_id
    ]


def find_assets_for_plan(plan: MaintenancePlan, location_id: str,
                         assets: Iterable[Asset]) -> List[Asset]:
    """All assets at location_id sharing the plan's company, system and equipment type."""
    return [
        asset for asset in assets
        if asset.company_id == plan.company_id
        and asset.location_id == location_id
        and asset.system_id == plan.system_id
        and asset.equipment_type_id == plan.equipment_type_id
    ]
