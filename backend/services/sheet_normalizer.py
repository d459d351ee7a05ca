"""
PM Scan Engine - Sheet Snapshot Normalizer
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): All ids/join keys coerced to str at load time
v1.0.0 (2026-10-05): Initial raw-row -> model normalization

Turns the raw snake_case rows returned by the sheet web app into entity models.
Sheet cells come back typed however the spreadsheet felt like it (6, 6.0, "6"),
so every id and foreign key is converted to a single string form here and
nowhere else.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from config import settings
from models.maintenance import (
    Asset, Company, EntitySnapshot, EquipmentType, Location, MaintenancePlan,
    PlanStep, Priority, Status, System, Task, WorkOrder, WorkType,
)

logger = logging.getLogger(__name__)

# Sheet tab names
TAB_COMPANIES = "Companies"
TAB_LOCATIONS = "Locations"
TAB_SYSTEMS = "Systems"
TAB_EQUIPMENT_TYPES = "Equipment_Types"
TAB_ASSETS = "Assets"
TAB_PLANS = "PM_Templates"
TAB_PLAN_STEPS = "PM_Template_Details"
TAB_WORK_ORDERS = "Work_Orders"
TAB_TASKS = "Work_Order_Tasks"
TAB_ATTACHMENTS = "Work_Order_Attachments"


def as_key(value: Any) -> str:
    """Canonical string form of an id cell: None -> '', 6.0 -> '6'."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def as_number(value: Any, default: float = 0) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def as_optional_number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def as_date(value: Any) -> str:
    """Keep only the date part of an ISO timestamp"""
    return as_key(value).split("T")[0] if value else ""


def normalize_company(raw: Dict[str, Any]) -> Company:
    return Company(
        id=as_key(raw.get("id")),
        name=raw.get("name") or "",
        code=as_key(raw.get("code")) or None,
        address=raw.get("address") or "-",
        latitude=as_key(raw.get("latitude")),
        longitude=as_key(raw.get("longitude")),
    )


def normalize_location(raw: Dict[str, Any]) -> Location:
    return Location(
        id=as_key(raw.get("id")),
        company_id=as_key(raw.get("company_id")),
        name=raw.get("name") or "",
    )


def normalize_system(raw: Dict[str, Any]) -> System:
    name = raw.get("name") or ""
    return System(
        id=as_key(raw.get("id")),
        company_id=as_key(raw.get("company_id")),
        name=name,
        name_th=raw.get("name_th") or name,
        description=raw.get("description") or "",
    )


def normalize_equipment_type(raw: Dict[str, Any]) -> EquipmentType:
    name = raw.get("name") or ""
    return EquipmentType(
        id=as_key(raw.get("id")),
        name=name,
        name_th=raw.get("name_th") or name,
        description=raw.get("description") or "",
    )


def normalize_asset(raw: Dict[str, Any], locations: List[Location]) -> Asset:
    """Assets have no company column; the company comes from their location."""
    location_id = as_key(raw.get("location_id"))
    location = next((l for l in locations if l.id == location_id), None)
    return Asset(
        id=as_key(raw.get("id")),
        asset_tag=as_key(raw.get("asset_tag")),
        name=raw.get("asset_name") or "",
        category=raw.get("category") or "",
        company_id=location.company_id if location else "Unknown",
        location_id=location_id,
        system_id=as_key(raw.get("system_id")),
        equipment_type_id=as_key(raw.get("equipment_type_id")),
        serial_number=as_key(raw.get("serial_number")),
        manufacturer=raw.get("manufacturer") or "",
        status=raw.get("status") or "Active",
        condition=raw.get("condition") or "Good",
        notes=raw.get("notes"),
    )


def normalize_plan(raw: Dict[str, Any]) -> MaintenancePlan:
    return MaintenancePlan(
        id=as_key(raw.get("id")),
        company_id=as_key(raw.get("company_id")),
        system_id=as_key(raw.get("system_id")),
        equipment_type_id=as_key(raw.get("equipment_type_id")),
        name=raw.get("name") or "",
        frequency_type=raw.get("frequency_type") or "",
        frequency_value=as_number(raw.get("frequency_value")),
        estimated_minutes=as_number(raw.get("estimated_minutes")),
        remarks=raw.get("remarks") or "",
    )


def normalize_plan_step(raw: Dict[str, Any]) -> PlanStep:
    return PlanStep(
        id=as_key(raw.get("id")),
        plan_id=as_key(raw.get("pm_template_id")),
        step_number=int(as_number(raw.get("step_number"))),
        task_description=raw.get("task_description") or "",
        expected_input_type=raw.get("expected_input_type") or "Text",
        standard_text_expected=raw.get("standard_text_expected"),
        standard_min_value=as_optional_number(raw.get("standard_min_value")),
        standard_max_value=as_optional_number(raw.get("standard_max_value")),
        is_critical=as_bool(raw.get("is_critical")),
    )


def normalize_priority(value: Any) -> str:
    level = as_key(value)
    if level in {p.value for p in Priority}:
        return level
    return Priority.MEDIUM.value


def normalize_work_order(raw: Dict[str, Any], assets: List[Asset],
                         companies: List[Company],
                         attachments: List[Dict[str, Any]]) -> WorkOrder:
    """
    Normalize a work order row.

    asset_id in the sheet is messy: it may hold the asset id, its tag, or its
    display name. Lookup tries them in that order (tag and name ignore case).
    """
    raw_id = as_key(raw.get("id"))
    raw_asset = as_key(raw.get("asset_id"))

    asset = next((a for a in assets if a.id == raw_asset), None)
    if asset is None and raw_asset:
        asset = next((a for a in assets if a.asset_tag.lower() == raw_asset.lower()), None)
    if asset is None and raw_asset:
        asset = next((a for a in assets if a.name.lower() == raw_asset.lower()), None)

    raw_company = as_key(raw.get("company_id"))
    company = (
        next((c for c in companies if asset is not None and c.id == asset.company_id), None)
        or next((c for c in companies if c.id == raw_company), None)
        or (companies[0] if companies else None)
    )

    if asset is not None:
        asset_name = asset.name
    elif raw_asset:
        asset_name = f"Unknown ({raw_asset})"
    else:
        asset_name = "Unknown"

    return WorkOrder(
        id=raw_id,
        number=as_key(raw.get("wo_number")) or raw_id,
        work_type=raw.get("work_type") or WorkType.CM.value,
        title=raw.get("title") or "",
        description=raw.get("description") or "",
        status=raw.get("status") or Status.OPEN.value,
        priority=normalize_priority(raw.get("priority")),
        company_id=company.id if company else None,
        location_id=asset.location_id if asset else as_key(raw.get("location_id")),
        system_id=asset.system_id if asset else as_key(raw.get("system_id")),
        equipment_type_id=(as_key(raw.get("equipment_type_id"))
                           or (asset.equipment_type_id if asset else None)),
        asset_id=asset.id if asset else (raw_asset or settings.UNASSIGNED_ASSET_ID),
        plan_id=as_key(raw.get("pm_template_id")) or None,
        created_at=as_date(raw.get("created_at")) or datetime.now().isoformat(),
        scheduled_date=as_date(raw.get("scheduled_date")) or None,
        completed_at=as_key(raw.get("completed_at")) or None,
        estimated_hours=as_number(raw.get("estimated_hours")),
        assigned_to_user_id=as_key(raw.get("assigned_to_user_id")) or None,
        requested_by_user_id=as_key(raw.get("requested_by_user_id")) or None,
        asset_name=asset_name,
        company_name=company.name if company else "Unknown",
        images=[
            att.get("file_url") for att in attachments
            if as_key(att.get("work_order_id")) == raw_id and att.get("file_url")
        ],
    )


def normalize_task(raw: Dict[str, Any]) -> Task:
    return Task(
        id=as_key(raw.get("id")),
        work_order_id=as_key(raw.get("work_order_id")),
        description=raw.get("description") or "",
        is_completed=as_bool(raw.get("is_completed")),
        actual_value_text=raw.get("actual_value_text"),
        actual_value_numeric=as_optional_number(raw.get("actual_value_numeric")),
        completed_at=as_key(raw.get("completed_at")) or None,
    )


def build_snapshot(data: Dict[str, Any]) -> EntitySnapshot:
    """Build an EntitySnapshot from the sheet web app's full-database payload."""
    companies = [normalize_company(r) for r in data.get(TAB_COMPANIES) or []]
    locations = [normalize_location(r) for r in data.get(TAB_LOCATIONS) or []]
    assets = [normalize_asset(r, locations) for r in data.get(TAB_ASSETS) or []]
    attachments = data.get(TAB_ATTACHMENTS) or []

    snapshot = EntitySnapshot(
        companies=companies,
        locations=locations,
        systems=[normalize_system(r) for r in data.get(TAB_SYSTEMS) or []],
        equipment_types=[normalize_equipment_type(r)
                         for r in data.get(TAB_EQUIPMENT_TYPES) or []],
        assets=assets,
        plans=[normalize_plan(r) for r in data.get(TAB_PLANS) or []],
        plan_steps=[normalize_plan_step(r) for r in data.get(TAB_PLAN_STEPS) or []],
        work_orders=[normalize_work_order(r, assets, companies, attachments)
                     for r in data.get(TAB_WORK_ORDERS) or []],
        tasks=[normalize_task(r) for r in data.get(TAB_TASKS) or []],
    )

    logger.info(
        f"Snapshot normalized: {len(snapshot.assets)} assets, "
        f"{len(snapshot.plans)} plans, {len(snapshot.plan_steps)} plan steps, "
        f"{len(snapshot.work_orders)} work orders"
    )
    return snapshot
