"""
PM Scan Engine - Maintenance Entity Models
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): camelCase wire aliases matching the sheet web app;
                      woNumber / pmTemplateId legacy field names
v1.0.0 (2026-10-05): Initial entity models (assets, plans, work orders, tasks)

All ids and join keys are strings. Numeric-looking ids coming from the sheet
are normalized to str at the loading boundary (services.sheet_normalizer), so
matching code compares with plain ==.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from enum import Enum
from typing import Optional, List


class WorkType(str, Enum):
    """Work order classification"""
    CM = "Corrective (CM)"
    PM = "Preventive (PM)"
    EMERGENCY = "Emergency"
    INSPECTION = "Inspection"
    CALIBRATION = "Calibration"


class Status(str, Enum):
    """Work order status"""
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    WAITING_PARTS = "Waiting for Parts"
    COMPLETED = "Completed"
    SCHEDULED = "Scheduled"
    PENDING = "Pending"


class Priority(str, Enum):
    """Work order priority (sheet stores the numeric level)"""
    LOW = "1"
    MEDIUM = "2"
    HIGH = "3"
    CRITICAL = "4"


class CamelModel(BaseModel):
    """Base model: snake_case attributes, camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Company(CamelModel):
    id: str
    name: str = ""
    code: Optional[str] = None
    address: str = "-"
    latitude: str = ""
    longitude: str = ""


class Location(CamelModel):
    id: str
    company_id: str = ""
    name: str = ""


class System(CamelModel):
    id: str
    company_id: str = ""
    name: str = ""
    name_th: str = ""
    description: str = ""


class EquipmentType(CamelModel):
    id: str
    name: str = ""
    name_th: str = ""
    description: str = ""


class Asset(CamelModel):
    """Physical asset, identified by id or by its printed asset tag"""
    id: str
    asset_tag: str = ""
    name: str = ""
    category: str = ""
    company_id: Optional[str] = None
    location_id: str = ""
    system_id: str = ""
    equipment_type_id: str = ""
    serial_number: str = ""
    manufacturer: str = ""
    status: str = "Active"
    condition: str = "Good"
    notes: Optional[str] = None


class MaintenancePlan(CamelModel):
    """Preventive maintenance template, id like PMT-CTC-SYS013-EQ006"""
    id: str
    company_id: str = ""
    system_id: str = ""
    equipment_type_id: str = ""
    name: str = ""
    frequency_type: str = ""
    frequency_value: float = 0
    estimated_minutes: float = 0
    remarks: str = ""


class PlanStep(CamelModel):
    """One checklist line of a maintenance plan"""
    id: str
    plan_id: str = Field(..., alias="pmTemplateId")
    step_number: int = 0
    task_description: str = ""
    expected_input_type: str = "Text"
    standard_text_expected: Optional[str] = None
    standard_min_value: Optional[float] = None
    standard_max_value: Optional[float] = None
    is_critical: bool = False


class WorkOrder(CamelModel):
    """Work order record. `number` is assigned by the remote system of record."""
    id: str
    number: str = Field("", alias="woNumber")
    work_type: str = WorkType.CM.value
    title: str = ""
    description: str = ""
    status: str = Status.OPEN.value
    priority: str = Priority.MEDIUM.value
    company_id: Optional[str] = None
    location_id: str = ""
    system_id: str = ""
    equipment_type_id: Optional[str] = None
    asset_id: str = ""
    plan_id: Optional[str] = Field(None, alias="pmTemplateId")
    created_at: str = ""
    scheduled_date: Optional[str] = None
    completed_at: Optional[str] = None
    estimated_hours: Optional[float] = None
    assigned_to_user_id: Optional[str] = None
    requested_by_user_id: Optional[str] = None

    # Display helpers
    asset_name: Optional[str] = None
    location_name: Optional[str] = None
    company_name: Optional[str] = None
    images: List[str] = Field(default_factory=list)


class Task(CamelModel):
    """Checklist item instantiated on a work order"""
    id: str
    work_order_id: str
    description: str = ""
    is_completed: bool = False
    actual_value_text: Optional[str] = None
    actual_value_numeric: Optional[float] = None
    completed_at: Optional[str] = None


class ScopeFilters(CamelModel):
    """Company/location constraints carried from the scanning context"""
    company_id: Optional[str] = None
    location_id: Optional[str] = None


class EntitySnapshot(CamelModel):
    """Read-only collections the resolver and generator work against"""
    companies: List[Company] = Field(default_factory=list)
    locations: List[Location] = Field(default_factory=list)
    systems: List[System] = Field(default_factory=list)
    equipment_types: List[EquipmentType] = Field(default_factory=list)
    assets: List[Asset] = Field(default_factory=list)
    plans: List[MaintenancePlan] = Field(default_factory=list)
    plan_steps: List[PlanStep] = Field(default_factory=list)
    work_orders: List[WorkOrder] = Field(default_factory=list)
    tasks: List[Task] = Field(default_factory=list)
