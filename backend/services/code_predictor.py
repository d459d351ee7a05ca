"""
PM Scan Engine - Plan Code Predictor
Version: 1.0.0

Builds the canonical plan code PMT-{company}-{system}-{equipment type} from the
organizational dimensions an operator has selected. The same string is shown as
a "search this pattern" hint and fed back into the scan resolver.
"""

from typing import Iterable, Optional

from config import settings
from models.maintenance import Company

PLACEHOLDER_CODE = "-"


def company_code(company: Optional[Company]) -> str:
    """
    Short code for a company segment. First truthy value wins:
    the company's own code (ignoring the '-' placeholder), the company id,
    then settings.DEFAULT_COMPANY_CODE.
    """
    if company is not None:
        code = (company.code or "").strip()
        if code and code != PLACEHOLDER_CODE:
            return code
        if company.id:
            return company.id
    return settings.DEFAULT_COMPANY_CODE


def normalize_equipment_type(equipment_type_id: str) -> str:
    """EQ-006 -> EQ006, the convention templates were seeded with"""
    return equipment_type_id.replace("-", "")


def predict_plan_code(
    company_id: Optional[str],
    system_id: Optional[str],
    equipment_type_id: Optional[str],
    companies: Iterable[Company],
) -> Optional[str]:
    """
    Predict the plan code for a company/system/equipment type selection.

    Returns None unless all three dimensions are given, so callers never show
    a partial code.
    """
    if not company_id or not system_id or not equipment_type_id:
        return None

    company = next((c for c in companies if c.id == company_id), None)
    return "-".join([
        settings.PLAN_CODE_PREFIX,
        company_code(company),
        system_id,
        normalize_equipment_type(equipment_type_id),
    ])
