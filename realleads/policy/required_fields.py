# realleads/policy/required_fields.py
from __future__ import annotations

from typing import Any, List, Mapping

from realleads.common.errors import ValidationError

# Category names shared with the orchestrator prompt so that clarification
# responses and handler rejections speak the same vocabulary.
NAME = "name"
CONTACT_METHOD = "contact_method"
PROPERTY_DESCRIPTOR = "property_descriptor"
BUDGET_SIGNAL = "budget_signal"

REQUIRED_LEAD_CATEGORIES = (NAME, CONTACT_METHOD, PROPERTY_DESCRIPTOR, BUDGET_SIGNAL)

_MESSAGES = {
    NAME: "a name",
    CONTACT_METHOD: "at least one contact method (email or phone)",
    PROPERTY_DESCRIPTOR: "a property address, or neighborhood with beds and baths",
    BUDGET_SIGNAL: "a budget (maximum budget or price range)",
}


def _present(fields: Mapping[str, Any], key: str) -> bool:
    val = fields.get(key)
    if isinstance(val, str):
        return bool(val.strip())
    return val is not None


def missing_lead_categories(fields: Mapping[str, Any]) -> List[str]:
    """Return the required-field categories a new lead is missing, in canonical order."""
    missing: List[str] = []
    if not _present(fields, "first_name"):
        missing.append(NAME)
    if not (_present(fields, "email") or _present(fields, "phone")):
        missing.append(CONTACT_METHOD)
    has_address = _present(fields, "property_address")
    has_descriptor = all(_present(fields, k) for k in ("neighborhood", "beds", "baths"))
    if not (has_address or has_descriptor):
        missing.append(PROPERTY_DESCRIPTOR)
    if not (_present(fields, "budget_max") or _present(fields, "price_range")):
        missing.append(BUDGET_SIGNAL)
    return missing


def check_required_lead_fields(fields: Mapping[str, Any]) -> None:
    missing = missing_lead_categories(fields)
    if missing:
        needs = "; ".join(_MESSAGES[m] for m in missing)
        raise ValidationError(f"Lead is missing required information: {needs}", missing=missing)
