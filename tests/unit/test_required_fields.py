# tests/unit/test_required_fields.py
import pytest

from realleads.common.errors import ValidationError
from realleads.policy.required_fields import (
    BUDGET_SIGNAL,
    CONTACT_METHOD,
    NAME,
    PROPERTY_DESCRIPTOR,
    check_required_lead_fields,
    missing_lead_categories,
)

COMPLETE = {
    "first_name": "Sarah",
    "email": "sarah@example.com",
    "property_address": "1 Market St",
    "budget_max": 1_500_000,
}


def test_complete_lead_passes():
    assert missing_lead_categories(COMPLETE) == []
    check_required_lead_fields(COMPLETE)


def test_name_only_misses_everything_else():
    assert missing_lead_categories({"first_name": "John"}) == [CONTACT_METHOD, PROPERTY_DESCRIPTOR, BUDGET_SIGNAL]


def test_blank_name_counts_as_missing():
    assert NAME in missing_lead_categories({**COMPLETE, "first_name": "  "})


def test_phone_satisfies_contact():
    fields = {**COMPLETE, "email": None, "phone": "415-555-0000"}
    assert missing_lead_categories(fields) == []


def test_neighborhood_needs_beds_and_baths():
    fields = {k: v for k, v in COMPLETE.items() if k != "property_address"}
    assert missing_lead_categories({**fields, "neighborhood": "SOMA", "beds": 2}) == [PROPERTY_DESCRIPTOR]
    assert missing_lead_categories({**fields, "neighborhood": "SOMA", "beds": 2, "baths": 2}) == []


def test_price_range_satisfies_budget():
    fields = {k: v for k, v in COMPLETE.items() if k != "budget_max"}
    assert missing_lead_categories({**fields, "price_range": "1M-1.5M"}) == []


def test_check_raises_with_missing_categories():
    with pytest.raises(ValidationError) as exc:
        check_required_lead_fields({"first_name": "John"})
    assert exc.value.missing == [CONTACT_METHOD, PROPERTY_DESCRIPTOR, BUDGET_SIGNAL]
    assert exc.value.code == "validation_error"
