# tests/unit/test_validators.py
import pytest

from realleads.common.errors import ValidationError
from realleads.executor.validators import (
    LEAD_TARGETED,
    PARAM_MODELS,
    CreateLeadParams,
    GetLeadsParams,
    is_placeholder,
    normalize_phone,
    parse_money,
    validate_action_params,
)
from realleads.orchestrator.schemas import ActionType


def test_every_action_type_has_a_schema():
    assert set(PARAM_MODELS) == set(ActionType)


def test_lead_targeted_actions():
    assert ActionType.UPDATE_LEAD in LEAD_TARGETED
    assert ActionType.SEND_SMS in LEAD_TARGETED
    assert ActionType.GET_LEADS not in LEAD_TARGETED
    assert ActionType.CREATE_LEAD not in LEAD_TARGETED


@pytest.mark.parametrize(
    "raw",
    ["(415) 555-1234", "415.555.1234", "4155551234", "+1 415 555 1234", "415-555-1234"],
)
def test_phone_normalized(raw):
    assert normalize_phone(raw) == "415-555-1234"


def test_phone_wrong_length_rejected():
    with pytest.raises(ValidationError) as exc:
        validate_action_params(ActionType.CREATE_LEAD, {"first_name": "A", "phone": "555-1234"})
    assert "phone" in str(exc.value)


@pytest.mark.parametrize("bad", ["sarah", "sarah@example", "@example.com"])
def test_email_requires_dotted_domain(bad):
    with pytest.raises(ValidationError):
        validate_action_params(ActionType.CREATE_LEAD, {"first_name": "Sarah", "email": bad})


@pytest.mark.parametrize(
    "raw,expected",
    [("$1.5M", 1_500_000), ("2,000,000", 2_000_000), ("750k", 750_000), (1200000, 1200000)],
)
def test_budget_parsing(raw, expected):
    assert parse_money(raw) == expected
    params = validate_action_params(ActionType.CREATE_LEAD, {"first_name": "A", "budget_max": raw})
    assert params.budget_max == expected


def test_status_is_case_insensitive():
    params = validate_action_params(ActionType.GET_LEADS, {"status": "HOT"})
    assert isinstance(params, GetLeadsParams)
    assert params.status == "hot"


def test_get_leads_limit_capped():
    with pytest.raises(ValidationError):
        validate_action_params(ActionType.GET_LEADS, {"limit": 500})


def test_revalidating_valid_params_is_a_noop():
    first = validate_action_params(
        ActionType.CREATE_LEAD,
        {
            "first_name": " Sarah ",
            "last_name": "Lee",
            "email": "sarah@example.com",
            "phone": "(415) 555 0000",
            "budget_max": "$1.5M",
            "status": "New",
            "neighborhood": "SOMA",
            "beds": 2,
            "baths": 2,
        },
    )
    again = validate_action_params(ActionType.CREATE_LEAD, first.model_dump(exclude_none=True))
    assert isinstance(again, CreateLeadParams)
    assert again == first


def test_unresolved_placeholder_fails_validation():
    with pytest.raises(ValidationError):
        validate_action_params(ActionType.UPDATE_LEAD, {"lead_id": "{{lead_id}}", "budget_max": 10})
    with pytest.raises(ValidationError):
        validate_action_params(ActionType.SEND_SMS, {"lead_id": "from_get_leads", "message_body": "hi"})


def test_update_lead_changes_excludes_target():
    params = validate_action_params(ActionType.UPDATE_LEAD, {"lead_id": "L1", "budget_max": 2_000_000})
    assert params.changes() == {"budget_max": 2_000_000}


@pytest.mark.parametrize(
    "value,expected",
    [(None, True), ("", True), ("{{lead_id}}", True), ("from_get_leads", True), ("L1", False)],
)
def test_is_placeholder(value, expected):
    assert is_placeholder(value) is expected


def test_content_actions_validate():
    params = validate_action_params(
        ActionType.SUMMARIZE_CONTENT_FOR_SEGMENTS, {"content": "Market is hot", "segments": ["Buyers"]}
    )
    assert params.segments == ["Buyers"]
    with pytest.raises(ValidationError):
        validate_action_params(ActionType.SUMMARIZE_CONTENT_FOR_SEGMENTS, {"content": "x", "segments": []})
