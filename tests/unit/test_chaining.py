# tests/unit/test_chaining.py
import pytest

from realleads.executor.chaining import resolve_step
from realleads.executor.models import ActionResult
from realleads.orchestrator.schemas import Action, ActionType

GET_LEADS_OK = ActionResult(
    success=True,
    action_type="get_leads",
    data={"leads": [{"id": "L1"}, {"id": "L2"}], "count": 2},
    message="Found 2 leads",
)


@pytest.mark.parametrize("placeholder", ["{{lead_id}}", "from_get_leads", "", None])
def test_placeholder_filled_from_first_lead(placeholder):
    params = {"budget_max": 1_500_000}
    if placeholder is not None:
        params["lead_id"] = placeholder
    action = Action(type=ActionType.UPDATE_LEAD, params=params)

    step = resolve_step(action, GET_LEADS_OK)

    assert step.params["lead_id"] == "L1"
    assert step.injected_lead_id == "L1"
    # the original action is untouched
    assert action.params == params


def test_explicit_id_is_kept():
    action = Action(type=ActionType.UPDATE_LEAD, params={"lead_id": "L7"})
    step = resolve_step(action, GET_LEADS_OK)
    assert step.params["lead_id"] == "L7"
    assert step.injected_lead_id is None


def test_no_injection_after_failed_get_leads():
    failed = GET_LEADS_OK.model_copy(update={"success": False})
    step = resolve_step(Action(type=ActionType.SEND_SMS, params={"lead_id": "{{lead_id}}"}), failed)
    assert step.params["lead_id"] == "{{lead_id}}"


def test_no_injection_after_empty_result():
    empty = GET_LEADS_OK.model_copy(update={"data": {"leads": [], "count": 0}})
    step = resolve_step(Action(type=ActionType.UPDATE_LEAD, params={"lead_id": "{{x}}"}), empty)
    assert step.params["lead_id"] == "{{x}}"


def test_no_injection_when_previous_is_not_get_leads():
    other = GET_LEADS_OK.model_copy(update={"action_type": "create_lead"})
    step = resolve_step(Action(type=ActionType.UPDATE_LEAD, params={"lead_id": "{{x}}"}), other)
    assert step.injected_lead_id is None


def test_non_targeted_actions_untouched():
    step = resolve_step(Action(type=ActionType.GET_LEADS, params={"status": "hot"}), GET_LEADS_OK)
    assert "lead_id" not in step.params


def test_first_action_has_no_previous():
    step = resolve_step(Action(type=ActionType.UPDATE_LEAD, params={"lead_id": "{{x}}"}), None)
    assert step.params["lead_id"] == "{{x}}"
