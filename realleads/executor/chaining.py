# realleads/executor/chaining.py
"""
Lead-id chaining between consecutive actions.

"Update John's budget" arrives as get_leads(search="John") followed by
update_lead(lead_id="{{lead_id}}"). resolve_step fills the placeholder with the
first lead the previous step returned. Pure: the Action is never mutated.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from realleads.orchestrator.schemas import Action, ActionType
from .models import ActionResult
from .validators import LEAD_TARGETED, is_placeholder

logger = logging.getLogger("realleads.executor")


class ResolvedStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    action_type: ActionType
    params: Dict[str, Any]
    injected_lead_id: Optional[str] = None


def _first_lead_id(result: Optional[ActionResult]) -> Optional[str]:
    if result is None or not result.success or result.action_type != ActionType.GET_LEADS.value:
        return None
    leads = (result.data or {}).get("leads") or []
    if not leads:
        return None
    first = leads[0]
    lead_id = first.get("id") if isinstance(first, dict) else getattr(first, "id", None)
    return str(lead_id) if lead_id else None


def resolve_step(action: Action, previous: Optional[ActionResult]) -> ResolvedStep:
    params = dict(action.params)
    if action.type in LEAD_TARGETED and is_placeholder(params.get("lead_id")):
        lead_id = _first_lead_id(previous)
        if lead_id:
            params["lead_id"] = lead_id
            logger.info(
                "ChainedLeadIdInjected",
                extra={"action": action.type.value, "lead_id": lead_id},
            )
            return ResolvedStep(action_type=action.type, params=params, injected_lead_id=lead_id)
    return ResolvedStep(action_type=action.type, params=params)
