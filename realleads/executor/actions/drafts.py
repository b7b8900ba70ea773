# realleads/executor/actions/drafts.py
"""
draft_initial_followup: ask the LLM for a first-touch message to a lead.

The draft is returned for the agent to review; it is never sent or queued
here. Sending goes through create_pending_message or send_* in a later
command.
"""
from __future__ import annotations

import logging
from typing import List

from realleads.common.errors import NotFoundOrForbidden, ProviderError
from realleads.repo.dtos import Lead
from ..models import ActionOutcome, ExecutionContext, ExecutorDeps
from ..validators import DraftInitialFollowupParams

logger = logging.getLogger("realleads.actions.drafts")

DRAFT_SYSTEM_PROMPT = (
    "You write short follow-up messages for a real estate agent to send to a new lead. "
    "Use only the facts provided. Do not invent listings, prices or availability. "
    "Return the message text only, without a greeting line explaining what it is."
)

_LENGTH_HINT = {
    "sms": "Keep it under 320 characters.",
    "whatsapp": "Keep it under 500 characters.",
    "email": "Keep it under 150 words. Do not include a subject line.",
}


def _lead_facts(lead: Lead) -> List[str]:
    facts = [f"Name: {lead.display_name}"]
    if lead.property_address:
        facts.append(f"Property of interest: {lead.property_address}")
    if lead.neighborhood:
        facts.append(f"Neighborhood: {lead.neighborhood}")
    if lead.beds is not None and lead.baths is not None:
        facts.append(f"Looking for: {lead.beds} bed / {lead.baths:g} bath")
    if lead.budget_max:
        facts.append(f"Budget up to: ${lead.budget_max:,.0f}")
    elif lead.price_range:
        facts.append(f"Price range: {lead.price_range}")
    if lead.source:
        facts.append(f"Source: {lead.source}")
    if lead.notes:
        facts.append(f"Notes: {lead.notes}")
    return facts


async def draft_initial_followup(
    params: DraftInitialFollowupParams, ctx: ExecutionContext, deps: ExecutorDeps
) -> ActionOutcome:
    if deps.llm is None:
        raise ProviderError("No language model configured for drafting", provider="openai")

    lead = await deps.repo.get_lead_by_id(params.lead_id, ctx.actor_id)
    if lead is None:
        raise NotFoundOrForbidden(f"Lead not found or access denied: {params.lead_id}")

    user_prompt = "\n".join(
        [
            f"Channel: {params.channel}",
            f"Tone: {params.tone}",
            _LENGTH_HINT[params.channel],
            "",
            "Lead:",
            *_lead_facts(lead),
        ]
    )
    draft = await deps.llm.complete(
        DRAFT_SYSTEM_PROMPT, user_prompt, deps.draft_temperature, json_mode=False
    )
    logger.info(
        "FollowupDrafted",
        extra={"lead_id": lead.id, "channel": params.channel, "tone": params.tone, "length": len(draft)},
    )
    return ActionOutcome(
        data={
            "lead_id": lead.id,
            "channel": params.channel,
            "tone": params.tone,
            "draft": draft.strip(),
        },
        message=f"Drafted a {params.tone} {params.channel} follow-up for {lead.display_name} (not sent)",
    )
