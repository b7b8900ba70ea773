# realleads/executor/actions/messages.py
"""
Communication handlers: get_communications, create_pending_message and the
three immediate sends.

Sends always go through MessageDispatcher. When the policy guard refuses a
send (protected segment) the message is queued for approval instead and the
action still succeeds, with data["redirected_to"] telling the caller so.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from realleads.channels.dispatcher import SUCCESS_STATUSES
from realleads.common.errors import NotFoundOrForbidden, ProviderError
from realleads.policy.guards import PolicyDenied
from realleads.repo.dtos import CommunicationCreate, Lead, PendingMessageCreate
from ..models import ActionOutcome, ExecutionContext, ExecutorDeps
from ..validators import (
    CreatePendingMessageParams,
    GetCommunicationsParams,
    SendEmailParams,
    SendSmsParams,
    SendWhatsAppParams,
)

logger = logging.getLogger("realleads.actions.messages")

_LABELS = {"sms": "SMS", "whatsapp": "WhatsApp message", "email": "Email"}


async def _load_lead(deps: ExecutorDeps, lead_id: str, actor_id: str) -> Lead:
    lead = await deps.repo.get_lead_by_id(lead_id, actor_id)
    if lead is None:
        raise NotFoundOrForbidden(f"Lead not found or access denied: {lead_id}")
    return lead


# ---------------------------------------------------------------------
# get_communications
# ---------------------------------------------------------------------
async def get_communications(
    params: GetCommunicationsParams, ctx: ExecutionContext, deps: ExecutorDeps
) -> ActionOutcome:
    lead = await _load_lead(deps, params.lead_id, ctx.actor_id)
    comms = await deps.repo.get_communications(
        lead.id, ctx.actor_id, channel=params.channel, limit=params.limit or 50
    )
    noun = "message" if len(comms) == 1 else "messages"
    where = f" on {params.channel}" if params.channel else ""
    return ActionOutcome(
        data={
            "lead_id": lead.id,
            "communications": [c.model_dump(mode="json") for c in comms],
            "count": len(comms),
        },
        message=f"Found {len(comms)} {noun}{where} with {lead.display_name}",
    )


# ---------------------------------------------------------------------
# create_pending_message
# ---------------------------------------------------------------------
async def _queue_for_approval(
    lead: Lead,
    channel: str,
    body: str,
    subject: Optional[str],
    requires_approval: bool,
    ctx: ExecutionContext,
    deps: ExecutorDeps,
) -> Dict[str, Any]:
    pending = await deps.repo.create_pending_message(
        PendingMessageCreate(
            lead_id=lead.id,
            agent_id=ctx.actor_id,
            channel=channel,
            message_body=body,
            subject=subject,
            requires_approval=requires_approval,
        )
    )
    return pending.model_dump(mode="json")


async def create_pending_message(
    params: CreatePendingMessageParams, ctx: ExecutionContext, deps: ExecutorDeps
) -> ActionOutcome:
    lead = await _load_lead(deps, params.lead_id, ctx.actor_id)
    pending = await _queue_for_approval(
        lead, params.channel, params.message_body, params.subject, params.requires_approval, ctx, deps
    )
    await deps.audit.record(
        ctx.actor_id,
        ctx.account_id,
        "create_pending_message",
        {"lead_id": lead.id, "channel": params.channel, "pending_message_id": pending["id"]},
        "success",
    )
    return ActionOutcome(
        data={"pending_message": pending},
        message=f"Message to {lead.display_name} queued for approval ({params.channel})",
    )


# ---------------------------------------------------------------------
# send_sms / send_whatsapp / send_email
# ---------------------------------------------------------------------
def _provider_metadata(result: Dict[str, Any], subject: Optional[str]) -> Dict[str, Any]:
    meta = {"provider_ref": result.get("provider_ref")}
    if subject:
        meta["subject"] = subject
    return meta


async def _send(
    action_type: str,
    channel: str,
    lead_id: str,
    body: str,
    subject: Optional[str],
    ctx: ExecutionContext,
    deps: ExecutorDeps,
) -> ActionOutcome:
    lead = await _load_lead(deps, lead_id, ctx.actor_id)

    try:
        result = await deps.dispatcher.dispatch(lead, channel, body, subject=subject)
    except PolicyDenied as e:
        pending = await _queue_for_approval(lead, channel, body, subject, True, ctx, deps)
        await deps.audit.record(
            ctx.actor_id,
            ctx.account_id,
            action_type,
            {
                "lead_id": lead.id,
                "channel": channel,
                "redirected_to": "create_pending_message",
                "reason": e.code,
                "pending_message_id": pending["id"],
            },
            "success",
        )
        logger.info(
            "SendRedirectedToApproval",
            extra={"lead_id": lead.id, "channel": channel, "reason": e.code},
        )
        return ActionOutcome(
            data={
                "redirected_to": "create_pending_message",
                "reason": e.code,
                "pending_message": pending,
            },
            message=f"{lead.display_name} is in a protected segment; {channel} message queued for approval",
        )

    status = result.get("status")
    delivered = status in SUCCESS_STATUSES
    communication = await deps.repo.create_communication(
        CommunicationCreate(
            lead_id=lead.id,
            agent_id=ctx.actor_id,
            channel=channel,
            direction="outbound",
            message_body=body,
            status=status if delivered else "failed",
            sent_at=datetime.now(timezone.utc) if delivered else None,
            failure_reason=None if delivered else status,
            metadata=_provider_metadata(result, subject),
        )
    )
    if not delivered:
        raise ProviderError(f"{channel} delivery to {lead.display_name} failed: {status}", provider=channel)

    await deps.audit.record(
        ctx.actor_id,
        ctx.account_id,
        action_type,
        {"lead_id": lead.id, "channel": channel, "communication_id": communication.id},
        "success",
    )

    return ActionOutcome(
        data={
            "communication": communication.model_dump(mode="json"),
            "provider_ref": result.get("provider_ref"),
            "status": status,
        },
        message=f"{_LABELS[channel]} sent to {lead.display_name}",
    )


async def send_sms(params: SendSmsParams, ctx: ExecutionContext, deps: ExecutorDeps) -> ActionOutcome:
    return await _send("send_sms", "sms", params.lead_id, params.message_body, None, ctx, deps)


async def send_whatsapp(
    params: SendWhatsAppParams, ctx: ExecutionContext, deps: ExecutorDeps
) -> ActionOutcome:
    return await _send("send_whatsapp", "whatsapp", params.lead_id, params.message_body, None, ctx, deps)


async def send_email(params: SendEmailParams, ctx: ExecutionContext, deps: ExecutorDeps) -> ActionOutcome:
    return await _send("send_email", "email", params.lead_id, params.body, params.subject, ctx, deps)
