# realleads/executor/actions/leads.py
"""
Lead handlers: create_lead, get_leads, update_lead.

Each handler receives its validated params model, re-checks the business
rules that must hold no matter what the model planned (required fields, HNW
tagging) and records an audit entry for writes.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from realleads.common.errors import NotFoundOrForbidden
from realleads.policy.required_fields import check_required_lead_fields
from realleads.policy.segments import HNW_SEGMENT, apply_hnw_to_patch, is_hnw_budget, segments_for_create
from realleads.repo.dtos import Lead, LeadCreate, LeadFilter
from ..models import ActionOutcome, ExecutionContext, ExecutorDeps
from ..validators import CreateLeadParams, GetLeadsParams, UpdateLeadParams

logger = logging.getLogger("realleads.actions.leads")

DEFAULT_LIMIT = 50


def _lead_dict(lead: Lead) -> Dict[str, Any]:
    return lead.model_dump(mode="json")


# ---------------------------------------------------------------------
# create_lead
# ---------------------------------------------------------------------
async def create_lead(
    params: CreateLeadParams, ctx: ExecutionContext, deps: ExecutorDeps
) -> ActionOutcome:
    fields = params.model_dump(exclude_none=True)
    check_required_lead_fields(fields)

    segments, tags = segments_for_create(params.segments, params.tags, params.budget_max)
    fields.update(segments=segments, tags=tags)
    lead = await deps.repo.create_lead(
        LeadCreate(account_id=ctx.account_id, owner_agent_id=ctx.actor_id, **fields)
    )

    await deps.audit.record(
        ctx.actor_id,
        ctx.account_id,
        "create_lead",
        {
            "lead_id": lead.id,
            "lead_name": lead.display_name,
            "email": lead.email,
            "phone": lead.phone,
            "budget_max": lead.budget_max,
            "segments": lead.segments,
        },
        "success",
    )
    logger.info(
        "LeadCreatedByCommand",
        extra={"lead_id": lead.id, "actor_id": ctx.actor_id, "hnw": HNW_SEGMENT in lead.segments},
    )
    return ActionOutcome(
        data={"lead": _lead_dict(lead)},
        message=f"Lead created successfully for {lead.display_name}",
    )


# ---------------------------------------------------------------------
# get_leads
# ---------------------------------------------------------------------
def describe_lead_query(count: int, params: GetLeadsParams) -> str:
    """Human-readable line such as 'Found 2 leads matching: status: hot'."""
    filters = params.model_dump(exclude_none=True, exclude={"limit", "offset"})
    if count == 0:
        return "No leads found matching your criteria" if filters else "You have no leads yet"

    parts: List[str] = []
    if params.status:
        parts.append(f"status: {params.status}")
    if params.segments:
        parts.append(f"segments: {', '.join(params.segments)}")
    if params.tags:
        parts.append(f"tags: {', '.join(params.tags)}")
    if params.email:
        parts.append(f"email: {params.email}")
    if params.phone:
        parts.append(f"phone: {params.phone}")
    if params.neighborhood:
        parts.append(f"neighborhood: {params.neighborhood}")
    if params.search:
        parts.append(f'search: "{params.search}"')

    noun = "lead" if count == 1 else "leads"
    if not parts:
        return f"Found {count} {noun}"
    return f"Found {count} {noun} matching: {', '.join(parts)}"


def leads_summary(leads: List[Lead], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Totals by status, High Net Worth count and leads added in the last 7 days."""
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=7)
    by_status: Dict[str, int] = {}
    hnw = 0
    recent = 0
    for lead in leads:
        by_status[lead.status] = by_status.get(lead.status, 0) + 1
        if HNW_SEGMENT in lead.segments or is_hnw_budget(lead.budget_max):
            hnw += 1
        created = lead.created_at
        if created is not None:
            if created.tzinfo is None:
                created = created.replace(tzinfo=timezone.utc)
            if created > cutoff:
                recent += 1
    return {"total": len(leads), "by_status": by_status, "hnw_count": hnw, "recently_added": recent}


async def get_leads(
    params: GetLeadsParams, ctx: ExecutionContext, deps: ExecutorDeps
) -> ActionOutcome:
    filters = LeadFilter(
        status=params.status,
        segments=params.segments or [],
        tags=params.tags or [],
        email=params.email,
        phone=params.phone,
        neighborhood=params.neighborhood,
        search=params.search,
        limit=params.limit or DEFAULT_LIMIT,
        offset=params.offset or 0,
    )
    leads = await deps.repo.get_leads(ctx.actor_id, filters)
    logger.info("LeadsQueried", extra={"actor_id": ctx.actor_id, "count": len(leads)})
    return ActionOutcome(
        data={
            "leads": [_lead_dict(lead) for lead in leads],
            "count": len(leads),
            "summary": leads_summary(leads),
        },
        message=describe_lead_query(len(leads), params),
    )


# ---------------------------------------------------------------------
# update_lead
# ---------------------------------------------------------------------
async def update_lead(
    params: UpdateLeadParams, ctx: ExecutionContext, deps: ExecutorDeps
) -> ActionOutcome:
    existing = await deps.repo.get_lead_by_id(params.lead_id, ctx.actor_id)
    if existing is None:
        raise NotFoundOrForbidden(f"Lead not found or access denied: {params.lead_id}")

    changes = params.changes()
    if not changes:
        return ActionOutcome(
            data={"lead": _lead_dict(existing), "updated_fields": []},
            message=f"No changes requested for {existing.display_name}",
        )

    patch = apply_hnw_to_patch(changes, existing.segments, existing.tags, existing.budget_max)
    lead = await deps.repo.update_lead(params.lead_id, ctx.actor_id, patch)

    old = existing.model_dump(mode="json")
    new = lead.model_dump(mode="json")
    diff = {k: {"old": old.get(k), "new": new.get(k)} for k in patch if old.get(k) != new.get(k)}
    await deps.audit.record(
        ctx.actor_id,
        ctx.account_id,
        "update_lead",
        {"lead_id": lead.id, "lead_name": lead.display_name, "changes": diff},
        "success",
    )

    updated = sorted(patch)
    return ActionOutcome(
        data={"lead": new, "updated_fields": updated},
        message=f"Successfully updated {lead.display_name} ({', '.join(updated)})",
    )
