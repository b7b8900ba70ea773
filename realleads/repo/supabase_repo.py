# realleads/repo/supabase_repo.py
from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient, acreate_client

from realleads.common.errors import NotFoundOrForbidden, ProviderError
from realleads.config import Settings
from .dtos import (
    Communication,
    CommunicationCreate,
    Lead,
    LeadCreate,
    LeadFilter,
    PendingMessage,
    PendingMessageCreate,
)

logger = logging.getLogger(__name__)

MAX_PAGE = 100


async def create_supabase_client(settings: Settings) -> AsyncClient:
    """Build the async Supabase client from settings."""
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("Supabase not configured: set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY")
    return await acreate_client(settings.SUPABASE_URL.rstrip("/"), settings.SUPABASE_SERVICE_ROLE_KEY)


def _token_expr(token: str) -> str:
    pattern = f"%{token}%"
    return ",".join(
        f"{col}.ilike.{pattern}" for col in ("first_name", "last_name", "email", "phone")
    )


def _search_expr(term: str) -> str:
    """
    Every whitespace-separated token must match one of the searchable columns,
    so "John Doe" finds first_name=John, last_name=Doe.
    """
    # PostgREST or=() syntax uses commas and parens as separators
    tokens = "".join(ch for ch in term if ch not in ",()").split()
    if not tokens:
        return ""
    if len(tokens) == 1:
        return _token_expr(tokens[0])
    return "and(" + ",".join(f"or({_token_expr(t)})" for t in tokens) + ")"


class SupabaseRepo:
    """
    Lead / communication / pending-message persistence against PostgREST.
    Every read and write is scoped by the owning agent id.
    Transport and API failures surface as ProviderError; nothing is retried here.
    """

    def __init__(self, client: AsyncClient):
        self.client = client

    async def _execute(self, op: str, query) -> List[Dict[str, Any]]:
        try:
            resp = await query.execute()
        except (APIError, httpx.HTTPError) as e:
            logger.error("SupabaseQueryFailed", extra={"op": op, "error": str(e)})
            raise ProviderError(f"{op} failed: {e}", provider="supabase") from e
        return resp.data or []

    # --- Leads ------------------------------------------------------------

    async def create_lead(self, lead: LeadCreate) -> Lead:
        row = lead.model_dump(mode="json", exclude_none=True)
        data = await self._execute("create_lead", self.client.table("leads").insert(row))
        created = Lead.model_validate(data[0])
        logger.info("LeadCreated", extra={"lead_id": created.id, "agent_id": lead.owner_agent_id})
        return created

    async def get_leads(self, actor_id: str, filters: LeadFilter) -> List[Lead]:
        q = self.client.table("leads").select("*").eq("owner_agent_id", actor_id)
        if filters.status:
            q = q.eq("status", filters.status)
        if filters.segments:
            q = q.ov("segments", filters.segments)
        if filters.tags:
            q = q.ov("tags", filters.tags)
        if filters.email:
            q = q.eq("email", filters.email)
        if filters.phone:
            q = q.eq("phone", filters.phone)
        if filters.neighborhood:
            q = q.ilike("neighborhood", filters.neighborhood)
        search = _search_expr(filters.search or "")
        if search:
            q = q.or_(search)

        limit = min(filters.limit, MAX_PAGE)
        q = q.order("created_at", desc=True).range(filters.offset, filters.offset + limit - 1)

        data = await self._execute("get_leads", q)
        logger.debug("LeadsFetched", extra={"agent_id": actor_id, "count": len(data)})
        return [Lead.model_validate(r) for r in data]

    async def get_lead_by_id(self, lead_id: str, actor_id: str) -> Optional[Lead]:
        q = (
            self.client.table("leads")
            .select("*")
            .eq("id", lead_id)
            .eq("owner_agent_id", actor_id)
            .limit(1)
        )
        data = await self._execute("get_lead_by_id", q)
        return Lead.model_validate(data[0]) if data else None

    async def update_lead(self, lead_id: str, actor_id: str, patch: Dict[str, Any]) -> Lead:
        q = (
            self.client.table("leads")
            .update(patch)
            .eq("id", lead_id)
            .eq("owner_agent_id", actor_id)
        )
        data = await self._execute("update_lead", q)
        if not data:
            raise NotFoundOrForbidden(f"Lead not found or access denied: {lead_id}")
        logger.info("LeadUpdated", extra={"lead_id": lead_id, "agent_id": actor_id, "fields": sorted(patch)})
        return Lead.model_validate(data[0])

    # --- Communications -----------------------------------------------------

    async def get_communications(
        self, lead_id: str, actor_id: str, channel: Optional[str] = None, limit: int = 50
    ) -> List[Communication]:
        q = (
            self.client.table("communications")
            .select("*")
            .eq("lead_id", lead_id)
            .eq("agent_id", actor_id)
        )
        if channel:
            q = q.eq("channel", channel)
        q = q.order("created_at", desc=True).limit(min(limit, MAX_PAGE))
        data = await self._execute("get_communications", q)
        return [Communication.model_validate(r) for r in data]

    async def create_communication(self, communication: CommunicationCreate) -> Communication:
        row = communication.model_dump(mode="json", exclude_none=True)
        data = await self._execute("create_communication", self.client.table("communications").insert(row))
        return Communication.model_validate(data[0])

    # --- Pending messages ---------------------------------------------------

    async def create_pending_message(self, message: PendingMessageCreate) -> PendingMessage:
        row = message.model_dump(mode="json", exclude_none=True)
        data = await self._execute("create_pending_message", self.client.table("pending_messages").insert(row))
        created = PendingMessage.model_validate(data[0])
        logger.info(
            "PendingMessageCreated",
            extra={
                "message_id": created.id,
                "lead_id": message.lead_id,
                "requires_approval": message.requires_approval,
            },
        )
        return created
