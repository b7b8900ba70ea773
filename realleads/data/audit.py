# realleads/data/audit.py
from __future__ import annotations
import logging
from typing import Any, Dict

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

log = logging.getLogger("realleads.audit")


class SupabaseAuditLog:
    """
    Append-only audit trail in the `audit_log` table.

    Writing the trail must never fail the action that produced it: errors are
    logged and reported through the boolean return value.
    """

    def __init__(self, client: AsyncClient):
        self.client = client

    async def record(
        self,
        actor: str,
        account_id: str,
        action_type: str,
        details: Dict[str, Any],
        outcome: str,
    ) -> bool:
        row = {
            "account_id": account_id,
            "actor": actor,
            "parsed_action": action_type,
            "details": details or None,
            "status": outcome,
        }
        try:
            await self.client.table("audit_log").insert(row).execute()
        except (APIError, httpx.HTTPError) as e:
            log.error("AuditWriteFailed", extra={"action": action_type, "actor": actor, "error": str(e)})
            return False

        log.debug("AuditWritten", extra={"action": action_type, "actor": actor, "status": outcome})
        return True
