"""
Collaborator contracts the command pipeline calls through.

Concrete implementations live in realleads.repo.supabase_repo,
realleads.llm.openai_client and realleads.channels.providers; tests swap in
the in-memory fakes from tests/fake_providers.py.
"""
from __future__ import annotations
from typing import Any, Dict, List, Optional, Protocol

from .dtos import (
    Communication,
    CommunicationCreate,
    Lead,
    LeadCreate,
    LeadFilter,
    PendingMessage,
    PendingMessageCreate,
)


class CompletionClient(Protocol):
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        *,
        json_mode: bool = True,
    ) -> str: ...


class Transcriber(Protocol):
    async def transcribe(self, audio: bytes, filename: str) -> str: ...


class LeadRepository(Protocol):
    async def create_lead(self, lead: LeadCreate) -> Lead: ...

    async def get_leads(self, actor_id: str, filters: LeadFilter) -> List[Lead]: ...

    async def get_lead_by_id(self, lead_id: str, actor_id: str) -> Optional[Lead]: ...

    async def update_lead(self, lead_id: str, actor_id: str, patch: Dict[str, Any]) -> Lead:
        """Raises NotFoundOrForbidden when no row matches (id, owner)."""
        ...

    async def get_communications(
        self, lead_id: str, actor_id: str, channel: Optional[str] = None, limit: int = 50
    ) -> List[Communication]: ...

    async def create_communication(self, communication: CommunicationCreate) -> Communication: ...

    async def create_pending_message(self, message: PendingMessageCreate) -> PendingMessage: ...


class AuditLog(Protocol):
    async def record(
        self,
        actor: str,
        account_id: str,
        action_type: str,
        details: Dict[str, Any],
        outcome: str,
    ) -> bool: ...
