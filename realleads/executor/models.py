# realleads/executor/models.py
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from realleads.repo.interfaces import AuditLog, CompletionClient, LeadRepository

if TYPE_CHECKING:
    from realleads.channels.dispatcher import MessageDispatcher


class ExecutionContext(BaseModel):
    """Who is acting. account_id is resolved by the caller; the executor never guesses it."""
    model_config = ConfigDict(frozen=True)

    actor_id: Optional[str] = None
    account_id: str
    timezone: Optional[str] = None
    user_id: Optional[str] = None


class ActionOutcome(BaseModel):
    """What a handler hands back on completion; failures are raised, not returned."""
    data: Dict[str, Any] = Field(default_factory=dict)
    message: str


class ActionResult(BaseModel):
    success: bool
    action_type: str
    data: Optional[Dict[str, Any]] = None
    message: str
    error: Optional[str] = None
    error_code: Optional[str] = None


class ExecutionResult(BaseModel):
    overall_success: bool
    results: List[ActionResult]
    summary: str


@dataclass
class ExecutorDeps:
    """Collaborators shared by every handler in one executor."""
    repo: LeadRepository
    audit: AuditLog
    dispatcher: "MessageDispatcher"
    llm: Optional[CompletionClient] = None
    draft_temperature: float = 0.7
