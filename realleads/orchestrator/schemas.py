# realleads/orchestrator/schemas.py
from __future__ import annotations
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

MAX_WORDS = 100


class ActionType(str, Enum):
    CREATE_LEAD = "create_lead"
    GET_LEADS = "get_leads"
    UPDATE_LEAD = "update_lead"
    GET_COMMUNICATIONS = "get_communications"
    DRAFT_INITIAL_FOLLOWUP = "draft_initial_followup"
    CREATE_PENDING_MESSAGE = "create_pending_message"
    SEND_SMS = "send_sms"
    SEND_WHATSAPP = "send_whatsapp"
    SEND_EMAIL = "send_email"
    INGEST_CONTENT = "ingest_content"
    SUMMARIZE_CONTENT_FOR_SEGMENTS = "summarize_content_for_segments"
    STAGE_CAMPAIGN_FROM_CONTENT = "stage_campaign_from_content"


RenderHint = Literal["table", "cards", "graph", "notice"]


class ActionUi(BaseModel):
    model_config = ConfigDict(frozen=True)

    render: Optional[RenderHint] = None
    summary: Optional[str] = None


class UiHint(BaseModel):
    model_config = ConfigDict(frozen=True)

    render: RenderHint
    summary: str


class Action(BaseModel):
    """One intended side effect. Params stay untyped until the executor validates them."""
    model_config = ConfigDict(frozen=True)

    type: ActionType
    params: Dict[str, Any] = Field(default_factory=dict)
    ui: Optional[ActionUi] = None


def _word_count(text: str) -> int:
    return len(text.split())


class ClarificationResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["clarification_needed"]
    explanation: str
    missing_fields: List[str] = Field(..., min_length=1)
    follow_up_question: str = Field(..., min_length=1)
    actions: List[Any] = Field(default_factory=list)

    @field_validator("explanation", "follow_up_question")
    @classmethod
    def _concise(cls, v: str) -> str:
        if _word_count(v) > MAX_WORDS:
            raise ValueError(f"must be at most {MAX_WORDS} words")
        return v

    @field_validator("follow_up_question")
    @classmethod
    def _non_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("follow_up_question must not be blank")
        return v

    @field_validator("missing_fields")
    @classmethod
    def _named_fields(cls, v: List[str]) -> List[str]:
        if any(not f.strip() for f in v):
            raise ValueError("missing_fields entries must be non-empty")
        return v

    @field_validator("actions")
    @classmethod
    def _no_actions(cls, v: List[Any]) -> List[Any]:
        if v:
            raise ValueError("clarification responses carry no actions")
        return v


class ExecuteResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: Literal["execute"]
    explanation: str
    actions: List[Action] = Field(..., min_length=1)
    ui: UiHint


OrchestratorResponse = Annotated[
    Union[ClarificationResponse, ExecuteResponse],
    Field(discriminator="mode"),
]

OrchestratorResponseAdapter: TypeAdapter[OrchestratorResponse] = TypeAdapter(OrchestratorResponse)
