# realleads/executor/validators.py
"""
Per-action parameter schemas.

Every ActionType that reaches the executor is checked against exactly one of
these models just before dispatch; handlers only ever see the validated
model. Validation is pure: no I/O, and validating an already-validated
payload (``model.model_dump(exclude_none=True)``) yields an equal model.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, field_validator

from realleads.common.errors import ValidationError
from realleads.orchestrator.schemas import ActionType

LeadStatus = Literal["new", "nurture", "hot", "closed", "lost"]
MessageChannel = Literal["sms", "whatsapp", "email"]

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_MONEY = re.compile(r"^\$?\s*([0-9][0-9,]*(?:\.[0-9]+)?)\s*([kKmMbB])?$")
_MULTIPLIER = {"k": 1_000, "m": 1_000_000, "b": 1_000_000_000}


def is_placeholder(value: Any) -> bool:
    """True for ids the model could not know yet, e.g. '{{lead_id}}' or 'from_get_leads'."""
    if value is None:
        return True
    if not isinstance(value, str):
        return False
    v = value.strip()
    return not v or "{{" in v or "from_" in v


def normalize_phone(value: str) -> str:
    digits = re.sub(r"\D", "", value)
    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) != 10:
        raise ValueError("Phone number must be exactly 10 digits (including area code)")
    return f"{digits[0:3]}-{digits[3:6]}-{digits[6:10]}"


def normalize_email(value: str) -> str:
    v = value.strip()
    if not _EMAIL.match(v):
        raise ValueError("Email must contain @ symbol and a domain with a period (.)")
    return v


def parse_money(value: Any) -> Any:
    """Accept 1500000, '1,500,000', '$1.5M', '750k'. Anything else is left for pydantic."""
    if isinstance(value, str):
        m = _MONEY.match(value.strip())
        if m:
            amount = float(m.group(1).replace(",", ""))
            if m.group(2):
                amount *= _MULTIPLIER[m.group(2).lower()]
            return amount
    return value


# ============================================================================
# Lead action params
# ============================================================================

class _Params(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class _LeadFields(_Params):
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    property_address: Optional[str] = None
    neighborhood: Optional[str] = None
    beds: Optional[int] = Field(default=None, gt=0)
    baths: Optional[float] = Field(default=None, gt=0)
    price_range: Optional[str] = None
    budget_min: Optional[float] = Field(default=None, gt=0)
    budget_max: Optional[float] = Field(default=None, gt=0)
    source: Optional[str] = None
    status: Optional[LeadStatus] = None
    segments: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        return normalize_email(v) if v else None

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: Optional[str]) -> Optional[str]:
        return normalize_phone(v) if v else None

    @field_validator("budget_min", "budget_max", mode="before")
    @classmethod
    def _money(cls, v: Any) -> Any:
        return parse_money(v)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class _LeadTarget(_Params):
    lead_id: str = Field(..., min_length=1)

    @field_validator("lead_id")
    @classmethod
    def _resolved(cls, v: str) -> str:
        if is_placeholder(v):
            raise ValueError("lead_id is a placeholder that was not resolved")
        return v


class CreateLeadParams(_LeadFields):
    first_name: str = Field(..., min_length=1)


class UpdateLeadParams(_LeadTarget, _LeadFields):
    first_name: Optional[str] = Field(default=None, min_length=1)

    def changes(self) -> Dict[str, Any]:
        """Fields the caller actually set, without the target id."""
        return self.model_dump(exclude={"lead_id"}, exclude_none=True)


class GetLeadsParams(_Params):
    status: Optional[LeadStatus] = None
    segments: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    neighborhood: Optional[str] = None
    search: Optional[str] = None
    limit: Optional[int] = Field(default=None, gt=0, le=100)
    offset: Optional[int] = Field(default=None, ge=0)

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


# ============================================================================
# Communication / message params
# ============================================================================

class GetCommunicationsParams(_LeadTarget):
    channel: Optional[Literal["email", "sms", "whatsapp", "phone"]] = None
    limit: Optional[int] = Field(default=None, gt=0, le=100)


class DraftInitialFollowupParams(_LeadTarget):
    tone: Literal["professional", "casual", "warm"] = "professional"
    channel: MessageChannel = "email"


class CreatePendingMessageParams(_LeadTarget):
    channel: MessageChannel
    message_body: str = Field(..., min_length=1)
    subject: Optional[str] = None
    requires_approval: bool = True


class SendSmsParams(_LeadTarget):
    message_body: str = Field(..., min_length=1)


class SendWhatsAppParams(_LeadTarget):
    message_body: str = Field(..., min_length=1)


class SendEmailParams(_LeadTarget):
    subject: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)


# ============================================================================
# Content & campaign params
# ============================================================================

class IngestContentParams(_Params):
    content: str = Field(..., min_length=1)
    content_type: Optional[Literal["listing", "market_report", "newsletter", "other"]] = None


class SummarizeContentForSegmentsParams(_Params):
    content: str = Field(..., min_length=1)
    segments: List[str] = Field(..., min_length=1)


class StageCampaignFromContentParams(_Params):
    content: str = Field(..., min_length=1)
    target_segments: Optional[List[str]] = None
    send_immediately: Optional[bool] = None


PARAM_MODELS: Dict[ActionType, Type[BaseModel]] = {
    ActionType.CREATE_LEAD: CreateLeadParams,
    ActionType.GET_LEADS: GetLeadsParams,
    ActionType.UPDATE_LEAD: UpdateLeadParams,
    ActionType.GET_COMMUNICATIONS: GetCommunicationsParams,
    ActionType.DRAFT_INITIAL_FOLLOWUP: DraftInitialFollowupParams,
    ActionType.CREATE_PENDING_MESSAGE: CreatePendingMessageParams,
    ActionType.SEND_SMS: SendSmsParams,
    ActionType.SEND_WHATSAPP: SendWhatsAppParams,
    ActionType.SEND_EMAIL: SendEmailParams,
    ActionType.INGEST_CONTENT: IngestContentParams,
    ActionType.SUMMARIZE_CONTENT_FOR_SEGMENTS: SummarizeContentForSegmentsParams,
    ActionType.STAGE_CAMPAIGN_FROM_CONTENT: StageCampaignFromContentParams,
}

# Action types whose params carry a lead_id target (eligible for chaining)
LEAD_TARGETED = frozenset(
    t for t, model in PARAM_MODELS.items() if "lead_id" in model.model_fields
)


def validate_action_params(action_type: ActionType, params: Dict[str, Any]) -> BaseModel:
    """
    Validate params for one action type.
    Raises realleads ValidationError with a readable list of problems.
    """
    model = PARAM_MODELS.get(ActionType(action_type))
    if model is None:
        raise ValidationError(f"Unknown action type: {action_type}")
    try:
        return model.model_validate(params or {})
    except PydanticValidationError as e:
        problems = ", ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"Parameter validation failed for {ActionType(action_type).value}: {problems}") from e
