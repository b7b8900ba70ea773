from __future__ import annotations
from datetime import datetime
from typing import Literal, Optional, Any, Dict, List
from pydantic import BaseModel, Field

LeadStatus = Literal["new", "nurture", "hot", "closed", "lost"]
Channel = Literal["sms", "whatsapp", "email"]
CommunicationChannel = Literal["sms", "whatsapp", "email", "phone"]
Direction = Literal["inbound", "outbound"]

class LeadBase(BaseModel):
    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    property_address: Optional[str] = None
    neighborhood: Optional[str] = None
    beds: Optional[int] = None
    baths: Optional[float] = None
    price_range: Optional[str] = None
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    source: Optional[str] = None
    status: LeadStatus = "new"
    segments: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = None

class LeadCreate(LeadBase):
    account_id: str
    owner_agent_id: str
    consent_status: str = "pending"

class Lead(LeadCreate):
    id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}" if self.last_name else self.first_name

class LeadFilter(BaseModel):
    status: Optional[LeadStatus] = None
    segments: List[str] = Field(default_factory=list)   # overlap match
    tags: List[str] = Field(default_factory=list)       # overlap match
    email: Optional[str] = None
    phone: Optional[str] = None
    neighborhood: Optional[str] = None
    search: Optional[str] = None                        # name / email / phone
    limit: int = 50
    offset: int = 0

class CommunicationCreate(BaseModel):
    lead_id: str
    agent_id: str
    channel: CommunicationChannel
    direction: Direction = "outbound"
    message_body: str
    status: str = "pending"
    sent_at: Optional[datetime] = None
    failure_reason: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

class Communication(CommunicationCreate):
    id: str
    created_at: Optional[datetime] = None

class PendingMessageCreate(BaseModel):
    lead_id: str
    agent_id: str
    channel: Channel
    message_body: str
    subject: Optional[str] = None
    requires_approval: bool = True
    status: Literal["pending", "approved", "cancelled", "sent"] = "pending"

class PendingMessage(PendingMessageCreate):
    id: str
    created_at: Optional[datetime] = None
