# realleads/channels/dispatcher.py
"""
Single choke point for outbound messages.

Every send goes through MessageDispatcher.dispatch, which runs the policy
guard before any provider is touched. A lead in a protected segment raises
PolicyDenied and nothing is sent; the caller decides where the message goes
instead.
"""
from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from realleads.channels.providers.email import send_email
from realleads.channels.providers.sms import send_sms
from realleads.channels.providers.whatsapp import send_whatsapp
from realleads.common.errors import ValidationError
from realleads.policy.guards import check_protected_segment
from realleads.repo.dtos import Lead

logger = logging.getLogger("realleads.dispatch")

SUCCESS_STATUSES = frozenset({"sent", "queued"})

TextSender = Callable[..., Awaitable[Dict[str, Any]]]


class MessageDispatcher:
    def __init__(
        self,
        *,
        sms: TextSender = send_sms,
        whatsapp: TextSender = send_whatsapp,
        email: TextSender = send_email,
    ) -> None:
        self._sms = sms
        self._whatsapp = whatsapp
        self._email = email

    async def dispatch(
        self, lead: Lead, channel: str, body: str, subject: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Send one message to a lead over sms | whatsapp | email.

        Raises:
            PolicyDenied: lead is in a protected segment (nothing sent)
            ValidationError: lead has no address for the channel
        """
        check_protected_segment(lead.id, lead.segments)

        if channel in ("sms", "whatsapp"):
            if not lead.phone:
                raise ValidationError(f"Lead {lead.id} has no phone number for {channel}")
            sender = self._sms if channel == "sms" else self._whatsapp
            result = await sender(lead.phone, body, lead_id=lead.id)
        elif channel == "email":
            if not lead.email:
                raise ValidationError(f"Lead {lead.id} has no email address")
            result = await self._email(lead.email, subject or "", body, lead_id=lead.id)
        else:
            raise ValidationError(f"Unsupported channel: {channel}")

        logger.info(
            "MessageDispatched",
            extra={
                "lead_id": lead.id,
                "channel": channel,
                "status": result.get("status"),
                "provider_ref": result.get("provider_ref"),
            },
        )
        return result
