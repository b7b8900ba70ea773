# realleads/channels/providers/email.py
import os
import uuid
import httpx
import logging
from typing import Any, Dict, Optional

from .sms import STATUS_MAP, should_stub

__all__ = ["send_email"]

logger = logging.getLogger("realleads.email")

MANDRILL_SEND_URL = "https://mandrillapp.com/api/1.0/messages/send.json"


def _result(lead_id: str, status: str, provider_ref: Optional[str], request: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "channel": "email",
        "lead_id": lead_id,
        "provider_ref": provider_ref,
        "status": status,
        "request": request,
    }


def _mandrill_payload(to: str, subject: str, body: str) -> Dict[str, Any]:
    return {
        "key": os.getenv("MANDRILL_API_KEY", ""),
        "message": {
            "from_email": os.getenv("EMAIL_FROM", "noreply@example.com"),
            "to": [{"email": to, "type": "to"}],
            "subject": subject,
            "text": body,
        },
    }


async def send_email(to: str, subject: str, body: str, *, lead_id: str) -> Dict[str, Any]:
    """Send one plain-text email through Mandrill, or return a mock receipt in stub mode."""
    request = {"to": to, "subject": subject, "body": body}

    if should_stub():
        return _result(lead_id, "queued", f"mock-email-{uuid.uuid4().hex[:8]}", request)

    try:
        async with httpx.AsyncClient(timeout=15.0) as client:
            resp = await client.post(MANDRILL_SEND_URL, json=_mandrill_payload(to, subject, body))
            resp.raise_for_status()
            receipts = resp.json()
    except httpx.HTTPStatusError as e:
        code = getattr(e.response, "status_code", 500)
        logger.warning("EmailSendHttpError", extra={"lead_id": lead_id, "status_code": code})
        return _result(lead_id, STATUS_MAP.get(code, "TEMPORARY_FAILURE"), None, request)
    except httpx.HTTPError as e:
        logger.warning("EmailSendTransportError", extra={"lead_id": lead_id, "error": type(e).__name__})
        return _result(lead_id, "TEMPORARY_FAILURE", None, request)

    # Mandrill answers with one receipt per recipient
    msg_id = receipts[0].get("_id") if isinstance(receipts, list) and receipts else None
    return _result(lead_id, "sent", msg_id or uuid.uuid4().hex[:8], request)
