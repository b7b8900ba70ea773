import os
import uuid
import logging
import httpx
from typing import Any, Dict

from .sms import STATUS_MAP, post_twilio_message, should_stub

__all__ = ["send_whatsapp"]

logger = logging.getLogger("realleads.whatsapp")


def _wa(number: str) -> str:
    return number if number.startswith("whatsapp:") else f"whatsapp:{number}"


async def send_whatsapp(to: str, body: str, *, lead_id: str) -> Dict[str, Any]:
    """Send a WhatsApp message through Twilio (or stub it)."""
    if should_stub():
        return {
            "channel": "whatsapp",
            "status": "queued",
            "provider_ref": f"stub-whatsapp-{uuid.uuid4()}",
            "lead_id": lead_id,
            "request": {"to": to, "body": body},
        }

    try:
        data = await post_twilio_message(_wa(to), _wa(os.getenv("TWILIO_WHATSAPP_FROM", "")), body)
        return {
            "channel": "whatsapp",
            "status": "sent",
            "provider_ref": data.get("sid") or f"live-whatsapp-{uuid.uuid4()}",
            "lead_id": lead_id,
            "request": {"to": to, "body": body},
        }
    except httpx.HTTPStatusError as e:
        code = getattr(e.response, "status_code", 500)
        logger.warning("WhatsappSendHttpError", extra={"lead_id": lead_id, "status_code": code})
        mapped = STATUS_MAP.get(code, "TEMPORARY_FAILURE")
    except httpx.HTTPError as e:
        logger.warning("WhatsappSendTransportError", extra={"lead_id": lead_id, "error": type(e).__name__})
        mapped = "TEMPORARY_FAILURE"

    return {
        "channel": "whatsapp",
        "status": mapped,
        "provider_ref": None,
        "lead_id": lead_id,
        "request": {"to": to, "body": body},
    }
