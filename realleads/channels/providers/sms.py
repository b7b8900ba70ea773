import os
import uuid
import logging
import httpx
from typing import Any, Dict

__all__ = ["send_sms", "post_twilio_message", "should_stub", "to_e164"]

logger = logging.getLogger("realleads.sms")

TWILIO_API_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"

STATUS_MAP = {
    429: "RATE_LIMIT",
    500: "TEMPORARY_FAILURE",
    503: "TEMPORARY_FAILURE",
    400: "PERMANENT_FAILURE",
    401: "PERMANENT_FAILURE",
    403: "PERMANENT_FAILURE",
}


def to_e164(number: str) -> str:
    """415-555-1234 -> +14155551234; keeps a whatsapp: prefix and numbers already in E.164."""
    prefix = "whatsapp:" if number.startswith("whatsapp:") else ""
    raw = number[len(prefix):].strip()
    if raw.startswith("+"):
        return prefix + raw
    digits = "".join(ch for ch in raw if ch.isdigit())
    if len(digits) == 10:
        digits = "1" + digits
    return f"{prefix}+{digits}"


def should_stub() -> bool:
    """
    Stub mode is TRUE unless REALLEADS_LIVE_CHANNELS == "1".
    """
    live_mode = os.getenv("REALLEADS_LIVE_CHANNELS", "0") == "1"
    if not live_mode:
        logger.debug("ChannelStubMode", extra={"reason": "REALLEADS_LIVE_CHANNELS != 1"})
    return not live_mode


async def post_twilio_message(to: str, from_: str, body: str) -> Dict[str, Any]:
    """
    Perform the actual HTTP call to Twilio's Messages API.
    Used for both SMS and WhatsApp (the latter with whatsapp: prefixed numbers).
    """
    sid = os.getenv("TWILIO_ACCOUNT_SID")
    token = os.getenv("TWILIO_AUTH_TOKEN")
    if not sid or not token:
        raise RuntimeError("TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN missing. Cannot send real messages.")

    async with httpx.AsyncClient(timeout=15.0) as client:
        response = await client.post(
            TWILIO_API_URL.format(sid=sid),
            auth=(sid, token),
            data={"To": to_e164(to), "From": from_, "Body": body},
        )
        response.raise_for_status()
        data = response.json()

    return data if isinstance(data, dict) else {}


async def send_sms(to: str, body: str, *, lead_id: str) -> Dict[str, Any]:
    """
    Send SMS via Twilio, respecting stub mode and mapping provider responses.
    """
    if should_stub():
        return {
            "channel": "sms",
            "status": "queued",
            "provider_ref": f"stub-sms-{uuid.uuid4()}",
            "lead_id": lead_id,
            "request": {"to": to, "body": body},
        }

    try:
        provider_data = await post_twilio_message(to, os.getenv("TWILIO_SMS_FROM", ""), body)
        return {
            "channel": "sms",
            "status": "sent",
            "provider_ref": provider_data.get("sid") or f"live-sms-{uuid.uuid4()}",
            "lead_id": lead_id,
            "request": {"to": to, "body": body},
        }

    except httpx.HTTPStatusError as e:
        code = getattr(e.response, "status_code", 500)
        logger.warning("SmsSendHttpError", extra={"lead_id": lead_id, "status_code": code})
        return {
            "channel": "sms",
            "status": STATUS_MAP.get(code, "TEMPORARY_FAILURE"),
            "provider_ref": None,
            "lead_id": lead_id,
            "request": {"to": to, "body": body},
        }

    except httpx.HTTPError as e:
        logger.warning("SmsSendTransportError", extra={"lead_id": lead_id, "error": type(e).__name__})
        return {
            "channel": "sms",
            "status": "TEMPORARY_FAILURE",
            "provider_ref": None,
            "lead_id": lead_id,
            "request": {"to": to, "body": body},
        }
