# tests/unit/test_sms_adapter.py
import pytest
import httpx
from realleads.channels.providers import sms


@pytest.mark.asyncio
async def test_sms_send_stub_mode(monkeypatch):
    """Stub mode (REALLEADS_LIVE_CHANNELS=0): returns fake provider_ref and queued status."""
    monkeypatch.setenv("REALLEADS_LIVE_CHANNELS", "0")

    result = await sms.send_sms("415-555-1234", "hello world", lead_id="L1")

    assert result["channel"] == "sms"
    assert result["lead_id"] == "L1"
    assert result["status"] == "queued"
    assert result["provider_ref"].startswith("stub-sms-")


@pytest.mark.asyncio
async def test_sms_send_live_mode_success(monkeypatch):
    """Live mode (REALLEADS_LIVE_CHANNELS=1): mocked Twilio response with sid."""
    monkeypatch.setenv("REALLEADS_LIVE_CHANNELS", "1")
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "tok")
    monkeypatch.setenv("TWILIO_SMS_FROM", "+15550000000")
    posted = {}

    class DummyResponse:
        def json(self): return {"sid": "SM123"}
        def raise_for_status(self): pass

    class DummyClient:
        def __init__(self, *a, **kw): pass
        async def __aenter__(self): return self
        async def __aexit__(self, *a): pass
        async def post(self, url, **kw):
            posted.update(url=url, **kw)
            return DummyResponse()

    monkeypatch.setattr("realleads.channels.providers.sms.httpx.AsyncClient", DummyClient)

    result = await sms.send_sms("415-555-1234", "live test", lead_id="L1")

    assert result["status"] == "sent"
    assert result["provider_ref"] == "SM123"
    assert posted["url"].endswith("/Accounts/AC123/Messages.json")
    assert posted["data"]["To"] == "+14155551234"
    assert posted["auth"] == ("AC123", "tok")


@pytest.mark.asyncio
async def test_sms_send_error_mapping(monkeypatch):
    """HTTP error should map to the failure taxonomy."""
    monkeypatch.setenv("REALLEADS_LIVE_CHANNELS", "1")
    monkeypatch.setenv("TWILIO_ACCOUNT_SID", "AC123")
    monkeypatch.setenv("TWILIO_AUTH_TOKEN", "tok")

    class DummyResponse:
        status_code = 429  # rate limit
        def raise_for_status(self):
            raise httpx.HTTPStatusError("fail", request=None, response=self)
        def json(self): return {}

    class DummyClient:
        def __init__(self, *a, **kw): pass
        async def __aenter__(self): return self
        async def __aexit__(self, *a): pass
        async def post(self, *a, **kw): return DummyResponse()

    monkeypatch.setattr("realleads.channels.providers.sms.httpx.AsyncClient", DummyClient)

    result = await sms.send_sms("415-555-1234", "error case", lead_id="L1")

    assert result["status"] == "RATE_LIMIT"
    assert result["provider_ref"] is None


@pytest.mark.parametrize(
    "number,expected",
    [
        ("415-555-1234", "+14155551234"),
        ("+447700900123", "+447700900123"),
        ("whatsapp:415-555-1234", "whatsapp:+14155551234"),
    ],
)
def test_to_e164(number, expected):
    assert sms.to_e164(number) == expected
