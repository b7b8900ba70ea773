import httpx
import pytest
import realleads.channels.providers.email as email

@pytest.mark.asyncio
async def test_email_send_stub_mode():
    """Stub mode returns queued mock email."""
    result = await email.send_email("test@example.com", "Hi", "Body", lead_id="L1")
    assert result["status"] == "queued"
    assert "mock-email" in result["provider_ref"]
    assert result["request"]["subject"] == "Hi"

@pytest.mark.asyncio
async def test_email_send_live_mode_success(monkeypatch):
    """Live mode returns sent."""
    monkeypatch.setenv("REALLEADS_LIVE_CHANNELS", "1")

    class DummyResponse:
        def json(self): return [{"_id": "msg-123"}]
        def raise_for_status(self): pass

    class DummyClient:
        def __init__(self, *a, **kw): pass
        async def __aenter__(self): return self
        async def __aexit__(self, *a): pass
        async def post(self, *a, **kw): return DummyResponse()

    monkeypatch.setattr("realleads.channels.providers.email.httpx.AsyncClient", DummyClient)
    result = await email.send_email("real@example.com", "Live", "Body", lead_id="L2")
    assert result["status"] == "sent"
    assert result["provider_ref"] == "msg-123"

@pytest.mark.asyncio
async def test_email_send_error_mapping(monkeypatch):
    """HTTP errors map to the failure taxonomy."""
    monkeypatch.setenv("REALLEADS_LIVE_CHANNELS", "1")

    class DummyResponse:
        status_code = 429
        def raise_for_status(self):
            raise httpx.HTTPStatusError("fail", request=None, response=self)
        def json(self): return {}

    class DummyClient:
        def __init__(self, *a, **kw): pass
        async def __aenter__(self): return self
        async def __aexit__(self, *a): pass
        async def post(self, *a, **kw): return DummyResponse()

    monkeypatch.setattr("realleads.channels.providers.email.httpx.AsyncClient", DummyClient)
    result = await email.send_email("rate@example.com", "Err", "Body", lead_id="L3")
    assert result["status"] == "RATE_LIMIT"
