# tests/conftest.py
import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv
from fastapi.testclient import TestClient
from faker import Faker

# --------------------------------------------------------------------------------------
# Early guard: prevent nested asyncio.run() even if used at import-time by product code.
# --------------------------------------------------------------------------------------
def pytest_sessionstart(session):
    import asyncio as _asyncio
    def _oops(*a, **k):
        raise RuntimeError("asyncio.run() should not be called at import time in tests")
    _asyncio.run = _oops  # type: ignore[attr-defined]

# --- Ensure project root is importable
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# --- Load env once for all tests
load_dotenv(dotenv_path=ROOT / ".env", override=False)

from realleads.channels.dispatcher import MessageDispatcher  # noqa: E402
from realleads.executor.executor import Executor  # noqa: E402
from realleads.executor.models import ExecutionContext, ExecutorDeps  # noqa: E402
from realleads.orchestrator.orchestrator import Orchestrator  # noqa: E402
from realleads.pipeline import CommandPipeline  # noqa: E402
from tests.fake_providers import (  # noqa: E402
    FakeAuditLog,
    FakeLeadRepo,
    FakeTranscriber,
    RecordingSender,
    ScriptedLLM,
)

AGENT_ID = "agent-1"
ACCOUNT_ID = "acct-1"


# 🔒 Guard during test execution: if any code calls asyncio.run(), fail fast.
@pytest.fixture(autouse=True)
def _ban_nested_asyncio_run(monkeypatch):
    import asyncio as _asyncio
    def _oops(*a, **k):
        raise RuntimeError("asyncio.run() should not be called from within tests")
    monkeypatch.setattr(_asyncio, "run", _oops, raising=True)


@pytest.fixture(autouse=True)
def stub_channels(monkeypatch):
    """Channel adapters never leave the process unless a test flips this."""
    monkeypatch.setenv("REALLEADS_LIVE_CHANNELS", "0")
    yield


# --- Collaborator fakes ---
@pytest.fixture()
def repo():
    return FakeLeadRepo()


@pytest.fixture()
def audit():
    return FakeAuditLog()


@pytest.fixture()
def senders():
    return {
        "sms": RecordingSender("sms"),
        "whatsapp": RecordingSender("whatsapp"),
        "email": RecordingSender("email"),
    }


@pytest.fixture()
def dispatcher(senders):
    return MessageDispatcher(sms=senders["sms"], whatsapp=senders["whatsapp"], email=senders["email"])


@pytest.fixture()
def draft_llm():
    return ScriptedLLM("Hi there! Thanks for reaching out about homes in SOMA.")


@pytest.fixture()
def deps(repo, audit, dispatcher, draft_llm):
    return ExecutorDeps(repo=repo, audit=audit, dispatcher=dispatcher, llm=draft_llm)


@pytest.fixture()
def executor(deps):
    return Executor(deps)


@pytest.fixture()
def ctx():
    return ExecutionContext(actor_id=AGENT_ID, account_id=ACCOUNT_ID)


# --- Test utilities ---
@pytest.fixture()
def fake_contact():
    f = Faker()
    return dict(
        first_name=f.first_name(),
        last_name=f.last_name(),
        email=f.unique.email(),
        phone=f"415-555-{f.random_int(1000, 9999)}",
    )



@pytest.fixture()
def make_client(deps):
    """
    TestClient around a pipeline wired with fakes.
    The orchestrator replays `replies`; voice uploads transcribe to `transcript`.
    """
    from realleads.web.server import create_app

    def _make(*replies, transcript=None):
        llm = ScriptedLLM(*replies)
        pipeline = CommandPipeline(
            Orchestrator(llm),
            Executor(deps),
            transcriber=FakeTranscriber(transcript) if transcript is not None else None,
        )
        client = TestClient(create_app(pipeline=pipeline))
        client.llm = llm
        return client

    return _make
