# realleads/web/routes_command.py
import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import BaseModel, Field

from realleads.common.errors import InvalidContext
from realleads.executor.models import ExecutionContext
from realleads.orchestrator.orchestrator import OrchestrationContext
from realleads.pipeline import CommandOutcome, CommandPipeline
from realleads.web import metrics

logger = logging.getLogger("realleads.web.command")

router = APIRouter(prefix="/api/command", tags=["command"])


# --- Deps ----------------------------------------------------------------------

class Identity(BaseModel):
    actor_id: str
    account_id: str
    user_id: Optional[str] = None


async def get_identity(request: Request) -> Identity:
    """
    Agent/account come from the upstream auth gateway as headers.
    An empty agent id is left for the orchestrator to reject.
    """
    account = request.headers.get("X-Account-Id", "").strip()
    if not account:
        raise InvalidContext("X-Account-Id header is required")
    return Identity(
        actor_id=request.headers.get("X-Agent-Id", "").strip(),
        account_id=account,
        user_id=request.headers.get("X-User-Id"),
    )


async def get_pipeline(request: Request) -> CommandPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise RuntimeError("Command pipeline not initialized on app.state.pipeline")
    return pipeline


# --- Schemas -------------------------------------------------------------------

class CommandContext(BaseModel):
    channel: Optional[str] = "web"
    lead_id: Optional[str] = None
    previous_messages: List[str] = Field(default_factory=list)
    timezone: Optional[str] = None


class CommandRequest(BaseModel):
    input: str
    context: CommandContext = Field(default_factory=CommandContext)


def _contexts(identity: Identity, ctx: CommandContext):
    orchestration = OrchestrationContext(
        actor_id=identity.actor_id,
        channel=ctx.channel,
        lead_id=ctx.lead_id,
        previous_messages=ctx.previous_messages,
    )
    execution = ExecutionContext(
        actor_id=identity.actor_id,
        account_id=identity.account_id,
        timezone=ctx.timezone,
        user_id=identity.user_id,
    )
    return orchestration, execution


def _observe(outcome: CommandOutcome, start: float) -> None:
    metrics.COMMAND_LATENCY.observe(time.monotonic() - start)
    metrics.COMMANDS_TOTAL.labels(mode=outcome.mode).inc()
    for r in outcome.results:
        metrics.ACTIONS_TOTAL.labels(
            action_type=r.action_type, outcome="success" if r.success else "failure"
        ).inc()


# --- Routes --------------------------------------------------------------------

@router.post("", response_model=CommandOutcome)
async def run_command(
    req: CommandRequest,
    identity: Identity = Depends(get_identity),
    pipeline: CommandPipeline = Depends(get_pipeline),
):
    start = time.monotonic()
    orchestration, execution = _contexts(identity, req.context)
    outcome = await pipeline.run(req.input, orchestration, execution)
    _observe(outcome, start)
    logger.info(
        "CommandHandled",
        extra={"actor_id": identity.actor_id, "mode": outcome.mode, "summary": outcome.summary},
    )
    return outcome


@router.post("/voice", response_model=CommandOutcome)
async def run_voice_command(
    audio: UploadFile = File(...),
    channel: Optional[str] = Form("voice"),
    lead_id: Optional[str] = Form(None),
    identity: Identity = Depends(get_identity),
    pipeline: CommandPipeline = Depends(get_pipeline),
):
    start = time.monotonic()
    data = await audio.read()
    orchestration, execution = _contexts(identity, CommandContext(channel=channel, lead_id=lead_id))
    outcome = await pipeline.run_audio(data, audio.filename or "voice-note.webm", orchestration, execution)
    _observe(outcome, start)
    logger.info(
        "VoiceCommandHandled",
        extra={"actor_id": identity.actor_id, "mode": outcome.mode, "summary": outcome.summary},
    )
    return outcome
