# realleads/web/server.py
# ---------------------------------------------------------------------------
# RealLeads command API entrypoint
# ---------------------------------------------------------------------------
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from realleads.channels.dispatcher import MessageDispatcher
from realleads.common.errors import (
    InvalidContext,
    InvalidInput,
    OrchestrationFailure,
    ProviderError,
    RealLeadsError,
    error_payload,
)
from realleads.common.tracing import setup_logging
from realleads.config import Settings, get_settings
from realleads.data.audit import SupabaseAuditLog
from realleads.executor.executor import Executor
from realleads.executor.models import ExecutorDeps
from realleads.llm.openai_client import OpenAIClient
from realleads.orchestrator.orchestrator import Orchestrator
from realleads.pipeline import CommandPipeline
from realleads.repo.supabase_repo import SupabaseRepo, create_supabase_client
from realleads.web import metrics
from realleads.web.middleware import setup_middleware
from realleads.web.routes_command import router as command_router

logger = logging.getLogger("realleads.web")

ERROR_STATUS = {
    InvalidInput: 400,
    InvalidContext: 400,
    OrchestrationFailure: 502,
    ProviderError: 502,
}


async def build_pipeline(settings: Settings) -> CommandPipeline:
    """Wire the production collaborators: Supabase, OpenAI, Twilio/Mandrill."""
    client = await create_supabase_client(settings)
    llm = OpenAIClient.from_settings(settings)
    deps = ExecutorDeps(
        repo=SupabaseRepo(client),
        audit=SupabaseAuditLog(client),
        dispatcher=MessageDispatcher(),
        llm=llm,
        draft_temperature=settings.DRAFT_TEMPERATURE,
    )
    return CommandPipeline(
        Orchestrator(llm, temperature=settings.ORCHESTRATOR_TEMPERATURE),
        Executor(deps),
        transcriber=llm,
    )


def _status_for(exc: RealLeadsError) -> int:
    for cls, status in ERROR_STATUS.items():
        if isinstance(exc, cls):
            return status
    return 500


# ---------------------------------------------------------------------------
# Application Factory
# ---------------------------------------------------------------------------
def create_app(pipeline: Optional[CommandPipeline] = None) -> FastAPI:
    """Build the web app. Tests pass a pipeline wired with fakes."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.pipeline is None:
            try:
                app.state.pipeline = await build_pipeline(settings)
                logger.info("PipelineReady")
            except RuntimeError as e:
                logger.warning("PipelineNotConfigured", extra={"error": str(e)})
        yield

    app = FastAPI(title="RealLeads Command API", lifespan=lifespan)
    app.state.pipeline = pipeline

    setup_middleware(app)
    app.include_router(command_router)
    app.include_router(metrics.router)

    @app.exception_handler(RealLeadsError)
    async def realleads_error_handler(request: Request, exc: RealLeadsError):
        status = _status_for(exc)
        log = logger.warning if status < 500 else logger.error
        log("CommandRejected", extra={"path": request.url.path, "error_code": exc.code, "status": status})
        return JSONResponse(status_code=status, content=error_payload(exc))

    @app.get("/healthz")
    def healthz():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


if __name__ == "__main__":
    port = int(os.getenv("PORT", 8000))
    uvicorn.run("realleads.web.server:create_app", factory=True, host="0.0.0.0", port=port)
