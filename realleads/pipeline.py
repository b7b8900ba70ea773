# realleads/pipeline.py
"""
CommandPipeline: one natural-language command, end to end.

    validate input -> orchestrate -> clarification question
                                  -> or execute actions -> results + summary

Voice notes are transcribed first and then follow the same path.
"""
from __future__ import annotations

import logging
from typing import List, Literal, Optional

from pydantic import BaseModel

from realleads.common.errors import InvalidInput, ProviderError
from realleads.executor.executor import Executor
from realleads.executor.models import ActionResult, ExecutionContext
from realleads.orchestrator.orchestrator import OrchestrationContext, Orchestrator, validate_input
from realleads.orchestrator.parser import is_clarification
from realleads.orchestrator.schemas import UiHint
from realleads.repo.interfaces import Transcriber

logger = logging.getLogger("realleads.pipeline")


class CommandOutcome(BaseModel):
    mode: Literal["clarification_needed", "execute"]
    explanation: str
    # clarification
    missing_fields: List[str] = []
    follow_up_question: Optional[str] = None
    # execute
    ui: Optional[UiHint] = None
    overall_success: Optional[bool] = None
    results: List[ActionResult] = []
    summary: Optional[str] = None
    # set for voice commands
    transcript: Optional[str] = None


class CommandPipeline:
    def __init__(
        self,
        orchestrator: Orchestrator,
        executor: Executor,
        transcriber: Optional[Transcriber] = None,
    ) -> None:
        self.orchestrator = orchestrator
        self.executor = executor
        self.transcriber = transcriber

    async def run(
        self, text: str, context: OrchestrationContext, execution: ExecutionContext
    ) -> CommandOutcome:
        ok, error = validate_input(text)
        if not ok:
            raise InvalidInput(error or "Invalid input")

        response = await self.orchestrator.orchestrate(text, context)
        if is_clarification(response):
            logger.info(
                "CommandNeedsClarification",
                extra={"actor_id": context.actor_id, "missing_fields": list(response.missing_fields)},
            )
            return CommandOutcome(
                mode=response.mode,
                explanation=response.explanation,
                missing_fields=list(response.missing_fields),
                follow_up_question=response.follow_up_question,
            )

        result = await self.executor.execute_all(response.actions, execution)
        return CommandOutcome(
            mode=response.mode,
            explanation=response.explanation,
            ui=response.ui,
            overall_success=result.overall_success,
            results=result.results,
            summary=result.summary,
        )

    async def run_audio(
        self,
        audio: bytes,
        filename: str,
        context: OrchestrationContext,
        execution: ExecutionContext,
    ) -> CommandOutcome:
        if self.transcriber is None:
            raise ProviderError("No transcriber configured for voice commands", provider="openai")
        if not audio:
            raise InvalidInput("Audio upload is empty")

        transcript = await self.transcriber.transcribe(audio, filename)
        logger.info("VoiceCommandTranscribed", extra={"actor_id": context.actor_id, "length": len(transcript)})
        outcome = await self.run(transcript, context, execution)
        return outcome.model_copy(update={"transcript": transcript})
