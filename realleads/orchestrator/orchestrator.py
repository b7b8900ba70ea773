# realleads/orchestrator/orchestrator.py
"""
Orchestrator
----------------------------------------------------------
- Wraps one free-form instruction with context (agent, channel, lead,
  previous messages) and asks the LLM for a JSON plan
- Parses the reply into ClarificationResponse | ExecuteResponse
- One corrective retry on malformed output, none on provider failures
- Never touches persistence or message providers
"""
from __future__ import annotations

import logging
import time
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from realleads.common.errors import (
    InvalidContext,
    OrchestrationFailure,
    OutputFormatError,
)
from realleads.repo.interfaces import CompletionClient
from .parser import parse
from .prompts import RETRY_INSTRUCTION, SYSTEM_PROMPT
from .schemas import ClarificationResponse, ExecuteResponse

logger = logging.getLogger("realleads.orchestrator")

MAX_INPUT_CHARS = 10_000
MAX_ATTEMPTS = 2


class OrchestrationContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    actor_id: str
    channel: Optional[str] = None
    lead_id: Optional[str] = None
    previous_messages: List[str] = Field(default_factory=list)


def build_user_prompt(instruction: str, context: OrchestrationContext) -> str:
    parts = [f"Agent ID: {context.actor_id}"]
    if context.channel:
        parts.append(f"Channel: {context.channel}")
    if context.lead_id:
        parts.append(f"Lead ID: {context.lead_id}")
    if context.previous_messages:
        numbered = "\n".join(f"{i}. {m}" for i, m in enumerate(context.previous_messages, start=1))
        parts.append(f"Previous messages:\n{numbered}")
    return f"{instruction}\n\nContext:\n" + "\n".join(parts)


def validate_input(text: Optional[str]) -> Tuple[bool, Optional[str]]:
    """Cheap pre-flight check. Returns (ok, error)."""
    if not text or not text.strip():
        return False, "Input cannot be empty"
    if len(text) > MAX_INPUT_CHARS:
        return False, "Input too long (max 10,000 characters)"
    return True, None


class Orchestrator:
    def __init__(self, llm: CompletionClient, temperature: float = 0.3) -> None:
        self.llm = llm
        self.temperature = temperature

    async def orchestrate(
        self, instruction: str, context: OrchestrationContext
    ) -> Union[ClarificationResponse, ExecuteResponse]:
        """
        Returns the parsed plan.

        Raises:
            InvalidContext: no actor id (the LLM is not called)
            ProviderError: transport/quota/timeout from the LLM, unretried
            OrchestrationFailure: output still malformed after one retry
        """
        if not context.actor_id or not context.actor_id.strip():
            raise InvalidContext("actor_id is required in orchestration context")

        user_prompt = build_user_prompt(instruction, context)
        logger.info(
            "OrchestratorRequest",
            extra={
                "input_length": len(instruction),
                "channel": context.channel,
                "lead_id": context.lead_id,
                "actor_id": context.actor_id,
            },
        )

        start = time.monotonic()
        for attempt in range(1, MAX_ATTEMPTS + 1):
            raw = await self.llm.complete(SYSTEM_PROMPT, user_prompt, self.temperature)
            logger.debug(
                "OrchestratorRawResponse",
                extra={"response_length": len(raw), "preview": raw[:200]},
            )
            try:
                parsed = parse(raw)
            except OutputFormatError as e:
                if attempt < MAX_ATTEMPTS:
                    logger.warning(
                        "OrchestratorRetry", extra={"attempt": attempt, "error": str(e)}
                    )
                    user_prompt = f"{user_prompt}\n\n{RETRY_INSTRUCTION}"
                    continue
                logger.error(
                    "OrchestratorFailed",
                    extra={
                        "duration_ms": int((time.monotonic() - start) * 1000),
                        "error": str(e),
                        "input": instruction[:100],
                        "actor_id": context.actor_id,
                        "retry_count": attempt - 1,
                    },
                )
                raise OrchestrationFailure(instruction, e) from e

            logger.info(
                "OrchestratorSuccess",
                extra={
                    "duration_ms": int((time.monotonic() - start) * 1000),
                    "mode": parsed.mode,
                    "action_count": len(parsed.actions) if parsed.mode == "execute" else 0,
                    "actor_id": context.actor_id,
                },
            )
            return parsed

        # unreachable: the last attempt either returns or raises
        raise OrchestrationFailure(instruction, RuntimeError("no attempts made"))
