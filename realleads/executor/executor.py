# realleads/executor/executor.py
"""
Executor
----------------------------------------------------------
- Runs a planned action list strictly in order, one await at a time
- Resolves lead-id placeholders from the previous get_leads result
- Validates each action's params right before its handler runs
- Contains failures per action: one bad action never stops the batch
- Aggregates results into overall_success + a one-line summary
"""
from __future__ import annotations

import logging
import time
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from realleads.common.errors import (
    ActionNotImplemented,
    InvalidContext,
    ValidationError,
    classify_exception,
)
from realleads.orchestrator.schemas import Action, ActionType
from .actions import drafts, leads, messages
from .chaining import ResolvedStep, resolve_step
from .models import ActionOutcome, ActionResult, ExecutionContext, ExecutionResult, ExecutorDeps
from .validators import validate_action_params

logger = logging.getLogger("realleads.executor")

Handler = Callable[[BaseModel, ExecutionContext, ExecutorDeps], Awaitable[ActionOutcome]]

# ingest_content, summarize_content_for_segments and stage_campaign_from_content
# have schemas but no handler yet.
DEFAULT_HANDLERS: Dict[ActionType, Handler] = {
    ActionType.CREATE_LEAD: leads.create_lead,
    ActionType.GET_LEADS: leads.get_leads,
    ActionType.UPDATE_LEAD: leads.update_lead,
    ActionType.GET_COMMUNICATIONS: messages.get_communications,
    ActionType.DRAFT_INITIAL_FOLLOWUP: drafts.draft_initial_followup,
    ActionType.CREATE_PENDING_MESSAGE: messages.create_pending_message,
    ActionType.SEND_SMS: messages.send_sms,
    ActionType.SEND_WHATSAPP: messages.send_whatsapp,
    ActionType.SEND_EMAIL: messages.send_email,
}

# Failures of these are written to the audit trail
MUTATING_ACTIONS = frozenset(
    {
        ActionType.CREATE_LEAD,
        ActionType.UPDATE_LEAD,
        ActionType.CREATE_PENDING_MESSAGE,
        ActionType.SEND_SMS,
        ActionType.SEND_WHATSAPP,
        ActionType.SEND_EMAIL,
    }
)


def summarize(results: Sequence[ActionResult]) -> str:
    total = len(results)
    ok = sum(1 for r in results if r.success)
    if ok == total:
        return f"Successfully executed {total} action{'' if total == 1 else 's'}"
    return f"Executed {total} actions: {ok} succeeded, {total - ok} failed"


class Executor:
    def __init__(self, deps: ExecutorDeps, handlers: Optional[Mapping[ActionType, Handler]] = None) -> None:
        self.deps = deps
        self.handlers: Dict[ActionType, Handler] = dict(DEFAULT_HANDLERS if handlers is None else handlers)

    async def execute_all(self, actions: Sequence[Action], context: ExecutionContext) -> ExecutionResult:
        if not context.actor_id or not context.actor_id.strip():
            raise InvalidContext("actor_id is required in execution context")

        logger.info(
            "ExecutingActions",
            extra={
                "count": len(actions),
                "actor_id": context.actor_id,
                "action_types": [a.type.value for a in actions],
            },
        )

        results: List[ActionResult] = []
        for action in actions:
            step = resolve_step(action, results[-1] if results else None)
            results.append(await self._run_step(step, context))

        summary = summarize(results)
        overall = all(r.success for r in results)
        logger.info(
            "ActionExecutionCompleted",
            extra={
                "total": len(results),
                "succeeded": sum(1 for r in results if r.success),
                "failed": sum(1 for r in results if not r.success),
                "actor_id": context.actor_id,
            },
        )
        return ExecutionResult(overall_success=overall, results=results, summary=summary)

    async def _audit_failure(self, step: ResolvedStep, context: ExecutionContext, error: Exception) -> None:
        # the action result is already decided; a broken audit store must not change it
        try:
            await self.deps.audit.record(
                context.actor_id,
                context.account_id,
                step.action_type.value,
                {"params": step.params, "error": str(error)},
                "failure",
            )
        except Exception as audit_error:  # noqa: BLE001
            logger.error(
                "AuditWriteFailed",
                extra={
                    "action": step.action_type.value,
                    "actor_id": context.actor_id,
                    "error": f"{type(audit_error).__name__}: {audit_error}",
                },
            )

    async def _run_step(self, step: ResolvedStep, context: ExecutionContext) -> ActionResult:
        action_type = step.action_type
        start = time.monotonic()

        try:
            params = validate_action_params(action_type, step.params)
        except ValidationError as e:
            return self._failed(action_type, e, context, start)

        handler = self.handlers.get(action_type)
        if handler is None:
            return self._failed(
                action_type,
                ActionNotImplemented(f"{action_type.value} action not yet implemented"),
                context,
                start,
            )

        try:
            outcome = await handler(params, context, self.deps)
        except Exception as e:  # noqa: BLE001
            if action_type in MUTATING_ACTIONS:
                await self._audit_failure(step, context, e)
            return self._failed(action_type, e, context, start)

        logger.debug(
            "ActionExecuted",
            extra={
                "action": action_type.value,
                "duration_ms": int((time.monotonic() - start) * 1000),
                "actor_id": context.actor_id,
            },
        )
        return ActionResult(
            success=True,
            action_type=action_type.value,
            data=outcome.data,
            message=outcome.message or f"{action_type.value} completed successfully",
        )

    def _failed(
        self, action_type: ActionType, exc: BaseException, context: ExecutionContext, start: float
    ) -> ActionResult:
        code, _ = classify_exception(exc)
        logger.error(
            "ActionFailed",
            extra={
                "action": action_type.value,
                "error_code": code,
                "error": str(exc),
                "actor_id": context.actor_id,
                "duration_ms": int((time.monotonic() - start) * 1000),
            },
            exc_info=code == "internal_error",
        )
        return ActionResult(
            success=False,
            action_type=action_type.value,
            data={"missing": exc.missing} if isinstance(exc, ValidationError) and exc.missing else None,
            message=f"Failed to execute {action_type.value}",
            error=str(exc),
            error_code=code,
        )
