# realleads/orchestrator/parser.py
from __future__ import annotations

import json
import re
from typing import TypeGuard, Union

from pydantic import ValidationError as PydanticValidationError

from realleads.common.errors import ParseError, SchemaError
from .schemas import (
    ClarificationResponse,
    ExecuteResponse,
    OrchestratorResponseAdapter,
)

# One fenced wrapper around the whole payload: ```json ... ``` or ``` ... ```
_FENCE = re.compile(r"^```(?:json)?[ \t]*\n?(.*?)\n?[ \t]*```$", re.DOTALL | re.IGNORECASE)


def strip_code_fence(text: str) -> str:
    cleaned = text.strip()
    m = _FENCE.match(cleaned)
    return m.group(1).strip() if m else cleaned


def _format_issues(err: PydanticValidationError) -> list[str]:
    issues = []
    for e in err.errors():
        loc = ".".join(str(p) for p in e.get("loc", ()))
        issues.append(f"{loc}: {e.get('msg')}" if loc else str(e.get("msg")))
    return issues


def parse(raw_text: str) -> Union[ClarificationResponse, ExecuteResponse]:
    """
    Turn raw model output into a typed OrchestratorResponse.

    Raises ParseError for anything that is not JSON (after removing a single
    code fence) and SchemaError for JSON that breaks the response contract,
    including unknown action types.
    """
    cleaned = strip_code_fence(raw_text or "")
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse orchestrator response as JSON: {e}") from e

    if not isinstance(payload, dict):
        raise SchemaError(
            "Orchestrator response validation failed: top-level value must be an object",
            issues=["<root>: expected object"],
        )

    try:
        return OrchestratorResponseAdapter.validate_python(payload)
    except PydanticValidationError as e:
        issues = _format_issues(e)
        raise SchemaError(
            f"Orchestrator response validation failed: {', '.join(issues)}", issues=issues
        ) from e


def is_clarification(
    response: Union[ClarificationResponse, ExecuteResponse],
) -> TypeGuard[ClarificationResponse]:
    return response.mode == "clarification_needed"


def is_executable(
    response: Union[ClarificationResponse, ExecuteResponse],
) -> TypeGuard[ExecuteResponse]:
    return response.mode == "execute"
