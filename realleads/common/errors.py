# realleads/common/errors.py
from __future__ import annotations
from typing import Any, Dict, List, Optional, Tuple

# ---- Canonical error classes ------------------------------------------------

class RealLeadsError(Exception):
    code: str = "unknown"
    retryable: bool = False

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


# ---- Command-level (halt the whole command) ---------------------------------

class InvalidContext(RealLeadsError):
    code, retryable = "invalid_context", False

class InvalidInput(RealLeadsError):
    code, retryable = "invalid_input", False

class OutputFormatError(RealLeadsError):
    """Model output could not be turned into a valid OrchestratorResponse."""
    code, retryable = "output_format", True

class ParseError(OutputFormatError):
    code = "parse_error"

class SchemaError(OutputFormatError):
    code = "schema_error"

    def __init__(self, message: str = "", issues: Optional[List[str]] = None):
        super().__init__(message)
        self.issues = issues or []

class ProviderError(RealLeadsError):
    """Transport failure talking to the LLM, persistence or a message provider."""
    code, retryable = "provider_error", False

    def __init__(self, message: str = "", provider: Optional[str] = None):
        super().__init__(message)
        self.provider = provider

class OrchestrationFailure(RealLeadsError):
    code, retryable = "orchestration_failed", False

    def __init__(self, instruction: str, cause: BaseException):
        preview = instruction[:50]
        super().__init__(f'Orchestration failed: {cause}. Input: "{preview}..."')
        self.instruction = instruction[:100]
        self.cause = cause


# ---- Action-level (recorded on the ActionResult, batch continues) -----------

class ValidationError(RealLeadsError):
    code, retryable = "validation_error", False

    def __init__(self, message: str = "", missing: Optional[List[str]] = None):
        super().__init__(message)
        self.missing = missing or []

class NotFoundOrForbidden(RealLeadsError):
    code, retryable = "not_found_or_forbidden", False

class ActionNotImplemented(RealLeadsError):
    code, retryable = "not_implemented", False


# ---- Helpers -----------------------------------------------------------------

def classify_exception(exc: BaseException) -> Tuple[str, bool]:
    """
    Return (code, retryable) for any exception.
    RealLeadsError subclasses carry their own metadata; anything else is an
    unexpected handler failure.
    """
    if isinstance(exc, RealLeadsError):
        return exc.code, exc.retryable
    return "internal_error", False


def error_payload(exc: BaseException) -> Dict[str, Any]:
    code, _ = classify_exception(exc)
    body: Dict[str, Any] = {"error": code, "message": str(exc)}
    if isinstance(exc, ValidationError) and exc.missing:
        body["missing"] = exc.missing
    return body
