# realleads/policy/guards.py
from __future__ import annotations

import logging
from typing import Iterable

from realleads.policy.segments import HNW_SEGMENT

logger = logging.getLogger(__name__)

PROTECTED_SEGMENTS = frozenset({HNW_SEGMENT})

# ----------------------------
# Exceptions & atomic checks
# ----------------------------

class PolicyDenied(Exception):
    def __init__(self, code: str, reason: str):
        super().__init__(reason)
        self.code = code
        self.reason = reason


def is_protected(segments: Iterable[str] | None) -> bool:
    return bool(PROTECTED_SEGMENTS & set(segments or ()))


def check_protected_segment(lead_id: str, segments: Iterable[str] | None) -> None:
    """
    Deny immediate outbound dispatch to a lead in a protected segment.
    Callers route the message to the approval queue instead.
    """
    if is_protected(segments):
        logger.info("PolicyBlocked", extra={"lead_id": lead_id, "reason": "protected_segment"})
        raise PolicyDenied(
            "protected_segment",
            "Lead is in a protected segment; outbound messages require approval",
        )
