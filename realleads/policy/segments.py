# realleads/policy/segments.py
"""
High Net Worth auto-tagging.

Invariant kept by create/update handlers: after any write that touches
budget_max or segments, budget_max > HNW_THRESHOLD implies HNW_SEGMENT is in
segments. The threshold is exclusive.

When the segment is added automatically, AUTO_HNW_TAG is added to the lead's
tags. Only a budget drop to or below the threshold on a lead carrying that
marker removes the segment again; a manually assigned segment is left alone.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

HNW_SEGMENT = "High Net Worth"
HNW_THRESHOLD = 3_000_000
AUTO_HNW_TAG = "auto:high-net-worth"


def is_hnw_budget(budget_max: Optional[float]) -> bool:
    return budget_max is not None and budget_max > HNW_THRESHOLD


def segments_for_create(
    segments: Sequence[str] | None, tags: Sequence[str] | None, budget_max: Optional[float]
) -> Tuple[List[str], List[str]]:
    """Return (segments, tags) for a new lead with HNW auto-detection applied."""
    segs = list(segments or [])
    tgs = list(tags or [])
    if is_hnw_budget(budget_max) and HNW_SEGMENT not in segs:
        segs.append(HNW_SEGMENT)
        if AUTO_HNW_TAG not in tgs:
            tgs.append(AUTO_HNW_TAG)
        logger.debug("HnwAutoTagged", extra={"budget": budget_max, "threshold": HNW_THRESHOLD})
    return segs, tgs


def apply_hnw_to_patch(
    patch: Dict[str, Any],
    current_segments: Sequence[str] | None,
    current_tags: Sequence[str] | None,
    current_budget_max: Optional[float],
) -> Dict[str, Any]:
    """
    Return a new patch with segments/tags adjusted for the HNW rule.
    Patches that touch neither budget_max nor segments come back unchanged.
    """
    if "budget_max" not in patch and "segments" not in patch:
        return dict(patch)

    out = dict(patch)
    segs = list(patch["segments"]) if "segments" in patch else list(current_segments or [])
    tags = list(patch["tags"]) if "tags" in patch else list(current_tags or [])
    budget = patch.get("budget_max", current_budget_max)

    if is_hnw_budget(budget):
        if HNW_SEGMENT not in segs:
            segs.append(HNW_SEGMENT)
            if AUTO_HNW_TAG not in tags:
                tags.append(AUTO_HNW_TAG)
            logger.debug("HnwAutoTagged", extra={"budget": budget})
    elif "budget_max" in patch and AUTO_HNW_TAG in tags:
        segs = [s for s in segs if s != HNW_SEGMENT]
        tags = [t for t in tags if t != AUTO_HNW_TAG]
        logger.debug("HnwAutoTagRemoved", extra={"budget": budget})

    if segs != list(current_segments or []) or "segments" in patch:
        out["segments"] = segs
    if tags != list(current_tags or []) or "tags" in patch:
        out["tags"] = tags
    return out
