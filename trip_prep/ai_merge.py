"""Fold AI suggestions into a rule-based plan without breaking its ordering or dedup rules."""
from __future__ import annotations

import os
from typing import Any, Dict, Iterable, List
import logging

from pydantic import BaseModel

from trip_prep.schemas import TripPlan
from trip_prep.agents.timeline_builder import merge_timeline

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_PREP_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

_OVERPACK_KEYS = (
    ("skip", "skip", "skip"),
    ("last_minute", "lastMinute", "last_minute"),
    ("house_prep", "housePrep", "house_prep"),
)


def merge_ai_into_plan(plan: TripPlan | Dict[str, Any], ai: Any) -> TripPlan:
    """Return a new plan with ``ai`` suggestions merged in.

    ``ai`` is loosely typed: any field may be missing, ``None`` or of the wrong
    type, in which case that field is skipped. Existing plan content is never
    removed and the input plan is left untouched.
    """
    if isinstance(plan, dict):
        plan = TripPlan.model_validate(plan)
    if not isinstance(plan, TripPlan):
        raise TypeError(f"merge_ai_into_plan expects a TripPlan, got {type(plan).__name__}")

    merged = plan.model_copy(deep=True)
    data = _as_mapping(ai)
    if not data:
        logger.info("No AI suggestions to merge; returning rule-based plan")
        return merged

    blurb = data.get("trip_blurb")
    if isinstance(blurb, str) and blurb.strip():
        merged.ai_blurb = blurb.strip()

    merged.ai_venue_tips = _union(merged.ai_venue_tips, _strings(data.get("venue_bag_policy_tips")))
    merged.ai_extra_todos = _union(merged.ai_extra_todos, _strings(data.get("extra_to_dos")))

    additions = _strings(data.get("packing_additions"))
    if additions:
        packing = merged.packing
        packing.combined = _union(packing.combined, additions)
        for name in list(packing.by_person):
            packing.by_person[name] = _union(packing.by_person[name], additions)

    overpack_adds = _as_mapping(data.get("overpack_additions"))
    for field, camel, snake in _OVERPACK_KEYS:
        adds = _strings(overpack_adds.get(camel, overpack_adds.get(snake)))
        if adds:
            setattr(merged.overpack, field, _union(getattr(merged.overpack, field), adds))

    timeline_adds = data.get("timeline_additions")
    if isinstance(timeline_adds, list) and timeline_adds:
        merged.timeline = merge_timeline(merged.timeline, timeline_adds)

    merged.smart_must_haves = _union(merged.smart_must_haves, _strings(data.get("smart_must_haves")))

    logger.info(
        "Merged AI suggestions: blurb=%s, packing+%d, timeline entries=%d, must-haves=%d",
        "yes" if merged.ai_blurb else "no",
        len(additions),
        len(timeline_adds) if isinstance(timeline_adds, list) else 0,
        len(merged.smart_must_haves),
    )
    return merged


def _as_mapping(value: Any) -> Dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="python", by_alias=True)
    return value if isinstance(value, dict) else {}


def _strings(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _union(existing: Iterable[str], additions: Iterable[str]) -> List[str]:
    merged: List[str] = list(existing)
    for item in additions:
        if item not in merged:
            merged.append(item)
    return merged
