"""Utility agent that normalizes raw trip payloads."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from pydantic import ValidationError

from trip_prep.schemas import TripInput


class InvalidTripInput(ValueError):
    """Raised when the trip payload itself is not a usable object."""


def extract_trip_input(payload: Any) -> TripInput:
    """Return a normalized ``TripInput`` from a raw payload or model.

    Accepts the form payload as-is, the same payload wrapped under a
    ``trip_input`` key, or anything exposing ``model_dump`` like Pydantic
    models. Per-mode logistics (``logistics.fly`` etc.) are folded into the
    matching travel-mode variant. Optional fields never raise; only a payload
    that is not an object at all does.
    """
    if isinstance(payload, TripInput):
        return payload
    raw: Dict[str, Any]
    if hasattr(payload, "model_dump"):
        raw = payload.model_dump(mode="python")  # type: ignore[assignment]
    elif isinstance(payload, dict):
        raw = dict(payload)
    else:
        raise InvalidTripInput(
            f"Trip input must be an object, got {type(payload).__name__}"
        )

    if "trip_input" in raw:
        inner = raw.get("trip_input")
        if not isinstance(inner, dict):
            raise InvalidTripInput("trip_input must be an object")
        raw = dict(inner)

    logistics = raw.get("logistics")
    raw["modes"] = _attach_logistics(raw.get("modes", raw.get("mode")), logistics)
    raw.pop("mode", None)
    if "hotel" not in raw and isinstance(logistics, dict):
        raw["hotel"] = logistics.get("hotel")

    start = raw.get("start_date") if isinstance(raw.get("start_date"), str) else ""
    end = raw.get("end_date") if isinstance(raw.get("end_date"), str) and raw.get("end_date") else start
    start_dt, end_dt = _safe_parse(start), _safe_parse(end)
    if start_dt and end_dt and end_dt < start_dt:
        # swap to avoid negative durations
        start, end = end, start
    raw["start_date"], raw["end_date"] = start, end

    try:
        return TripInput.model_validate(raw)
    except ValidationError as exc:
        raise InvalidTripInput(str(exc)) from exc


def _attach_logistics(modes: Any, logistics: Any) -> List[Dict[str, Any]]:
    if modes is None:
        return []
    items = modes if isinstance(modes, list) else [modes]
    details_by_mode = logistics if isinstance(logistics, dict) else {}
    attached: List[Dict[str, Any]] = []
    for item in items:
        if isinstance(item, dict):
            tag = item.get("mode")
            base = dict(item)
        else:
            tag = item
            base = {"mode": item}
        tag = tag.strip().lower() if isinstance(tag, str) else ""
        if not tag:
            continue
        details = details_by_mode.get(tag)
        merged = dict(details) if isinstance(details, dict) else {}
        merged.update(base)
        merged["mode"] = tag
        attached.append(merged)
    return attached


def _safe_parse(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        try:
            return datetime.strptime(value, "%Y-%m-%d")
        except ValueError:
            return None
