from __future__ import annotations

import os
from typing import Any, Dict

import httpx
from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import ValidationError

from trip_prep.agents.trip_intake import InvalidTripInput, extract_trip_input
from trip_prep.ai_merge import merge_ai_into_plan
from trip_prep.llm import AiUnavailableError, fetch_ai_suggestions
from trip_prep.planner import build_plan
from trip_prep.schemas import TripPlan
from trip_prep.tools.calendar_export import export_filename, reminders_to_ics, tasks_to_csv, timeline_to_ics
from trip_prep.tools.weather import WeatherClient, WeatherLookupError

app = FastAPI(title="Trip Prep Planner API")

# Allow local development UIs to reach the API without wrestling with browser
# CORS restrictions. Operators can scope this via TRIP_PREP_ALLOWED_ORIGINS.
raw_origins = os.getenv("TRIP_PREP_ALLOWED_ORIGINS") or "*"
allowed_origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
if not allowed_origins:
    allowed_origins = ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_EXPORTS = {
    "events": (timeline_to_ics, "text/calendar; charset=utf-8", "trip-prep", "ics"),
    "reminders": (reminders_to_ics, "text/calendar; charset=utf-8", "trip-reminders", "ics"),
    "tasks": (tasks_to_csv, "text/csv; charset=utf-8", "trip-tasks", "csv"),
}


def _plan_from_body(raw: Any) -> TripPlan:
    try:
        return TripPlan.model_validate(raw)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors()) from exc


@app.post("/api/trip-plan")
async def api_trip_plan(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """Rule-based plan, returned immediately while AI suggestions load."""
    try:
        plan = build_plan(payload)
    except InvalidTripInput as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return plan.model_dump(mode="json", by_alias=True)


@app.post("/api/weather")
async def api_weather(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    trip = payload.get("trip_input") if isinstance(payload.get("trip_input"), dict) else {}
    city = payload.get("city") or trip.get("destination") or ""
    start_date = payload.get("startDate") or trip.get("start_date") or ""
    end_date = payload.get("endDate") or trip.get("end_date") or trip.get("start_date") or ""
    if not city or not start_date or not end_date:
        raise HTTPException(status_code=400, detail="city, startDate, endDate are required")

    try:
        report = await WeatherClient().report(city, start_date, end_date)
    except WeatherLookupError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    except httpx.HTTPError as exc:
        raise HTTPException(status_code=502, detail=f"Weather provider error: {exc}") from exc
    return report.model_dump(mode="json", by_alias=True)


@app.post("/api/plan")
def api_ai_suggestions(payload: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    """AI tips for the trip; the caller merges them into its plan."""
    try:
        trip = extract_trip_input(payload)
    except InvalidTripInput as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    try:
        suggestions = fetch_ai_suggestions(trip)
    except AiUnavailableError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc
    return {"ai": suggestions.model_dump(mode="json", by_alias=True)}


@app.post("/api/plan/merge")
async def api_merge_plan(plan: Dict[str, Any] = Body(...), ai: Any = Body(None)) -> Dict[str, Any]:
    merged = merge_ai_into_plan(_plan_from_body(plan), ai)
    return merged.model_dump(mode="json", by_alias=True)


@app.post("/api/plan/calendar")
async def api_plan_calendar(plan: Dict[str, Any] = Body(...), kind: str = Body("events")) -> Response:
    if kind not in _EXPORTS:
        raise HTTPException(status_code=400, detail=f"kind must be one of {', '.join(_EXPORTS)}")
    export, media_type, prefix, ext = _EXPORTS[kind]
    parsed = _plan_from_body(plan)
    body = export(parsed)
    if body is None:
        raise HTTPException(status_code=422, detail="Nothing to export (need a start date and tasks).")
    filename = export_filename(parsed, prefix, ext)
    return Response(
        content=body,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
