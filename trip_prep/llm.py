# trip_prep/llm.py
import os
import re
import json
import logging
from typing import List, Dict, Any, Optional

from dotenv import load_dotenv
from openai import OpenAI
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from trip_prep.schemas import AiSuggestions, TripInput

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_PREP_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

# Load .env file if present
load_dotenv()

DEFAULT_MODEL = os.getenv("TRIP_PREP_OPENAI_MODEL", "gpt-4o-mini")
LIST_LIMIT = 6
TIMELINE_LIMIT = 5
MUST_HAVES_LIMIT = 30

# Get API key from environment
api_key = os.getenv("OPENAI_API_KEY")
_client: Optional[OpenAI] = OpenAI(api_key=api_key) if api_key else None
if _client is None:
    logger.warning("OPENAI_API_KEY not set; AI suggestions will be unavailable")


class AiUnavailableError(RuntimeError):
    """The AI suggestion service could not produce a response."""


SYSTEM_RULES = """You are a concise, practical family trip assistant.
Produce a warm, useful, family-friendly trip guide with TWO parts:

1) TRIP BLURB (1-2 short paragraphs)
- Start with the destination's vibe (historic, coastal, outdoorsy, theme-park energy, etc.).
- Suggest a few location-specific, family-friendly activities. If children are present, include kid-friendly ideas.
- Mention popular local dining ideas by name, but do not guarantee availability.
- If a HOTEL name & city are provided: mention it and add practical reminders (pool hours, cribs, parking). Use "check", "confirm" or "if available".
- If WEATHER info is available: weave it in naturally (layers for cool evenings, rain gear if wet-day % is high).
- If FLYING: airline app, baggage allowances, extra time for security. No terminal numbers, no guarantees.
- If DRIVING: snacks, car chargers, child seats, planned rest stops.
- If CRUISING: embarkation documents, motion-sickness prep, port-day bag.
- If using SUBWAY/TAXI/WALKING: transit card/app, stroller-friendly routes, comfortable shoes.
- Tone: upbeat, welcoming, practical. No emojis.
- Never invent exact facilities, fees, or policies.

2) JSON CHECKLISTS (strict JSON, no prose outside JSON)
Return:
{
  "trip_blurb": string,
  "venue_bag_policy_tips": string[],
  "extra_to_dos": string[],
  "packing_additions": string[],
  "overpack_additions": {"skip": string[], "lastMinute": string[], "housePrep": string[]},
  "timeline_additions": [{"day": "T-14"|"T-7"|"T-3"|"T-1"|"Day of", "tasks": string[]}],
  "smart_must_haves": string[]
}

Keep lists short (up to ~6 each). No emojis. No markdown. No claims of specifics.
"""

USER_PREFIX = "Generate the JSON exactly as specified. Here is the trip input:"


def build_user_context(trip: TripInput) -> Dict[str, Any]:
    """Trip details the model can use; absent values are sent as empty/None."""
    fly = trip.logistics_for("fly")
    drive = trip.logistics_for("drive")
    venue = trip.venue_input
    hotel = trip.hotel
    wx = trip.weather_summary
    return {
        "destination": trip.destination,
        "dates": {"start_date": trip.start_date, "end_date": trip.end_date or trip.start_date},
        "modes": trip.mode_tags,
        "trip_type": trip.trip_type,
        "transportation": trip.transportation,
        "accommodation": trip.accommodation,
        "activities": trip.activities,
        "travelers": [
            {"type": p.type, "age": p.age} for p in trip.travelers
        ],
        "venue": {
            "name": venue.name if venue else "",
            "city": venue.city if venue else "",
            "activity_types": venue.activities if venue else [],
        },
        "flight": {
            "departure_airport": fly.departure_airport if fly else "",
            "airline": fly.airline if fly else "",
        },
        "hotel": {
            "name": hotel.name if hotel else "",
            "city": hotel.city if hotel else "",
        },
        "drive": {
            "start_location": drive.start_location if drive else "",
            "estimated_hours": drive.estimated_hours if drive else None,
        },
        "weather_summary": wx.model_dump(mode="json") if wx else None,
    }


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    retry=retry_if_exception_type(Exception),
    reraise=True,
)
def _complete(messages: List[Dict[str, Any]], model: str) -> str:
    resp = _client.chat.completions.create(  # type: ignore[union-attr]
        model=model,
        messages=messages,
        temperature=0.4,
        response_format={"type": "json_object"},
    )
    return resp.choices[0].message.content or "{}"


def fetch_ai_suggestions(trip: TripInput, model: str | None = None) -> AiSuggestions:
    """Ask the hosted model for trip tips and return them normalized and size-capped."""
    if _client is None:
        raise AiUnavailableError("Server missing OPENAI_API_KEY.")

    model = model or DEFAULT_MODEL
    messages = [
        {"role": "system", "content": SYSTEM_RULES},
        {
            "role": "user",
            "content": [
                {"type": "text", "text": USER_PREFIX},
                {"type": "text", "text": json.dumps(build_user_context(trip))},
            ],
        },
    ]
    logger.info("Invoking LLM model %s for trip suggestions (%s)", model, trip.destination or "?")
    try:
        raw = _complete(messages, model)
    except Exception as exc:
        logger.warning("LLM suggestion call failed after retries", exc_info=True)
        raise AiUnavailableError("AI unavailable.") from exc

    parsed = parse_model_json(raw)
    suggestions = normalize_ai_payload(parsed)
    logger.info(
        "LLM suggestions parsed: %d packing additions, %d timeline entries",
        len(suggestions.packing_additions),
        len(suggestions.timeline_additions),
    )
    return suggestions


def parse_model_json(raw: str) -> Dict[str, Any]:
    """Parse the model reply, salvaging a trailing ``{...}`` block if prose slipped in."""
    try:
        parsed = json.loads(raw)
    except (TypeError, ValueError):
        match = re.search(r"\{[\s\S]*\}$", (raw or "").strip())
        if not match:
            logger.warning("LLM response was not valid JSON; ignoring")
            return {}
        try:
            parsed = json.loads(match.group(0))
        except ValueError:
            logger.warning("LLM response JSON could not be salvaged; ignoring", exc_info=True)
            return {}
    return parsed if isinstance(parsed, dict) else {}


def _safe_str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _take(value: Any, limit: int = LIST_LIMIT) -> List[str]:
    if not isinstance(value, list):
        return []
    return [s for s in (_safe_str(v) for v in value) if s][:limit]


def normalize_ai_payload(parsed: Any) -> AiSuggestions:
    """Coerce a loosely-shaped model reply into ``AiSuggestions`` with list caps applied."""
    data = parsed if isinstance(parsed, dict) else {}
    overpack = data.get("overpack_additions")
    overpack = overpack if isinstance(overpack, dict) else {}

    timeline: List[Dict[str, Any]] = []
    raw_timeline = data.get("timeline_additions")
    for entry in raw_timeline if isinstance(raw_timeline, list) else []:
        if not isinstance(entry, dict):
            continue
        day = _safe_str(entry.get("day"))
        tasks = _take(entry.get("tasks"))
        if day and tasks:
            timeline.append({"day": day, "tasks": tasks})

    return AiSuggestions(
        trip_blurb=_safe_str(data.get("trip_blurb")),
        venue_bag_policy_tips=_take(data.get("venue_bag_policy_tips")),
        extra_to_dos=_take(data.get("extra_to_dos")),
        packing_additions=_take(data.get("packing_additions")),
        overpack_additions={
            "skip": _take(overpack.get("skip")),
            "lastMinute": _take(overpack.get("lastMinute")),
            "housePrep": _take(overpack.get("housePrep")),
        },
        timeline_additions=timeline[:TIMELINE_LIMIT],
        smart_must_haves=_take(data.get("smart_must_haves"), MUST_HAVES_LIMIT),
    )
