# trip_prep/planner.py
from __future__ import annotations

import os
from typing import Any, Dict, List
import logging

from trip_prep.schemas import (
    PlanBasics,
    TravelerCounts,
    TripDates,
    TripInput,
    TripPlan,
    WeatherSummary,
)
from trip_prep.agents.trip_intake import extract_trip_input
from trip_prep.agents.packing_rules import build_packing, is_solo_trip
from trip_prep.agents.timeline_builder import build_timeline
from trip_prep.agents.overpack_guard import build_lodging, build_overpack

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_PREP_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

ACTIVITY_LABELS: Dict[str, str] = {
    "lots_of_walking": "Lots of walking",
    "fancy_dinner": "Fancy dinner",
    "beach": "Beach",
    "pool": "Pool",
    "hiking": "Hiking",
    "boating_snorkeling": "Boating / Snorkeling",
    "skiing_snow": "Skiing / Snow play",
    "fishing": "Fishing",
    "camping": "Camping",
    "sports_event": "Sports event",
    "concert_show": "Concert / Show",
    "museums_tours": "Museums / Tours",
    "theme_park": "Theme park",
}

# Used for basics.transportation when the traveler left "getting around" blank.
_DEFAULT_GETTING_AROUND = {"fly": "subway/taxi/walking", "drive": "car", "cruise": "ship excursions/walking"}

INFANT_TODDLER_MAX_AGE = 2


def build_plan(payload: Any) -> TripPlan:
    """Derive the rule-based trip-prep plan from a trip payload.

    Same input, same plan: no I/O and no shared state. Missing or malformed
    optional fields fall back to defaults; only a payload that is not an
    object raises ``InvalidTripInput``.
    """
    trip = extract_trip_input(payload)

    travelers = trip.travelers
    adults = [p for p in travelers if p.type == "adult"]
    children = [p for p in travelers if p.type == "child"]
    ages_children = [p.age for p in children if p.age is not None]
    has_infant_or_toddler = any(
        p.age is not None and p.age <= INFANT_TODDLER_MAX_AGE for p in travelers
    )
    solo = is_solo_trip(trip)

    logger.info(
        "Building plan for %s (%s to %s): %d adults, %d children, modes=%s, activities=%s",
        trip.destination or "unspecified destination",
        trip.start_date or "?",
        trip.end_date or "?",
        len(adults),
        len(children),
        ",".join(trip.mode_tags) or "none",
        ",".join(trip.activities) or "none",
    )

    basics = PlanBasics(
        destination=trip.destination,
        dates=TripDates(start=trip.start_date, end=trip.end_date or trip.start_date),
        travelers=TravelerCounts(
            total=len(travelers),
            adults=len(adults),
            children=len(children),
            names=[p.name for p in travelers if p.name],
            ages_children=ages_children,
            youngest_child_age=min(ages_children) if ages_children else None,
        ),
        accommodation=trip.accommodation,
        transportation=_getting_around(trip),
        modes=trip.mode_tags,
        has_infant_or_toddler=has_infant_or_toddler,
    )

    packing = build_packing(trip)
    timeline = build_timeline(trip, has_infant_or_toddler=has_infant_or_toddler, solo=solo)
    overpack = build_overpack(trip, has_children=bool(children), solo=solo)

    plan = TripPlan(
        basics=basics,
        activities=[_activity_label(a) for a in trip.activities],
        weather=trip.weather_summary.model_copy() if trip.weather_summary else WeatherSummary(),
        timeline=timeline,
        packing=packing,
        overpack=overpack,
        lodging=build_lodging(has_infant_or_toddler),
    )
    logger.debug(
        "Plan composition: %d packing lists, %d combined items (%d essential), %d timeline days",
        len(packing.by_person),
        len(packing.combined),
        len(packing.minimal_combined),
        len(timeline),
    )
    return plan


def _activity_label(tag: str) -> str:
    if tag in ACTIVITY_LABELS:
        return ACTIVITY_LABELS[tag]
    return " ".join(word[:1].upper() + word[1:] for word in tag.replace("_", " ").split())


def _getting_around(trip: TripInput) -> str:
    if trip.transportation:
        return trip.transportation
    defaults: List[str] = [
        _DEFAULT_GETTING_AROUND[m] for m in trip.mode_tags if m in _DEFAULT_GETTING_AROUND
    ]
    return defaults[0] if defaults else ""
