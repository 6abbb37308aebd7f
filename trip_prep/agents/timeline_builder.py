"""Countdown timeline: baseline prep tasks plus conditional additions, merged per day."""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Tuple

from trip_prep.schemas import TimelineEntry, TripInput

CANONICAL_DAYS: Tuple[str, ...] = ("T-14", "T-7", "T-3", "T-1", "Day of")
VENUE_ACTIVITIES = frozenset({"sports_event", "concert_show", "theme_park"})

BASELINE_TIMELINE: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("T-14", ("Start a shared packing list", "Check ID/passports and meds refills")),
    ("T-7", ("Confirm tickets/reservations", "Arrange pet/house care if needed")),
    ("T-3", ("Begin staging outfits", "Buy missing toiletries/snacks", "Get small bills for tips")),
    ("T-1", ("Charge electronics", "Pack carry-on with essentials")),
    ("Day of", ("Leave on time", "Final house checklist (trash, thermostat)")),
)

WORK_TASKS = (
    ("T-7", ("Confirm meeting agenda and contacts",)),
    ("T-3", ("Finalize presentation/work materials",)),
    ("T-1", ("Set out-of-office reply",)),
)
FRIENDS_TASKS = (
    ("T-7", ("Coordinate arrival times and rides with friends",)),
    ("T-3", ("Share packing/carpool plans with the group",)),
    ("Day of", ("Touch base with friends on the meetup point",)),
)
INFANT_TASKS = (
    ("T-7", ("Confirm crib/pack-n-play availability",)),
    ("T-3", ("Restock diapers, wipes and formula/snacks",)),
    ("T-1", ("Pre-pack the diaper bag",)),
)
SOLO_TASKS = (
    ("T-3", ("Share your itinerary with a trusted contact",)),
    ("T-1", ("Turn on location sharing with a trusted contact",)),
)
ACCOMMODATION_TASKS: Dict[str, Tuple[Tuple[str, Tuple[str, ...]], ...]] = {
    "hotel": (
        ("T-7", ("Confirm hotel reservation and special requests",)),
        ("T-1", ("Complete online check-in / set up digital key if offered",)),
        ("Day of", ("Have ID and payment card ready for hotel check-in",)),
    ),
    "family": (
        ("T-7", ("Coordinate sleeping arrangements with hosts",)),
        ("T-1", ("Pack the thank-you gift for your hosts",)),
        ("Day of", ("Send hosts an updated ETA",)),
    ),
    "rental": (
        ("T-7", ("Review rental check-in instructions and house rules",)),
        ("T-1", ("Verify lockbox/door code and Wi-Fi details",)),
        ("Day of", ("Follow the self check-in steps on arrival",)),
    ),
}
VENUE_TASKS = (("T-3", ("Check venue bag policy; consider clear stadium bag",)),)


def merge_timeline(*groups: Iterable[Any]) -> List[TimelineEntry]:
    """Merge timeline entries by exact day label.

    Entries may be ``TimelineEntry`` models, ``{"day"|"when", "tasks"}``
    mappings or ``(day, tasks)`` pairs; ``tasks`` may be a list or a single
    string. Canonical days come first in countdown order, any other labels
    follow sorted. Tasks keep first-seen order without repeats and days
    without tasks are dropped.
    """
    buckets: Dict[str, Dict[str, None]] = {}
    for group in groups:
        for entry in group or []:
            day, tasks = _entry_parts(entry)
            if not day or not tasks:
                continue
            bucket = buckets.setdefault(day, {})
            for task in tasks:
                bucket.setdefault(task, None)

    known = [d for d in CANONICAL_DAYS if buckets.get(d)]
    extra = sorted(d for d in buckets if d not in CANONICAL_DAYS and buckets[d])
    return [TimelineEntry(day=d, tasks=list(buckets[d])) for d in known + extra]


def build_timeline(trip: TripInput, *, has_infant_or_toddler: bool, solo: bool) -> List[TimelineEntry]:
    groups: List[Iterable[Any]] = [BASELINE_TIMELINE]
    flags = trip.context_flags
    if trip.trip_type in ("work", "both"):
        groups.append(WORK_TASKS)
    if flags.traveling_with_friends:
        groups.append(FRIENDS_TASKS)
    if has_infant_or_toddler:
        groups.append(INFANT_TASKS)
    if solo:
        groups.append(SOLO_TASKS)
    if trip.accommodation in ACCOMMODATION_TASKS:
        groups.append(ACCOMMODATION_TASKS[trip.accommodation])
    if VENUE_ACTIVITIES.intersection(trip.activities):
        groups.append(VENUE_TASKS)
    return merge_timeline(*groups)


def _entry_parts(entry: Any) -> Tuple[str, List[str]]:
    if isinstance(entry, TimelineEntry):
        day, tasks = entry.day, entry.tasks
    elif isinstance(entry, dict):
        day = entry.get("day")
        if day is None:
            day = entry.get("when")
        tasks = entry.get("tasks")
    elif isinstance(entry, (tuple, list)) and len(entry) == 2:
        day, tasks = entry
    else:
        return "", []

    day = day.strip() if isinstance(day, str) else ""
    if isinstance(tasks, str):
        tasks = [tasks]
    elif not isinstance(tasks, (list, tuple)):
        tasks = []
    return day, [t for t in tasks if isinstance(t, str) and t.strip()]
