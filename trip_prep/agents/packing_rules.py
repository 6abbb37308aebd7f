"""Rule-based packing lists, per traveler and combined."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Tuple

from trip_prep.schemas import ActivityTag, PackingLists, Traveler, TripInput


@dataclass(frozen=True)
class PackingEntry:
    item: str
    essential: bool = False


def _must(item: str) -> PackingEntry:
    return PackingEntry(item, True)


def _nice(item: str) -> PackingEntry:
    return PackingEntry(item, False)


class PackingListBuilder:
    """Insertion-ordered unique items. Re-adding an item can upgrade it to essential, never downgrade."""

    def __init__(self) -> None:
        self._items: Dict[str, bool] = {}

    def add(self, entries: Iterable[PackingEntry]) -> None:
        for entry in entries:
            self._items[entry.item] = self._items.get(entry.item, False) or entry.essential

    def is_essential(self, item: str) -> bool:
        return self._items.get(item, False)

    @property
    def items(self) -> List[str]:
        return list(self._items)

    @property
    def essentials(self) -> List[str]:
        return [item for item, essential in self._items.items() if essential]


BASE_COMMON: Tuple[PackingEntry, ...] = (
    _must("Photo ID / Passports"),
    _must("Wallet & travel cards"),
    _must("Phone & charger"),
    _must("Medications + mini first-aid"),
    _must("Toiletries (toothbrush, travel-size liquids)"),
    _must("Sleepwear, underwear, socks"),
    _must("Outfits for each day + 1 spare"),
)

ACTIVITY_PACKING: Mapping[ActivityTag, Tuple[PackingEntry, ...]] = {
    ActivityTag.LOTS_OF_WALKING: (
        _must("Comfortable walking shoes"),
        _nice("Blister bandages"),
    ),
    ActivityTag.FANCY_DINNER: (
        _must("Nice outfit"),
        _nice("Dress shoes"),
        _nice("Restaurant reservation details"),
    ),
    ActivityTag.BEACH: (
        _must("Swimsuit"),
        _nice("Cover-up"),
        _must("Reef-safe sunscreen"),
        _nice("Flip-flops"),
    ),
    ActivityTag.POOL: (
        _must("Swimsuit"),
        _nice("Goggles"),
        _nice("Swim diapers (if needed)"),
    ),
    ActivityTag.HIKING: (
        _must("Daypack"),
        _must("Reusable water bottle"),
        _nice("Bug spray"),
    ),
    ActivityTag.BOATING_SNORKELING: (
        _must("Rash guard"),
        _nice("Snorkel set"),
        _must("Dry bag"),
    ),
    ActivityTag.SKIING_SNOW: (
        _must("Base layers"),
        _must("Waterproof gloves"),
        _nice("Beanie"),
        _nice("Hand warmers"),
    ),
    ActivityTag.FISHING: (
        _must("Fishing license"),
        _nice("Polarized sunglasses"),
        _nice("Tackle / fishing gear"),
    ),
    ActivityTag.CAMPING: (
        _must("Sleeping bag"),
        _must("Headlamp / flashlight"),
        _nice("Bug spray"),
        _nice("Camp chair"),
    ),
    ActivityTag.THEME_PARK: (
        _must("Portable phone battery"),
        _nice("Cooling towel"),
        _nice("Clear stadium/park-approved bag"),
    ),
    ActivityTag.SPORTS_EVENT: (
        _must("Event tickets (digital or printed)"),
        _nice("Clear stadium/park-approved bag"),
        _nice("Team gear"),
    ),
    ActivityTag.CONCERT_SHOW: (
        _must("Event tickets (digital or printed)"),
        _nice("Ear protection"),
        _nice("Clear stadium/park-approved bag"),
    ),
    ActivityTag.MUSEUMS_TOURS: (
        _must("Comfortable walking shoes"),
        _nice("Tour confirmations"),
    ),
}

OUTDOOR_ACTIVITIES = frozenset(
    {
        ActivityTag.BEACH,
        ActivityTag.POOL,
        ActivityTag.HIKING,
        ActivityTag.BOATING_SNORKELING,
        ActivityTag.SKIING_SNOW,
        ActivityTag.CAMPING,
        ActivityTag.FISHING,
        ActivityTag.SPORTS_EVENT,
        ActivityTag.THEME_PARK,
    }
)
SWIM_ACTIVITIES = frozenset({ActivityTag.BEACH, ActivityTag.POOL, ActivityTag.BOATING_SNORKELING})
SUN_PROTECTION = (_must("Sunscreen (SPF 30+)"), _nice("Sun hat"))

FAMILY_STAY = (_nice("Small thank-you gift for host"), _nice("House slippers / comfy clothes"))
TRANSIT_ADDS = (_nice("Transit card/app set up"), _nice("Light day bag with zipper"))
CAR_ADDS = (_nice("Car snacks"), _nice("Car phone mount"), _nice("Charging cable (car)"))

FLY_ADDS = (_must("Download airline app"), _nice("Compression socks"))
CRUISE_ADDS = (
    _must("Cruise documents / boarding pass"),
    _nice("Lanyard for cruise card"),
    _must("Seasickness remedy"),
    _nice("Embarkation-day swim bag"),
)

HOT_WEATHER = (_must("Extra sunscreen"), _must("Hat / sunglasses"))
COLD_WEATHER = (_must("Warm jacket / layers"), _nice("Gloves / scarf"))
WET_WEATHER = (_must("Compact umbrella / rain jacket"),)
HOT_HIGH_F = 80
COLD_LOW_F = 45
WET_DAYS_PCT = 30

CHILD_COMMON = (
    _must("Favorite snack"),
    _must("Lightweight jacket / extra layer"),
    _nice("Entertainment (small toys, tablet & headphones)"),
)
TODDLER_ADDS = (
    _must("Diapers / wipes"),
    _must("Stroller"),
    _nice("Snack cups"),
    _must("Change of clothes (extra)"),
)
TODDLER_MAX_AGE = 3
STROLLER_TAG = _nice("Stroller tag / identifier")
ADULT_FLY = (_must("TSA-size liquids"), _nice("Travel pillow (optional)"))
ADULT_CRUISE = (_must("Motion-sickness remedy"), _nice("Non-surge power strip (cruise-approved)"))

SOLO_ADDS = (_nice("Personal safety alarm"), _nice("Portable door wedge"))


def activity_tags(activities: Iterable[str]) -> List[ActivityTag]:
    """Known activity tags in input order; unknown tags carry no packing rules."""
    known = {tag.value: tag for tag in ActivityTag}
    return [known[a] for a in activities if a in known]


def work_entries(trip: TripInput) -> List[PackingEntry]:
    if trip.trip_type not in ("work", "both"):
        return []
    strict = trip.trip_type == "work"
    entries = [
        _must("Laptop + charger"),
        _must("Work ID / badge"),
        PackingEntry("Professional outfit", strict),
        _nice("Notebook & pen"),
    ]
    if strict:
        entries.append(_nice("Business card holder"))
    return entries


def activity_entries(tags: List[ActivityTag]) -> List[PackingEntry]:
    entries: List[PackingEntry] = []
    for tag in tags:
        entries.extend(ACTIVITY_PACKING[tag])
    if any(tag in OUTDOOR_ACTIVITIES for tag in tags):
        entries.extend(SUN_PROTECTION)
    return entries


def weather_entries(trip: TripInput) -> List[PackingEntry]:
    wx = trip.weather_summary
    if wx is None:
        return []
    entries: List[PackingEntry] = []
    if wx.avg_high_f is not None and wx.avg_high_f >= HOT_HIGH_F:
        entries.extend(HOT_WEATHER)
    if wx.avg_low_f is not None and wx.avg_low_f <= COLD_LOW_F:
        entries.extend(COLD_WEATHER)
    if wx.wet_days_pct is not None and wx.wet_days_pct >= WET_DAYS_PCT:
        entries.extend(WET_WEATHER)
    return entries


def transport_hints(trip: TripInput) -> str:
    hints = [trip.transportation.lower()]
    day_trip = trip.logistics_for("day_trip")
    if day_trip is not None:
        hints.append(day_trip.transport.lower())
    return " ".join(h for h in hints if h)


def shared_entries(trip: TripInput, tags: List[ActivityTag]) -> List[PackingEntry]:
    """Entries every traveler receives, in rule order."""
    entries: List[PackingEntry] = list(BASE_COMMON)
    entries.extend(activity_entries(tags))

    if trip.accommodation == "family":
        entries.extend(FAMILY_STAY)

    hints = transport_hints(trip)
    if "subway" in hints or "train" in hints:
        entries.extend(TRANSIT_ADDS)
    if trip.has_mode("drive") or "car" in hints:
        entries.extend(CAR_ADDS)

    if trip.has_mode("fly"):
        entries.extend(FLY_ADDS)
    if trip.has_mode("cruise"):
        entries.extend(CRUISE_ADDS)

    entries.extend(weather_entries(trip))
    return entries


def is_solo_trip(trip: TripInput) -> bool:
    return trip.context_flags.traveling_solo or len(trip.travelers) == 1


def traveler_entries(traveler: Traveler, trip: TripInput, tags: List[ActivityTag]) -> List[PackingEntry]:
    entries: List[PackingEntry] = []
    if traveler.type == "child":
        entries.extend(CHILD_COMMON)
        if traveler.age is not None and traveler.age <= TODDLER_MAX_AGE:
            entries.extend(TODDLER_ADDS)
            if any(tag in SWIM_ACTIVITIES for tag in tags):
                entries.append(_must("Swim diapers (if needed)"))
        if ActivityTag.THEME_PARK in tags:
            entries.append(STROLLER_TAG)
        return entries

    if trip.has_mode("fly"):
        entries.extend(ADULT_FLY)
    if trip.has_mode("cruise"):
        entries.extend(ADULT_CRUISE)
    entries.extend(work_entries(trip))
    if is_solo_trip(trip):
        entries.extend(SOLO_ADDS)
    return entries


def display_names(travelers: List[Traveler]) -> List[str]:
    """Per-traveler list keys; repeated names get a ``#2``, ``#3`` suffix."""
    names: List[str] = []
    seen: Dict[str, int] = {}
    for traveler in travelers:
        base = traveler.name or ("Child" if traveler.type == "child" else "Adult")
        count = seen.get(base, 0) + 1
        seen[base] = count
        name = base if count == 1 else f"{base} #{count}"
        while name in names:
            count += 1
            seen[base] = count
            name = f"{base} #{count}"
        names.append(name)
    return names


def build_packing(trip: TripInput) -> PackingLists:
    tags = activity_tags(trip.activities)
    by_person: Dict[str, List[str]] = {}
    minimal_by_person: Dict[str, List[str]] = {}

    if trip.travelers:
        shared = shared_entries(trip, tags)
        for name, traveler in zip(display_names(trip.travelers), trip.travelers):
            builder = PackingListBuilder()
            builder.add(shared)
            builder.add(traveler_entries(traveler, trip, tags))
            by_person[name] = builder.items
            minimal_by_person[name] = builder.essentials
    else:
        # nobody declared: one generic traveler so the list is never empty
        name = "Traveler" if trip.context_flags.traveling_solo else "Adult"
        builder = PackingListBuilder()
        builder.add(BASE_COMMON)
        builder.add(activity_entries(tags))
        builder.add(weather_entries(trip))
        builder.add(work_entries(trip))
        if trip.context_flags.traveling_solo:
            builder.add(SOLO_ADDS)
        by_person[name] = builder.items
        minimal_by_person[name] = builder.essentials

    return PackingLists(
        by_person=by_person,
        combined=_ordered_union(by_person.values()),
        minimal_by_person=minimal_by_person,
        minimal_combined=_ordered_union(minimal_by_person.values()),
    )


def _ordered_union(lists: Iterable[List[str]]) -> List[str]:
    merged: Dict[str, None] = {}
    for items in lists:
        for item in items:
            merged.setdefault(item, None)
    return list(merged)
