"""Pack-smarter advisories (skip / last-minute / house prep) and infant lodging checklist."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from trip_prep.schemas import LodgingChecklist, OverpackAdvice, TripInput

AdviceGroup = Dict[str, Tuple[str, ...]]

BASE: AdviceGroup = {
    "skip": (
        "Third pair of jeans",
        "Duplicate bulky sweatshirts",
        "Full-size toiletries",
        "Too many 'just in case' shoes",
    ),
    "last_minute": ("Phone and charger from the nightstand", "Daily medications"),
    "house_prep": ("Hold mail", "Run dishwasher", "Empty trash", "Set thermostat"),
}
WITH_CHILDREN: AdviceGroup = {
    "skip": ("Bulky toy bins (pick 2-3 favorites)", "Full-size bath toys"),
    "last_minute": ("White noise app download", "Nightlight", "Sound machine batteries", "Favorite blanket"),
    "house_prep": ("Charge tablets and download shows offline",),
}
ADULTS_ONLY: AdviceGroup = {
    "skip": ("Extra 'maybe' outfits",),
    "last_minute": ("Sunglasses and earbuds",),
    "house_prep": ("Water plants",),
}
WORK: AdviceGroup = {
    "skip": ("Paper copies of files you can access online",),
    "last_minute": ("Laptop charger and presentation clicker", "Work badge"),
    "house_prep": ("Set email auto-reply",),
}
SOLO: AdviceGroup = {
    "skip": ("Valuables you can't replace",),
    "last_minute": ("Copy of ID stored separately from wallet",),
    "house_prep": ("Leave a spare key with a trusted neighbor",),
}
ACCOMMODATION: Dict[str, AdviceGroup] = {
    "hotel": {
        "skip": ("Towels and hair dryer (hotel provides)",),
        "last_minute": ("Hotel confirmation number",),
    },
    "family": {
        "skip": ("Bedding and towels (confirm with hosts)",),
        "last_minute": ("Host thank-you gift",),
    },
    "rental": {
        "skip": ("Full-size kitchen staples (check rental supplies first)",),
        "last_minute": ("Door code and check-in instructions",),
        "house_prep": ("Save the rental host's contact info",),
    },
}

INFANT_TODDLER_LODGING = (
    "Crib/pack-n-play (confirm availability or bring travel crib)",
    "Blackout solution (travel curtains/tape)",
    "Sound machine / app",
    "Monitor (if needed)",
    "Favorite sleep sack / lovey",
)


def build_overpack(trip: TripInput, *, has_children: bool, solo: bool) -> OverpackAdvice:
    groups: List[AdviceGroup] = [BASE, WITH_CHILDREN if has_children else ADULTS_ONLY]
    if trip.trip_type in ("work", "both"):
        groups.append(WORK)
    if solo:
        groups.append(SOLO)
    if trip.accommodation in ACCOMMODATION:
        groups.append(ACCOMMODATION[trip.accommodation])

    return OverpackAdvice(
        skip=_compose(groups, "skip"),
        last_minute=_compose(groups, "last_minute"),
        house_prep=_compose(groups, "house_prep"),
    )


def build_lodging(has_infant_or_toddler: bool) -> Optional[LodgingChecklist]:
    if not has_infant_or_toddler:
        return None
    return LodgingChecklist(infant_toddler=list(INFANT_TODDLER_LODGING))


def _compose(groups: Iterable[AdviceGroup], key: str) -> List[str]:
    merged: List[str] = []
    for group in groups:
        for item in group.get(key, ()):
            if item not in merged:
                merged.append(item)
    return merged
