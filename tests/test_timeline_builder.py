from trip_prep.agents.timeline_builder import CANONICAL_DAYS, build_timeline, merge_timeline
from trip_prep.agents.trip_intake import extract_trip_input
from trip_prep.schemas import TimelineEntry


def _timeline(payload, *, infant=False, solo=False):
    trip = extract_trip_input(payload)
    return build_timeline(trip, has_infant_or_toddler=infant, solo=solo)


def _tasks(timeline, day):
    return next(e.tasks for e in timeline if e.day == day)


def test_baseline_has_five_canonical_days():
    timeline = _timeline({"destination": "Paris"})
    assert [e.day for e in timeline] == list(CANONICAL_DAYS)
    assert _tasks(timeline, "T-3") == [
        "Begin staging outfits",
        "Buy missing toiletries/snacks",
        "Get small bills for tips",
    ]


def test_merge_orders_canonical_then_lexicographic():
    merged = merge_timeline(
        [
            {"day": "Week after", "tasks": ["Unpack"]},
            {"day": "Day of", "tasks": ["Go"]},
            {"day": "After trip", "tasks": ["Upload photos"]},
            {"day": "T-14", "tasks": ["Plan"]},
        ]
    )
    assert [e.day for e in merged] == ["T-14", "Day of", "After trip", "Week after"]


def test_merge_dedupes_tasks_within_a_day():
    merged = merge_timeline(
        [("T-7", ["Call hotel", "Pack"])],
        [{"day": "T-7", "tasks": ["Call hotel", "Book taxi"]}],
    )
    assert merged == [TimelineEntry(day="T-7", tasks=["Call hotel", "Pack", "Book taxi"])]


def test_merge_is_case_sensitive():
    merged = merge_timeline([{"day": "T-1", "tasks": ["Charge phone", "charge phone"]}])
    assert merged[0].tasks == ["Charge phone", "charge phone"]


def test_merge_drops_blank_days_and_empty_buckets():
    merged = merge_timeline(
        [
            {"day": "  ", "tasks": ["orphan"]},
            {"day": "T-3", "tasks": []},
            {"day": "T-3", "tasks": [None, "", 5]},
            "not an entry",
            {"when": " T-1 ", "tasks": "Single task"},
        ]
    )
    assert merged == [TimelineEntry(day="T-1", tasks=["Single task"])]


def test_hotel_and_venue_additions_merge_into_existing_days():
    timeline = _timeline({"accommodation": "hotel", "activities": ["concert_show"]})
    assert [e.day for e in timeline] == list(CANONICAL_DAYS)
    assert "Have ID and payment card ready for hotel check-in" in _tasks(timeline, "Day of")
    assert "Check venue bag policy; consider clear stadium bag" in _tasks(timeline, "T-3")
    assert _tasks(timeline, "T-7")[:2] == ["Confirm tickets/reservations", "Arrange pet/house care if needed"]


def test_family_and_rental_groups_are_exclusive():
    family = _timeline({"accommodation": "family"})
    rental = _timeline({"accommodation": "rental"})
    assert "Send hosts an updated ETA" in _tasks(family, "Day of")
    assert "Follow the self check-in steps on arrival" not in _tasks(family, "Day of")
    assert "Verify lockbox/door code and Wi-Fi details" in _tasks(rental, "T-1")


def test_conditional_groups():
    timeline = _timeline(
        {"trip_type": "both", "context_flags": {"traveling_with_friends": True}},
        infant=True,
        solo=True,
    )
    assert "Set out-of-office reply" in _tasks(timeline, "T-1")
    assert "Touch base with friends on the meetup point" in _tasks(timeline, "Day of")
    assert "Pre-pack the diaper bag" in _tasks(timeline, "T-1")
    assert "Share your itinerary with a trusted contact" in _tasks(timeline, "T-3")
    for entry in timeline:
        assert len(entry.tasks) == len(set(entry.tasks))
