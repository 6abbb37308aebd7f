import pytest

from trip_prep.agents.trip_intake import InvalidTripInput, extract_trip_input
from trip_prep.schemas import DriveMode, FlyMode, TripInput, WeatherSummary

SAMPLE_PAYLOAD = {
    "destination": "  Boston, MA ",
    "start_date": "2025-07-10",
    "end_date": "2025-07-14",
    "modes": ["fly", "drive"],
    "trip_type": "work",
    "accommodation": "Hotel",
    "transportation": "subway",
    "travelers": [
        {"name": " Dana ", "age": "41", "type": "adult"},
        {"name": "", "age": "", "type": "child"},
        {"name": "Milo", "age": 0, "type": "child"},
    ],
    "activities": ["beach", "beach", "museums_tours"],
    "context_flags": {"traveling_solo": False, "traveling_with_friends": True},
    "logistics": {
        "fly": {"departure_airport": "BOS", "airline": "JetBlue", "flight_time_local": "08:15"},
        "drive": {"start_location": "Albany, NY", "estimated_hours": "3.5"},
    },
}


def test_trip_input_normalizes_travelers():
    trip = extract_trip_input(SAMPLE_PAYLOAD)

    assert trip.destination == "Boston, MA"
    assert [p.name for p in trip.travelers] == ["Dana", "", "Milo"]
    assert [p.age for p in trip.travelers] == [41, None, 0]
    assert [p.type for p in trip.travelers] == ["adult", "child", "child"]


@pytest.mark.parametrize("age", ["", None, "abc", -3, float("nan"), True])
def test_unknown_age_is_none_not_zero(age):
    trip = extract_trip_input({"travelers": [{"name": "Kid", "type": "child", "age": age}]})
    assert trip.travelers[0].age is None


def test_missing_age_key_is_none():
    trip = extract_trip_input({"travelers": [{"name": "Kid", "type": "child"}]})
    assert trip.travelers[0].age is None


def test_unrecognized_traveler_type_defaults_to_adult():
    trip = extract_trip_input({"travelers": [{"name": "Sam", "type": "senior"}]})
    assert trip.travelers[0].type == "adult"


def test_logistics_fold_into_mode_variants():
    trip = extract_trip_input(SAMPLE_PAYLOAD)

    assert trip.mode_tags == ["fly", "drive"]
    fly = trip.logistics_for("fly")
    drive = trip.logistics_for("drive")
    assert isinstance(fly, FlyMode) and fly.airline == "JetBlue"
    assert isinstance(drive, DriveMode) and drive.estimated_hours == 3.5
    assert trip.logistics_for("cruise") is None


def test_legacy_single_mode_key_is_accepted():
    trip = extract_trip_input({"mode": "fly", "logistics": {"fly": {"airline": "Delta"}}})
    assert trip.mode_tags == ["fly"]
    assert trip.logistics_for("fly").airline == "Delta"


def test_unknown_enum_values_fall_back():
    trip = extract_trip_input(
        {"modes": ["teleport", "cruise"], "trip_type": "city", "accommodation": "tent", "activities": "beach"}
    )
    assert trip.mode_tags == ["cruise"]
    assert trip.trip_type == "personal"
    assert trip.accommodation == ""
    assert trip.activities == []


def test_accommodation_free_text_maps_to_enum():
    assert extract_trip_input({"accommodation": "Staying with relatives"}).accommodation == "family"
    assert extract_trip_input({"accommodation": "Airbnb"}).accommodation == "rental"


def test_activities_deduplicated_in_order():
    trip = extract_trip_input(SAMPLE_PAYLOAD)
    assert trip.activities == ["beach", "museums_tours"]


def test_end_date_defaults_to_start():
    trip = extract_trip_input({"start_date": "2025-06-01"})
    assert trip.end_date == "2025-06-01"


def test_reversed_dates_are_swapped():
    trip = extract_trip_input({"start_date": "2025-06-10", "end_date": "2025-06-01"})
    assert (trip.start_date, trip.end_date) == ("2025-06-01", "2025-06-10")


def test_wrapped_payload_is_unwrapped():
    trip = extract_trip_input({"trip_input": SAMPLE_PAYLOAD, "constraints": {}})
    assert trip.destination == "Boston, MA"


def test_trip_input_instance_passes_through():
    trip = TripInput(destination="Paris")
    assert extract_trip_input(trip) is trip


@pytest.mark.parametrize("payload", [None, "Paris", 42, ["fly"], {"trip_input": "oops"}])
def test_non_object_payload_fails_fast(payload):
    with pytest.raises(InvalidTripInput):
        extract_trip_input(payload)


def test_weather_summary_reads_nested_summary_and_location_dict():
    wx = WeatherSummary.from_raw(
        {
            "summary": {"avg_high_f": 82.5, "avg_low_f": "61", "wet_days_pct": 20, "notes": "Mostly dry"},
            "matched_location": {"name": "Boston", "country": "United States"},
        }
    )
    assert wx.avg_high_f == 82.5
    assert wx.avg_low_f == 61
    assert wx.wet_days_pct == 20
    assert wx.notes == "Mostly dry"
    assert wx.matched_location == "Boston, United States"


def test_malformed_optional_blocks_degrade():
    trip = extract_trip_input(
        {
            "travelers": "two adults",
            "context_flags": "solo",
            "venue_input": 7,
            "weather_summary": "sunny",
            "logistics": ["fly"],
            "modes": ["fly"],
        }
    )
    assert trip.travelers == []
    assert trip.context_flags.traveling_solo is False
    assert trip.venue_input is None
    assert trip.weather_summary is None
    assert trip.logistics_for("fly").airline == ""


def test_mode_variants_clean_loose_logistics():
    drive = DriveMode.model_validate({"mode": "drive", "estimated_hours": "x", "start_location": 5})
    assert drive.estimated_hours is None
    assert drive.start_location == "5"

    trip = TripInput.model_validate({"modes": [{"mode": "drive", "estimated_hours": "x"}, {"mode": "fly", "airline": None}]})
    assert isinstance(trip.modes[0], DriveMode) and trip.modes[0].estimated_hours is None
    assert isinstance(trip.modes[1], FlyMode) and trip.modes[1].airline == ""


def test_oversized_age_is_unknown():
    trip = extract_trip_input({"travelers": [{"name": "X", "type": "child", "age": 10**400}]})
    assert trip.travelers[0].age is None


def test_hotel_logistics_are_read():
    trip = extract_trip_input({"logistics": {"hotel": {"name": " Grand Floridian ", "city": "Orlando"}}})
    assert trip.hotel.name == "Grand Floridian"
    assert trip.hotel.city == "Orlando"
    assert extract_trip_input({"logistics": {"hotel": "somewhere"}}).hotel is None
