"""Regression tests for the packing rule engine."""

from trip_prep.agents.packing_rules import (
    ACTIVITY_PACKING,
    PackingEntry,
    PackingListBuilder,
    build_packing,
    display_names,
)
from trip_prep.agents.trip_intake import extract_trip_input
from trip_prep.schemas import ActivityTag, Traveler


def _packing(**overrides):
    payload = {
        "destination": "San Diego, CA",
        "start_date": "2025-08-01",
        "end_date": "2025-08-05",
        "modes": [],
        "travelers": [{"name": "Alex", "type": "adult", "age": 38}],
    }
    payload.update(overrides)
    return build_packing(extract_trip_input(payload))


def test_every_activity_tag_has_packing_rules():
    assert set(ACTIVITY_PACKING) == set(ActivityTag)
    assert all(ACTIVITY_PACKING[tag] for tag in ActivityTag)


def test_builder_upgrades_to_essential_but_never_downgrades():
    builder = PackingListBuilder()
    builder.add([PackingEntry("Swim diapers (if needed)"), PackingEntry("Stroller", True)])
    builder.add([PackingEntry("Swim diapers (if needed)", True), PackingEntry("Stroller", False)])

    assert builder.items == ["Swim diapers (if needed)", "Stroller"]
    assert builder.essentials == ["Swim diapers (if needed)", "Stroller"]


def test_base_items_are_always_essential():
    packing = _packing()
    alex = packing.by_person["Alex"]
    assert alex[0] == "Photo ID / Passports"
    assert "Outfits for each day + 1 spare" in packing.minimal_by_person["Alex"]


def test_beach_items_and_sun_protection():
    packing = _packing(activities=["beach"])
    alex = packing.by_person["Alex"]
    minimal = packing.minimal_by_person["Alex"]

    for item in ("Swimsuit", "Cover-up", "Reef-safe sunscreen", "Flip-flops", "Sunscreen (SPF 30+)", "Sun hat"):
        assert item in alex
    assert "Swimsuit" in minimal and "Reef-safe sunscreen" in minimal
    assert "Cover-up" not in minimal


def test_outdoor_sun_protection_for_any_outdoor_activity():
    assert "Sunscreen (SPF 30+)" in _packing(activities=["fishing"]).combined
    assert "Sunscreen (SPF 30+)" not in _packing(activities=["museums_tours"]).combined


def test_unknown_activity_adds_nothing():
    assert _packing(activities=["karaoke"]).combined == _packing().combined


def test_swimsuit_listed_once_for_beach_and_pool():
    combined = _packing(activities=["beach", "pool"]).combined
    assert combined.count("Swimsuit") == 1


def test_family_stay_and_transit():
    combined = _packing(accommodation="family", transportation="subway").combined
    assert "Small thank-you gift for host" in combined
    assert "Transit card/app set up" in combined
    assert "Car snacks" not in combined


def test_drive_mode_or_car_text_adds_car_items():
    assert "Car phone mount" in _packing(modes=["drive"]).combined
    assert "Car phone mount" in _packing(transportation="Rental car").combined


def test_day_trip_transport_counts_as_getting_around():
    combined = _packing(modes=["day_trip"], logistics={"day_trip": {"transport": "train"}}).combined
    assert "Light day bag with zipper" in combined


def test_fly_mode_adds_app_and_adult_liquids():
    packing = _packing(modes=["fly"])
    assert "Download airline app" in packing.minimal_combined
    assert "Compression socks" in packing.combined
    assert "TSA-size liquids" in packing.minimal_by_person["Alex"]


def test_cruise_mode_items():
    packing = _packing(modes=["cruise"])
    for item in ("Cruise documents / boarding pass", "Seasickness remedy", "Motion-sickness remedy"):
        assert item in packing.minimal_combined
    assert "Lanyard for cruise card" in packing.combined
    assert "Non-surge power strip (cruise-approved)" in packing.combined


def test_weather_thresholds_are_inclusive():
    packing = _packing(weather_summary={"avg_high_f": 80, "avg_low_f": 45, "wet_days_pct": 30})
    for item in ("Extra sunscreen", "Hat / sunglasses", "Warm jacket / layers", "Compact umbrella / rain jacket"):
        assert item in packing.minimal_combined
    assert "Gloves / scarf" in packing.combined


def test_mild_weather_adds_nothing():
    packing = _packing(weather_summary={"avg_high_f": 79.9, "avg_low_f": 45.1, "wet_days_pct": 29})
    assert packing.combined == _packing().combined


def test_toddler_rules_need_known_age():
    packing = _packing(
        travelers=[
            {"name": "Ivy", "type": "child", "age": 3},
            {"name": "Leo", "type": "child", "age": None},
            {"name": "Ana", "type": "child", "age": 9},
        ]
    )
    assert "Diapers / wipes" in packing.minimal_by_person["Ivy"]
    assert "Stroller" in packing.minimal_by_person["Ivy"]
    assert "Snack cups" in packing.by_person["Ivy"]
    assert "Diapers / wipes" not in packing.by_person["Leo"]
    assert "Diapers / wipes" not in packing.by_person["Ana"]
    assert "Favorite snack" in packing.minimal_by_person["Leo"]


def test_toddler_swim_diapers_upgraded_to_essential():
    packing = _packing(activities=["pool"], travelers=[{"name": "Ivy", "type": "child", "age": 1}])
    assert "Swim diapers (if needed)" in packing.minimal_by_person["Ivy"]
    assert packing.by_person["Ivy"].count("Swim diapers (if needed)") == 1


def test_theme_park_stroller_tag_for_children_only():
    packing = _packing(
        activities=["theme_park"],
        travelers=[{"name": "Alex", "type": "adult"}, {"name": "Ivy", "type": "child", "age": 6}],
    )
    assert "Stroller tag / identifier" in packing.by_person["Ivy"]
    assert "Stroller tag / identifier" not in packing.by_person["Alex"]


def test_work_trip_items_for_adults():
    work = _packing(trip_type="work")
    both = _packing(trip_type="both")

    assert "Professional outfit" in work.minimal_combined
    assert "Business card holder" in work.combined
    assert "Professional outfit" in both.combined
    assert "Professional outfit" not in both.minimal_combined
    assert "Business card holder" not in both.combined
    assert "Laptop + charger" in both.minimal_combined


def test_solo_items_for_single_traveler_or_flag():
    assert "Personal safety alarm" in _packing().combined
    pair = [{"name": "A", "type": "adult"}, {"name": "B", "type": "adult"}]
    assert "Personal safety alarm" not in _packing(travelers=pair).combined
    assert "Portable door wedge" in _packing(travelers=pair, context_flags={"traveling_solo": True}).combined


def test_fallback_traveler_when_nobody_declared():
    packing = _packing(travelers=[], modes=["fly"], accommodation="family", activities=["hiking"])
    assert list(packing.by_person) == ["Adult"]
    adult = packing.by_person["Adult"]
    assert "Daypack" in adult
    assert "Download airline app" not in adult
    assert "Small thank-you gift for host" not in adult
    assert "Personal safety alarm" not in adult


def test_fallback_traveler_named_traveler_when_solo():
    packing = _packing(travelers=[], context_flags={"traveling_solo": True})
    assert list(packing.by_person) == ["Traveler"]
    assert "Personal safety alarm" in packing.by_person["Traveler"]


def test_duplicate_display_names_are_suffixed():
    travelers = [
        Traveler(name="", type="child"),
        Traveler(name="", type="child"),
        Traveler(name="", type="adult"),
        Traveler(name="Child #2", type="adult"),
    ]
    assert display_names(travelers) == ["Child", "Child #2", "Adult", "Child #2 #2"]


def test_combined_keeps_first_seen_order_across_travelers():
    packing = _packing(
        modes=["fly"],
        travelers=[{"name": "Ivy", "type": "child", "age": 2}, {"name": "Alex", "type": "adult"}],
    )
    combined = packing.combined
    assert combined.index("Diapers / wipes") < combined.index("TSA-size liquids")
    assert len(combined) == len(set(combined))
    assert set(packing.minimal_combined) <= set(combined)
