from __future__ import annotations

import math
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

# ------- Enumerations -------
class ActivityTag(str, Enum):
    LOTS_OF_WALKING = "lots_of_walking"
    FANCY_DINNER = "fancy_dinner"
    BEACH = "beach"
    POOL = "pool"
    HIKING = "hiking"
    BOATING_SNORKELING = "boating_snorkeling"
    SKIING_SNOW = "skiing_snow"
    FISHING = "fishing"
    CAMPING = "camping"
    THEME_PARK = "theme_park"
    SPORTS_EVENT = "sports_event"
    CONCERT_SHOW = "concert_show"
    MUSEUMS_TOURS = "museums_tours"


TRAVEL_MODES = ("fly", "drive", "cruise", "day_trip")
TRIP_TYPES = ("personal", "work", "both")


def _clean_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _as_dict(value: Any) -> Dict[str, Any]:
    if hasattr(value, "model_dump"):
        return value.model_dump(mode="python")
    return dict(value) if isinstance(value, dict) else {}


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str) and value.strip():
        try:
            value = float(value)
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    try:
        return value if math.isfinite(value) else None
    except OverflowError:
        return None


# ------- Request models -------
class Traveler(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    type: Literal["adult", "child"] = "adult"
    age: Optional[int] = None  # None means unknown; 0 is a real infant age

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> str:
        return _clean_str(value)

    @field_validator("type", mode="before")
    @classmethod
    def _type(cls, value: Any) -> str:
        return "child" if _clean_str(value).lower() == "child" else "adult"

    @field_validator("age", mode="before")
    @classmethod
    def _age(cls, value: Any) -> Optional[int]:
        number = _as_number(value)
        if number is None or number < 0:
            return None
        return int(number)


class WeatherSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    avg_high_f: Optional[float] = None
    avg_low_f: Optional[float] = None
    wet_days_pct: Optional[float] = None
    notes: str = ""
    matched_location: Optional[str] = None

    @field_validator("avg_high_f", "avg_low_f", "wet_days_pct", mode="before")
    @classmethod
    def _numbers(cls, value: Any) -> Optional[float]:
        return _as_number(value)

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, value: Any) -> str:
        return _clean_str(value)

    @field_validator("matched_location", mode="before")
    @classmethod
    def _location(cls, value: Any) -> Optional[str]:
        if isinstance(value, dict):
            name = _clean_str(value.get("name"))
            country = _clean_str(value.get("country"))
            if not name:
                return None
            return f"{name}, {country}" if country else name
        return _clean_str(value) or None

    @classmethod
    def from_raw(cls, raw: Any) -> "WeatherSummary":
        """Read a summary either flat or nested under ``summary`` (raw weather response)."""
        data = _as_dict(raw)
        nested = data.get("summary") if isinstance(data.get("summary"), dict) else {}
        merged = {
            key: data.get(key) if data.get(key) is not None else nested.get(key)
            for key in ("avg_high_f", "avg_low_f", "wet_days_pct", "notes")
        }
        merged["matched_location"] = data.get("matched_location")
        return cls.model_validate(merged)


class _ModeLogistics(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _clean_fields(cls, data: Any) -> Any:
        # "mode" is the union discriminator and is passed through untouched
        if not isinstance(data, dict):
            return data
        cleaned: Dict[str, Any] = {}
        for key, value in data.items():
            if key == "mode":
                cleaned[key] = value
            elif key == "estimated_hours":
                cleaned[key] = _as_number(value)
            else:
                cleaned[key] = _clean_str(value)
        return cleaned


class FlyMode(_ModeLogistics):
    mode: Literal["fly"] = "fly"
    departure_airport: str = ""
    airline: str = ""
    flight_time_local: str = ""


class DriveMode(_ModeLogistics):
    mode: Literal["drive"] = "drive"
    start_location: str = ""
    estimated_hours: Optional[float] = None


class CruiseMode(_ModeLogistics):
    mode: Literal["cruise"] = "cruise"
    cruise_line: str = ""
    embarkation_port: str = ""


class DayTripMode(_ModeLogistics):
    mode: Literal["day_trip"] = "day_trip"
    transport: str = ""


TravelMode = Annotated[
    Union[FlyMode, DriveMode, CruiseMode, DayTripMode],
    Field(discriminator="mode"),
]

_MODE_MODELS = {
    "fly": FlyMode,
    "drive": DriveMode,
    "cruise": CruiseMode,
    "day_trip": DayTripMode,
}


class ContextFlags(BaseModel):
    model_config = ConfigDict(extra="ignore")

    traveling_solo: bool = False
    single_parent: bool = False
    traveling_with_friends: bool = False

    @field_validator("*", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes", "on")
        return bool(value)


class VenueInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    city: str = ""
    type_hint: str = ""
    activities: List[str] = Field(default_factory=list)

    @field_validator("name", "city", "type_hint", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _clean_str(value)

    @field_validator("activities", mode="before")
    @classmethod
    def _acts(cls, value: Any) -> List[str]:
        return [s for s in (_clean_str(v) for v in value) if s] if isinstance(value, list) else []


class HotelLogistics(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    city: str = ""

    @field_validator("name", "city", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _clean_str(value)


class TripInput(BaseModel):
    """Normalized trip input. Every optional field degrades to a default instead of failing."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    destination: str = ""
    start_date: str = ""
    end_date: str = ""
    modes: List[TravelMode] = Field(
        default_factory=list, validation_alias=AliasChoices("modes", "mode")
    )
    trip_type: Literal["personal", "work", "both"] = "personal"
    accommodation: Literal["hotel", "family", "rental", ""] = ""
    transportation: str = ""
    travelers: List[Traveler] = Field(default_factory=list)
    activities: List[str] = Field(default_factory=list)
    context_flags: ContextFlags = Field(default_factory=ContextFlags)
    venue_input: Optional[VenueInput] = None
    hotel: Optional[HotelLogistics] = None
    weather_summary: Optional[WeatherSummary] = None

    @field_validator("destination", "start_date", "end_date", "transportation", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _clean_str(value)

    @field_validator("trip_type", mode="before")
    @classmethod
    def _trip_type(cls, value: Any) -> str:
        text = _clean_str(value).lower()
        return text if text in TRIP_TYPES else "personal"

    @field_validator("accommodation", mode="before")
    @classmethod
    def _accommodation(cls, value: Any) -> str:
        text = _clean_str(value).lower()
        if any(word in text for word in ("family", "relative", "friend")):
            return "family"
        if "hotel" in text:
            return "hotel"
        if any(word in text for word in ("rental", "airbnb", "vrbo")):
            return "rental"
        return ""

    @field_validator("modes", mode="before")
    @classmethod
    def _modes(cls, value: Any) -> List[Any]:
        raw = value if isinstance(value, list) else [value]
        modes: List[Any] = []
        seen: set[str] = set()
        for item in raw:
            if isinstance(item, BaseModel):
                item = item.model_dump(mode="python")
            tag = _clean_str(item.get("mode") if isinstance(item, dict) else item).lower()
            if tag not in _MODE_MODELS or tag in seen:
                continue
            seen.add(tag)
            modes.append({**item, "mode": tag} if isinstance(item, dict) else {"mode": tag})
        return modes

    @field_validator("travelers", mode="before")
    @classmethod
    def _travelers(cls, value: Any) -> List[Any]:
        if not isinstance(value, list):
            return []
        return [p for p in value if isinstance(p, (dict, Traveler))]

    @field_validator("activities", mode="before")
    @classmethod
    def _activities(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        seen: List[str] = []
        for item in value:
            tag = _clean_str(getattr(item, "value", item))
            if tag and tag not in seen:
                seen.append(tag)
        return seen

    @field_validator("context_flags", mode="before")
    @classmethod
    def _flags(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, ContextFlags)) else {}

    @field_validator("venue_input", mode="before")
    @classmethod
    def _venue(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, VenueInput)) else None

    @field_validator("hotel", mode="before")
    @classmethod
    def _hotel(cls, value: Any) -> Any:
        return value if isinstance(value, (dict, HotelLogistics)) else None

    @field_validator("weather_summary", mode="before")
    @classmethod
    def _weather(cls, value: Any) -> Any:
        if isinstance(value, WeatherSummary):
            return value
        return WeatherSummary.from_raw(value) if isinstance(value, dict) else None

    @property
    def mode_tags(self) -> List[str]:
        return [m.mode for m in self.modes]

    def has_mode(self, tag: str) -> bool:
        return tag in self.mode_tags

    def logistics_for(self, tag: str):
        return next((m for m in self.modes if m.mode == tag), None)


# ------- Response models -------
class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TripDates(BaseModel):
    start: str = ""
    end: str = ""


class TravelerCounts(_CamelModel):
    total: int = 0
    adults: int = 0
    children: int = 0
    names: List[str] = Field(default_factory=list)
    ages_children: List[int] = Field(default_factory=list, alias="agesChildren")
    youngest_child_age: Optional[int] = Field(None, alias="youngestChildAge")


class PlanBasics(_CamelModel):
    destination: str = ""
    dates: TripDates = Field(default_factory=TripDates)
    travelers: TravelerCounts = Field(default_factory=TravelerCounts)
    accommodation: str = ""
    transportation: str = ""
    modes: List[str] = Field(default_factory=list)
    has_infant_or_toddler: bool = Field(False, alias="hasInfantOrToddler")


class TimelineEntry(BaseModel):
    day: str
    tasks: List[str] = Field(default_factory=list)


class PackingLists(_CamelModel):
    by_person: Dict[str, List[str]] = Field(default_factory=dict, alias="byPerson")
    combined: List[str] = Field(default_factory=list)
    minimal_by_person: Dict[str, List[str]] = Field(default_factory=dict, alias="minimalByPerson")
    minimal_combined: List[str] = Field(default_factory=list, alias="minimalCombined")


class OverpackAdvice(_CamelModel):
    skip: List[str] = Field(default_factory=list)
    last_minute: List[str] = Field(default_factory=list, alias="lastMinute")
    house_prep: List[str] = Field(default_factory=list, alias="housePrep")


class LodgingChecklist(_CamelModel):
    infant_toddler: List[str] = Field(default_factory=list, alias="infantToddler")


class TripPlan(_CamelModel):
    basics: PlanBasics = Field(default_factory=PlanBasics)
    activities: List[str] = Field(default_factory=list)
    weather: WeatherSummary = Field(default_factory=WeatherSummary)
    timeline: List[TimelineEntry] = Field(default_factory=list)
    packing: PackingLists = Field(default_factory=PackingLists)
    overpack: OverpackAdvice = Field(default_factory=OverpackAdvice)
    lodging: Optional[LodgingChecklist] = None
    ai_blurb: Optional[str] = Field(None, alias="aiBlurb")
    ai_venue_tips: List[str] = Field(default_factory=list, alias="aiVenueTips")
    ai_extra_todos: List[str] = Field(default_factory=list, alias="aiExtraTodos")
    smart_must_haves: List[str] = Field(default_factory=list, alias="smartMustHaves")


# ------- AI suggestion contract -------
class OverpackAdditions(_CamelModel):
    skip: List[str] = Field(default_factory=list)
    last_minute: List[str] = Field(default_factory=list, alias="lastMinute")
    house_prep: List[str] = Field(default_factory=list, alias="housePrep")


class AiSuggestions(_CamelModel):
    trip_blurb: str = ""
    venue_bag_policy_tips: List[str] = Field(default_factory=list)
    extra_to_dos: List[str] = Field(default_factory=list)
    packing_additions: List[str] = Field(default_factory=list)
    overpack_additions: OverpackAdditions = Field(default_factory=OverpackAdditions)
    timeline_additions: List[TimelineEntry] = Field(default_factory=list)
    smart_must_haves: List[str] = Field(default_factory=list)


# ------- Weather lookup -------
class DailyWeather(_CamelModel):
    date: str
    high_f: Optional[float] = Field(None, alias="highF")
    low_f: Optional[float] = Field(None, alias="lowF")
    precip_inches: Optional[float] = Field(None, alias="precipInches")
    precip_chance_pct: Optional[float] = Field(None, alias="precipChancePct")


class MatchedLocation(BaseModel):
    name: str
    admin1: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    latitude: float
    longitude: float

    @property
    def label(self) -> str:
        return f"{self.name}, {self.country}" if self.country else self.name


class DateRange(_CamelModel):
    start_date: str = Field(alias="startDate")
    end_date: str = Field(alias="endDate")


class WeatherReport(BaseModel):
    city: str
    matched_location: MatchedLocation
    range: DateRange
    summary: WeatherSummary
    daily: List[DailyWeather] = Field(default_factory=list)
