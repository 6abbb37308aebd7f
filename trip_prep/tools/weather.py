from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
import os
import re

import httpx

from trip_prep.schemas import DailyWeather, DateRange, MatchedLocation, WeatherReport, WeatherSummary

import logging

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    logger.addHandler(handler)
_level = os.getenv("TRIP_PREP_LOG_LEVEL", "INFO").upper()
logger.setLevel(getattr(logging, _level, logging.INFO))
logger.propagate = False

WET_NOTE_THRESHOLD_PCT = 40
WET_NOTE = "Expect some wet weather - pack umbrellas/light rain jackets."
DRY_NOTE = "Mostly dry - pack layers for temps."


class WeatherLookupError(RuntimeError):
    status_code = 500


class LocationNotFound(WeatherLookupError):
    status_code = 404


class ForecastUnavailable(WeatherLookupError):
    status_code = 502


@dataclass
class DestinationQuery:
    city: str
    state: str = ""
    country_code: str = ""


def parse_destination(raw: str) -> DestinationQuery:
    """Split "City, ST" style input; a two-letter state implies the US."""
    parts = [p.strip() for p in (raw or "").strip().split(",") if p.strip()]
    city = parts[0] if parts else ""
    state = parts[1] if len(parts) > 1 else ""
    country_code = "US" if re.fullmatch(r"[A-Za-z]{2}", state) else ""
    return DestinationQuery(city=city, state=state, country_code=country_code)


def pick_best_result(results: Sequence[Dict[str, Any]], query: DestinationQuery) -> Optional[Dict[str, Any]]:
    """Prefer country + admin1 match, then country match, then the first hit."""
    if not results:
        return None
    code = query.country_code.upper()
    state = query.state.lower()

    def country_ok(r: Dict[str, Any]) -> bool:
        return not code or (r.get("country_code") or "").upper() == code

    for r in results:
        if country_ok(r) and (not state or state in (r.get("admin1") or "").lower()):
            return r
    for r in results:
        if country_ok(r):
            return r
    return results[0]


def summarize_daily(daily: Dict[str, Any]) -> List[DailyWeather]:
    times = daily.get("time") or []

    def col(key: str, idx: int) -> Optional[float]:
        values = daily.get(key) or []
        return values[idx] if idx < len(values) else None

    return [
        DailyWeather(
            date=day,
            high_f=col("temperature_2m_max", i),
            low_f=col("temperature_2m_min", i),
            precip_inches=col("precipitation_sum", i),
            precip_chance_pct=col("precipitation_probability_mean", i),
        )
        for i, day in enumerate(times)
    ]


def summarize_days(days: List[DailyWeather], location: MatchedLocation) -> WeatherSummary:
    def avg(values: List[float]) -> Optional[float]:
        return round(sum(values) / len(values), 1) if values else None

    highs = [d.high_f for d in days if d.high_f is not None]
    lows = [d.low_f for d in days if d.low_f is not None]
    wet_days = [d for d in days if (d.precip_inches or 0) > 0]
    wet_pct = round(len(wet_days) / len(days) * 100) if days else None
    return WeatherSummary(
        avg_high_f=avg(highs),
        avg_low_f=avg(lows),
        wet_days_pct=wet_pct,
        notes=WET_NOTE if (wet_pct or 0) >= WET_NOTE_THRESHOLD_PCT else DRY_NOTE,
        matched_location=location.label,
    )


class WeatherClient:
    """Open-Meteo geocoding + daily forecast, summarized for the plan builder."""

    GEOCODE_ENDPOINT = "https://geocoding-api.open-meteo.com/v1/search"
    FORECAST_ENDPOINT = "https://api.open-meteo.com/v1/forecast"
    DAILY_FIELDS = (
        "temperature_2m_max",
        "temperature_2m_min",
        "precipitation_sum",
        "precipitation_probability_mean",
    )

    def __init__(self, *, timeout: Optional[float] = None):
        self.timeout = timeout if timeout is not None else float(os.getenv("TRIP_PREP_HTTP_TIMEOUT", "10"))

    async def geocode(self, query: str) -> List[Dict[str, Any]]:
        params = {"name": query, "count": 10, "language": "en"}
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.GEOCODE_ENDPOINT, params=params)
            response.raise_for_status()
            data = response.json()
        return data.get("results") or []

    async def geocode_destination(self, destination: str) -> Optional[Dict[str, Any]]:
        """Try the full string, then the city alone, then the string without punctuation."""
        query = parse_destination(destination)
        attempts = [destination]
        if query.city and query.city.lower() != destination.lower():
            attempts.append(query.city)
        cleaned = re.sub(r"\s+", " ", re.sub(r"[^\w\s]|_", " ", destination)).strip()
        if cleaned and cleaned.lower() != destination.lower():
            attempts.append(cleaned)

        for attempt in attempts:
            picked = pick_best_result(await self.geocode(attempt), query)
            if picked:
                logger.info("Geocoded '%s' via '%s' -> %s", destination, attempt, picked.get("name"))
                return picked
        return None

    async def forecast(self, hit: Dict[str, Any], start_date: str, end_date: str) -> Dict[str, Any]:
        params = {
            "latitude": hit["latitude"],
            "longitude": hit["longitude"],
            "start_date": start_date,
            "end_date": end_date,
            "daily": ",".join(self.DAILY_FIELDS),
            "temperature_unit": "fahrenheit",
            "precipitation_unit": "inch",
            "timezone": hit.get("timezone") or "auto",
        }
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(self.FORECAST_ENDPOINT, params=params)
            response.raise_for_status()
            return response.json()

    async def report(self, destination: str, start_date: str, end_date: str) -> WeatherReport:
        hit = await self.geocode_destination(destination)
        if not hit:
            raise LocationNotFound(f'Could not geocode "{destination}"')

        data = await self.forecast(hit, start_date, end_date)
        days = summarize_daily(data.get("daily") or {})
        if not days:
            raise ForecastUnavailable("No daily forecast returned")

        location = MatchedLocation(
            name=hit.get("name") or destination,
            admin1=hit.get("admin1"),
            country=hit.get("country"),
            country_code=hit.get("country_code"),
            latitude=hit["latitude"],
            longitude=hit["longitude"],
        )
        summary = summarize_days(days, location)
        logger.info(
            "Weather for %s %s..%s: high %s, low %s, wet %s%%",
            location.label,
            start_date,
            end_date,
            summary.avg_high_f,
            summary.avg_low_f,
            summary.wet_days_pct,
        )
        return WeatherReport(
            city=destination,
            matched_location=location,
            range=DateRange(start_date=start_date, end_date=end_date),
            summary=summary,
            daily=days,
        )


async def fetch_weather_summary(destination: str, start_date: str, end_date: str | None = None) -> WeatherSummary:
    """Convenience wrapper returning only the summary the plan builder consumes."""
    report = await WeatherClient().report(destination, start_date, end_date or start_date)
    return report.summary
