"""
Trip planning pipeline.

Flow
----
1. Geocode origin / destination.
2. OSRM route for the travel mode.
3. Sample the route polyline into time-spaced waypoints.
4. One weather lookup per waypoint, run in parallel.  A failed lookup
   only affects its own waypoint.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta

from django.conf import settings
from django.utils import timezone

from . import geocoding, provider_call, weather
from .formatting import format_clock, format_distance, format_duration, format_time
from .segments import SegmentationConfig, Waypoint, get_average_speed, plan_segments

logger = logging.getLogger(__name__)


def _fetch_weather(waypoint: Waypoint) -> tuple[dict | None, str | None]:
    lat, lng = waypoint.position
    try:
        record = weather.get_weather_at_time(lat, lng, waypoint.estimated_time)
        record["icon_url"] = weather.weather_icon_url(record.get("icon"))
        record["summary"] = weather.describe_weather(record)
        return record, None
    except (ValueError, RuntimeError) as e:
        logger.warning(
            "Weather lookup failed for waypoint %d (%s, %s): %s",
            waypoint.sequence_index, lat, lng, e,
        )
        return None, str(e)


def fetch_waypoint_weather(
    waypoints: list[Waypoint],
) -> list[tuple[dict | None, str | None]]:
    """
    ``(record, error)`` for each waypoint, in waypoint order.

    The waypoint list is complete before the first lookup starts; lookups
    are independent of each other.
    """
    if not waypoints:
        return []
    max_workers = min(settings.ROUTE_WEATHER["WEATHER_MAX_WORKERS"], len(waypoints))
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        return list(pool.map(_fetch_weather, waypoints))


def serialize_waypoint(waypoint: Waypoint, now: datetime) -> dict:
    arrival = now + timedelta(minutes=waypoint.estimated_time)
    lat, lng = waypoint.position
    return {
        "sequence_index": waypoint.sequence_index,
        "lat": lat,
        "lng": lng,
        "distance_from_start": round(waypoint.distance_from_start, 3),
        "estimated_time": round(waypoint.estimated_time, 2),
        "eta_text": format_time(waypoint.estimated_time),
        "arrival_time": arrival.isoformat(),
        "arrival_clock": format_clock(timezone.localtime(arrival)),
    }


def plan_route_weather(
    points: list[tuple[float, float]],
    travel_mode: str,
    interval_minutes: float,
    departure_offset_minutes: float = 0,
    include_weather: bool = True,
    now: datetime | None = None,
) -> dict:
    """Waypoints (and weather) for an already fetched route polyline."""
    now = now or timezone.now()
    config = SegmentationConfig.from_settings()
    speed = get_average_speed(travel_mode, config)

    waypoints = plan_segments(
        points,
        interval_minutes,
        speed,
        departure_offset_minutes,
        config=config,
    )
    logger.info(
        "Planned %d waypoints (%s, %.0f km/h, every %s min)",
        len(waypoints), travel_mode, speed, interval_minutes,
    )

    rows = [serialize_waypoint(wp, now) for wp in waypoints]
    if include_weather:
        for row, (record, error) in zip(rows, fetch_waypoint_weather(waypoints)):
            row["weather"] = record
            row["weather_error"] = error

    return {"average_speed_kmh": speed, "waypoints": rows}


def plan_trip(
    origin: str,
    destination: str,
    travel_mode: str = "driving-car",
    interval_minutes: float = 30,
    departure_offset_minutes: float = 0,
    include_weather: bool = True,
    now: datetime | None = None,
) -> dict:
    """
    Full pipeline from two addresses to weather-annotated waypoints.

    Raises
    ------
    ValueError
        Unknown address or no route between the two points.
    RuntimeError
        Geocoder still unavailable after retries.
    requests.RequestException
        Routing provider unreachable.
    """
    start = geocoding.geocode(origin)
    end = geocoding.geocode(destination)

    route = provider_call.get_route(
        start_lat=start[0],
        start_lng=start[1],
        end_lat=end[0],
        end_lng=end[1],
        travel_mode=travel_mode,
    )

    plan = plan_route_weather(
        route["points"],
        travel_mode,
        interval_minutes,
        departure_offset_minutes,
        include_weather=include_weather,
        now=now,
    )

    return {
        "origin": {"query": origin, "lat": start[0], "lng": start[1]},
        "destination": {"query": destination, "lat": end[0], "lng": end[1]},
        "travel_mode": travel_mode,
        "interval_minutes": interval_minutes,
        "departure_offset_minutes": departure_offset_minutes,
        "distance_m": route["distance_m"],
        "distance_km": round(route["distance_km"], 2),
        "duration_s": route["duration_s"],
        "distance_text": format_distance(route["distance_m"]),
        "duration_text": format_duration(route["duration_s"]),
        "encoded_polyline": route["encoded_polyline"],
        "points": route["points"],
        **plan,
    }
