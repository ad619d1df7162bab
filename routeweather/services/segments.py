"""
Route segmentation: sample a route polyline at evenly time-spaced points.

Given a polyline, a sampling interval and an average speed, the planner
walks the route in steps of ``speed × interval`` kilometers and annotates
every sample with its distance from the start and the estimated arrival
time (minutes after "now").  The result feeds the per-waypoint weather
lookup.

The planner is best effort.  It never raises for bad parameters or bad
geometry; it degrades its output instead:

* fewer than two points      → empty list
* non-positive interval/speed → configured defaults
* one interior sample fails   → that sample is skipped
* unusable geometry           → start and end only
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Mapping

from .helper import (
    GeoPoint,
    compute_cumulative_distances,
    is_finite_point,
    point_at_distance,
)

logger = logging.getLogger(__name__)

DEFAULT_SPEED_BY_MODE = {
    "driving-car": 80.0,
    "cycling-regular": 15.0,
    "foot-walking": 5.0,
    "driving": 80.0,
    "cycling": 15.0,
    "walking": 5.0,
}


@dataclass(frozen=True)
class SegmentationConfig:
    default_interval_minutes: float = 30.0
    default_speed_kmh: float = 80.0
    speed_by_mode: Mapping[str, float] = field(
        default_factory=lambda: dict(DEFAULT_SPEED_BY_MODE)
    )

    @classmethod
    def from_settings(cls) -> "SegmentationConfig":
        """Build the config from ``settings.ROUTE_WEATHER``."""
        from django.conf import settings

        config = settings.ROUTE_WEATHER
        return cls(
            default_interval_minutes=float(config["DEFAULT_INTERVAL_MINUTES"]),
            default_speed_kmh=float(config["DEFAULT_SPEED_KMH"]),
            speed_by_mode=dict(config["SPEED_BY_MODE"]),
        )


DEFAULT_CONFIG = SegmentationConfig()


@dataclass(frozen=True)
class Waypoint:
    position: GeoPoint
    distance_from_start: float   # km
    estimated_time: float        # minutes after the reference instant
    sequence_index: int


@dataclass(frozen=True)
class SegmentationResult:
    waypoints: list[Waypoint]
    skipped_distances: list[float] = field(default_factory=list)
    used_fallback: bool = False


def get_average_speed(
    travel_mode: str | None,
    config: SegmentationConfig | None = None,
) -> float:
    """Average speed (km/h) for a travel-mode tag such as ``"cycling"``."""
    config = config or DEFAULT_CONFIG
    return float(config.speed_by_mode.get(travel_mode, config.default_speed_kmh))


def _number_or(value, default: float, allow_zero: bool = False) -> float:
    """``value`` as a float, or ``default`` when missing, non-numeric,
    non-finite, negative, or zero (unless ``allow_zero``)."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number < 0 or (number == 0 and not allow_zero):
        return default
    return number


def _locate_sample(
    locate: Callable[[float], GeoPoint | None],
    distance: float,
) -> GeoPoint | None:
    """Position at ``distance`` km, or ``None`` if it cannot be located."""
    try:
        point = locate(distance)
        if is_finite_point(point):
            return float(point[0]), float(point[1])
    except Exception:
        logger.warning(
            "Locating route point at %.3f km failed; skipping sample",
            distance, exc_info=True,
        )
        return None
    logger.warning(
        "Could not locate route point at %.3f km; skipping sample", distance
    )
    return None


def plan_segments_with_diagnostics(
    polyline: list[GeoPoint],
    interval_minutes: float,
    average_speed_kmh: float,
    departure_offset_minutes: float = 0.0,
    config: SegmentationConfig | None = None,
    locate: Callable[[float], GeoPoint | None] | None = None,
) -> SegmentationResult:
    """
    Sample ``polyline`` every ``interval_minutes`` of travel.

    Parameters
    ----------
    polyline :
        Route as [(lat, lng), …].  Only read.
    interval_minutes, average_speed_kmh :
        Sampling interval and travel speed.  Non-positive values are
        replaced by the config defaults.
    departure_offset_minutes :
        Shifts every estimated time; negative values count as 0.
    config :
        Defaults table.  ``DEFAULT_CONFIG`` when omitted.
    locate :
        ``distance_km -> (lat, lng) | None``.  Overrides the polyline
        interpolation.  A sample whose locator returns ``None`` or a
        non-finite point, or raises, is skipped.

    Returns
    -------
    SegmentationResult
        ``waypoints`` plus the distances of skipped interior samples and
        whether the two-point fallback was used.
    """
    if not polyline or len(polyline) < 2:
        return SegmentationResult(waypoints=[])

    config = config or DEFAULT_CONFIG
    interval = _number_or(interval_minutes, config.default_interval_minutes)
    speed = _number_or(average_speed_kmh, config.default_speed_kmh)
    departure = _number_or(departure_offset_minutes, 0.0, allow_zero=True)
    if (interval, speed) != (interval_minutes, average_speed_kmh):
        logger.debug(
            "Segmentation parameters defaulted: interval=%s -> %s, speed=%s -> %s",
            interval_minutes, interval, average_speed_kmh, speed,
        )

    start, end = polyline[0], polyline[-1]

    def eta(distance: float) -> float:
        return departure + distance / speed * 60

    def fallback() -> SegmentationResult:
        return SegmentationResult(
            waypoints=[
                Waypoint(start, 0.0, departure, 0),
                Waypoint(end, 0.0, departure, 1),
            ],
            used_fallback=True,
        )

    try:
        cumulative = compute_cumulative_distances(polyline)
        total_distance = cumulative[-1]
        if not math.isfinite(total_distance):
            logger.warning(
                "Route length is not finite (%d points); returning endpoints only",
                len(polyline),
            )
            return fallback()

        distance_per_interval = speed * interval / 60

        # Short route: one interval already covers it.
        if total_distance <= distance_per_interval:
            return SegmentationResult(
                waypoints=[
                    Waypoint(start, 0.0, departure, 0),
                    Waypoint(end, total_distance, eta(total_distance), 1),
                ]
            )

        if locate is None:
            def locate(distance: float) -> GeoPoint:
                return point_at_distance(polyline, distance, cumulative)

        waypoints = [Waypoint(start, 0.0, departure, 0)]
        skipped: list[float] = []
        current_distance = 0.0
        # The end point is appended separately, so stop one step short.
        while current_distance < total_distance - distance_per_interval:
            current_distance += distance_per_interval
            position = _locate_sample(locate, current_distance)
            if position is None:
                skipped.append(current_distance)
                continue
            waypoints.append(
                Waypoint(
                    position=position,
                    distance_from_start=current_distance,
                    estimated_time=eta(current_distance),
                    sequence_index=len(waypoints),
                )
            )

        waypoints.append(
            Waypoint(end, total_distance, eta(total_distance), len(waypoints))
        )
    except Exception:
        logger.exception("Route segmentation failed; returning endpoints only")
        return fallback()

    logger.debug(
        "Planned %d waypoints over %.1f km (%d skipped)",
        len(waypoints), total_distance, len(skipped),
    )
    return SegmentationResult(waypoints=waypoints, skipped_distances=skipped)


def plan_segments(
    polyline: list[GeoPoint],
    interval_minutes: float,
    average_speed_kmh: float,
    departure_offset_minutes: float = 0.0,
    config: SegmentationConfig | None = None,
    locate: Callable[[float], GeoPoint | None] | None = None,
) -> list[Waypoint]:
    """Waypoints only; see :func:`plan_segments_with_diagnostics`."""
    return plan_segments_with_diagnostics(
        polyline,
        interval_minutes,
        average_speed_kmh,
        departure_offset_minutes,
        config=config,
        locate=locate,
    ).waypoints
