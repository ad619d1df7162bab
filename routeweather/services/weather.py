"""
OpenWeatherMap client for current conditions and 3-hourly forecasts.

All records returned to callers are normalised to one flat shape
(see :func:`normalize_record`) whether they come from the current-weather
endpoint or from a forecast slot.
"""

import logging
import math
import time
from datetime import datetime, timedelta, timezone as dt_timezone

import requests
from django.conf import settings
from django.utils import timezone

logger = logging.getLogger(__name__)

ICON_URL = "https://openweathermap.org/img/wn/{icon}@2x.png"
DEFAULT_ICON = "01d"
DEFAULT_VISIBILITY_M = 10000
USER_AGENT = "RouteWeather/1.0"


def validate_coordinates(lat, lng) -> None:
    errors = []
    for name, value, limit in (("Latitude", lat, 90), ("Longitude", lng, 180)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            errors.append(f"{name} must be a number, got {type(value).__name__}")
        elif not math.isfinite(value):
            errors.append(f"{name} is not finite")
        elif not -limit <= value <= limit:
            errors.append(f"{name} {value} is out of range [-{limit}, {limit}]")
    if errors:
        raise ValueError(f"Invalid coordinates: {', '.join(errors)}")


def _api_key() -> str:
    key = settings.ROUTE_WEATHER["OPENWEATHER_API_KEY"]
    if not key:
        raise RuntimeError(
            "OpenWeatherMap API key is not configured "
            "(set the OPENWEATHER_API_KEY environment variable)."
        )
    return key


def _is_retryable(error: requests.RequestException) -> bool:
    if isinstance(error, (requests.Timeout, requests.ConnectionError)):
        return True
    response = getattr(error, "response", None)
    if response is None:
        return False
    return response.status_code == 429 or 500 <= response.status_code < 600


def _request(endpoint: str, params: dict) -> dict:
    """
    GET ``<base>/<endpoint>`` with the API key, retrying transient errors
    (timeouts, connection errors, HTTP 429 and 5xx) with exponential backoff.
    """
    config = settings.ROUTE_WEATHER
    url = f"{config['OPENWEATHER_BASE_URL']}/{endpoint}"
    max_retries = config["WEATHER_MAX_RETRIES"]
    query = {**params, "units": "metric", "appid": _api_key()}

    last_error = None
    for attempt in range(1, max_retries + 2):
        try:
            logger.debug(
                "OpenWeatherMap %s attempt %d/%d: %s",
                endpoint, attempt, max_retries + 1, params,
            )
            response = requests.get(
                url,
                params=query,
                timeout=config["WEATHER_TIMEOUT"],
                headers={"User-Agent": USER_AGENT},
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            last_error = e
            if attempt > max_retries or not _is_retryable(e):
                break
            delay = config["WEATHER_RETRY_DELAY"] * (2 ** (attempt - 1))
            logger.warning(
                "OpenWeatherMap %s failed (attempt %d/%d): %s, retrying in %ss",
                endpoint, attempt, max_retries + 1, e, delay,
            )
            time.sleep(delay)
        else:
            if not isinstance(data, dict):
                raise RuntimeError(
                    f"Unexpected OpenWeatherMap {endpoint} response: "
                    f"{type(data).__name__}"
                )
            return data

    raise RuntimeError(f"OpenWeatherMap {endpoint} request failed: {last_error}")


def _is_number(value) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float))


def _section(value, name: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise RuntimeError(
            f"Malformed weather record: '{name}' is {type(value).__name__}"
        )
    return value


def normalize_record(data: dict, is_forecasted: bool) -> dict:
    """
    Flatten an OpenWeatherMap record.

    Raises
    ------
    RuntimeError
        The payload does not have the documented shape.
    """
    if not isinstance(data, dict):
        raise RuntimeError(
            f"Malformed weather record: expected an object, got {type(data).__name__}"
        )
    main = _section(data.get("main"), "main")
    wind = _section(data.get("wind"), "wind")
    conditions = data.get("weather") or [{}]
    if not isinstance(conditions, list):
        raise RuntimeError(
            f"Malformed weather record: 'weather' is {type(conditions).__name__}"
        )
    condition = _section(conditions[0], "weather[0]")

    timestamp = data.get("dt")
    forecast_time = None
    if timestamp is not None:
        if not _is_number(timestamp):
            raise RuntimeError(f"Malformed weather record: 'dt' is {timestamp!r}")
        try:
            forecast_time = datetime.fromtimestamp(
                timestamp, tz=dt_timezone.utc
            ).isoformat()
        except (OverflowError, OSError, ValueError) as e:
            raise RuntimeError(f"Malformed weather record: 'dt' is {timestamp!r}") from e

    return {
        "temp": main.get("temp", 0),
        "feels_like": main.get("feels_like", main.get("temp", 0)),
        "humidity": main.get("humidity", 0),
        "pressure": main.get("pressure", 0),
        "wind_speed": wind.get("speed", 0),
        "wind_deg": wind.get("deg", 0),
        "visibility": data.get("visibility", DEFAULT_VISIBILITY_M),
        "condition": condition.get("main", ""),
        "description": condition.get("description", ""),
        "icon": condition.get("icon", DEFAULT_ICON),
        "is_forecasted": is_forecasted,
        "forecast_time": forecast_time,
    }


def get_current_weather(lat: float, lng: float) -> dict:
    validate_coordinates(lat, lng)
    data = _request("weather", {"lat": lat, "lon": lng})
    if not data.get("main") or not data.get("weather"):
        logger.warning("Incomplete current-weather response for (%s, %s)", lat, lng)
    return normalize_record(data, is_forecasted=False)


def get_forecast(lat: float, lng: float) -> list[dict]:
    """Raw 3-hourly forecast slots for the next five days."""
    validate_coordinates(lat, lng)
    data = _request("forecast", {"lat": lat, "lon": lng})
    entries = data.get("list")
    if not isinstance(entries, list):
        raise RuntimeError("Invalid forecast response structure")
    if not entries:
        logger.warning("Empty forecast list for (%s, %s)", lat, lng)
    return entries


def select_closest_forecast(
    entries: list[dict],
    target: datetime,
) -> tuple[dict, float] | None:
    """
    Pick the forecast slot nearest to ``target``.

    Returns ``(entry, seconds_off)`` or ``None`` when no entry carries a
    usable timestamp.
    """
    target_ts = target.timestamp()
    best = None
    best_diff = math.inf
    for entry in entries:
        ts = entry.get("dt") if isinstance(entry, dict) else None
        if not _is_number(ts) or not math.isfinite(ts):
            logger.debug("Forecast entry without timestamp skipped")
            continue
        diff = abs(target_ts - ts)
        if diff < best_diff:
            best = entry
            best_diff = diff
    if best is None:
        return None
    return best, best_diff


def get_weather_at_time(
    lat: float,
    lng: float,
    minutes_from_now: float,
    now: datetime | None = None,
) -> dict:
    """
    Weather expected at (lat, lng) ``minutes_from_now`` minutes from now.

    Near-term requests (inside ``CURRENT_WEATHER_WINDOW_MINUTES``) use the
    current conditions.  Later ones use the closest forecast slot and fall
    back to current conditions if the forecast cannot be used.
    """
    validate_coordinates(lat, lng)
    if (
        isinstance(minutes_from_now, bool)
        or not isinstance(minutes_from_now, (int, float))
        or not math.isfinite(minutes_from_now)
        or minutes_from_now < 0
    ):
        raise ValueError(
            f"Invalid minutes_from_now value: {minutes_from_now!r}. "
            "Must be a non-negative number."
        )

    window = settings.ROUTE_WEATHER["CURRENT_WEATHER_WINDOW_MINUTES"]
    if minutes_from_now <= window:
        record = get_current_weather(lat, lng)
        record.update(minutes_from_now=minutes_from_now, time_difference_minutes=0)
        return record

    now = now or timezone.now()
    target = now + timedelta(minutes=minutes_from_now)
    try:
        closest = select_closest_forecast(get_forecast(lat, lng), target)
        if closest is None:
            raise RuntimeError("No valid forecast data found for the requested time")
        entry, diff_seconds = closest
        record = normalize_record(entry, is_forecasted=True)
    except RuntimeError as e:
        logger.warning(
            "Forecast for (%s, %s) at +%.0f min unavailable (%s); "
            "using current weather",
            lat, lng, minutes_from_now, e,
        )
        record = get_current_weather(lat, lng)
        record.update(
            minutes_from_now=minutes_from_now,
            time_difference_minutes=None,
            fallback_used=True,
        )
        return record

    record.update(
        minutes_from_now=minutes_from_now,
        time_difference_minutes=round(diff_seconds / 60),
    )
    return record


def describe_weather(record: dict | None) -> str:
    """``"light rain"`` -> ``"Light Rain"``; the condition when no description."""
    if not record:
        return "No data"
    description = record.get("description") or ""
    if isinstance(description, str) and description:
        return " ".join(word[:1].upper() + word[1:] for word in description.split(" "))
    return record.get("condition") or "Unknown"


def weather_icon_url(icon: str | None) -> str:
    if not icon or not isinstance(icon, str):
        icon = DEFAULT_ICON
    return ICON_URL.format(icon=icon)
