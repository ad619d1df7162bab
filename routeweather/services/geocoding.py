import logging
import time

from geopy.geocoders import Nominatim
from geopy.exc import GeocoderServiceError
from django.conf import settings

logger = logging.getLogger(__name__)

geolocator = Nominatim(
    user_agent=settings.NOMINATIM_USER_AGENT,
    timeout=10,
)

MAX_RETRIES = 3
RETRY_DELAY = 2
MAX_QUERY_LENGTH = 500


def _clean_query(query: str) -> str:
    if not isinstance(query, str) or not query.strip():
        raise ValueError("Address is required for geocoding")
    query = query.strip()
    if len(query) > MAX_QUERY_LENGTH:
        raise ValueError(
            f"Address too long: {len(query)} characters "
            f"(maximum {MAX_QUERY_LENGTH})"
        )
    return query


def _with_retries(func, query: str):
    last_error = None
    for attempt in range(1, MAX_RETRIES + 1):
        try:
            return func()
        except GeocoderServiceError as e:
            last_error = e
            delay = RETRY_DELAY * (2 ** (attempt - 1))
            logger.warning(
                "Nominatim failed for '%s' (attempt %d/%d): %s, retrying in %ds",
                query, attempt, MAX_RETRIES, e, delay,
            )
            time.sleep(delay)

    raise RuntimeError(
        f"Nominatim still failing after {MAX_RETRIES} retries: {last_error}"
    )


def search(query: str, limit: int = 5) -> list[dict]:
    """
    Candidate locations for a free-form address, best match first.

    Each candidate is ``{"display_name", "lat", "lng", "importance"}``.
    Candidates with out-of-range coordinates are dropped.
    """
    query = _clean_query(query)
    logger.debug("Searching locations: %s", query)

    locations = _with_retries(
        lambda: geolocator.geocode(query, exactly_one=False, limit=limit),
        query,
    ) or []

    results = []
    for location in locations:
        lat, lng = location.latitude, location.longitude
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
            logger.warning("Dropping invalid geocoding result: %s", location)
            continue
        results.append(
            {
                "display_name": location.address,
                "lat": lat,
                "lng": lng,
                "importance": location.raw.get("importance"),
            }
        )
    return results


def geocode(location_string: str) -> tuple[float, float]:
    """
    Geocode a location string to (latitude, longitude)
    using Nominatim agent (geopy).

    Retries up to MAX_RETRIES times with exponential backoff
    when Nominatim rate-limits or is unavailable.
    """
    query = _clean_query(location_string)
    logger.debug("Geocoding: %s", query)

    location = _with_retries(lambda: geolocator.geocode(query), query)
    if not location:
        raise ValueError(f"Could not geocode location: '{query}'")
    logger.debug(
        "Geocoded '%s' -> (%s, %s)",
        query, location.latitude, location.longitude,
    )
    return location.latitude, location.longitude
