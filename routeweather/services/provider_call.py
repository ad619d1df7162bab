import logging

import polyline as polyline_codec
import requests
from django.conf import settings

from . import converter
from .helper import compute_cumulative_distances

logger = logging.getLogger(__name__)

# Travel-mode tags accepted by the API -> OSRM profile names
PROFILE_MAPPING = {
    "driving-car": "driving",
    "cycling-regular": "cycling",
    "foot-walking": "foot",
    "driving": "driving",
    "cycling": "cycling",
    "walking": "foot",
    "foot": "foot",
}
DEFAULT_PROFILE = "driving"


def normalize_profile(travel_mode: str | None) -> str:
    profile = PROFILE_MAPPING.get(travel_mode)
    if profile is None:
        logger.warning(
            "Unknown travel mode %r, falling back to '%s'",
            travel_mode, DEFAULT_PROFILE,
        )
        return DEFAULT_PROFILE
    return profile


def get_route(
    start_lat: float,
    start_lng: float,
    end_lat: float,
    end_lng: float,
    travel_mode: str = "driving-car",
) -> dict:
    """
    Fetch the route A → B from OSRM.

    Returns
    -------
    dict
        ``encoded_polyline``     – Google-encoded polyline of the route
        ``points``               – decoded [(lat, lng), …]
        ``cumulative_distances`` – km from the start for each point
        ``distance_m``           – driving distance reported by OSRM
        ``distance_km``          – the same in kilometers
        ``duration_s``           – travel time reported by OSRM

    Raises
    ------
    ValueError
        If OSRM answers but finds no route.
    requests.RequestException
        On transport or HTTP errors.
    """
    config = settings.ROUTE_WEATHER
    base_url = config["OSRM_BASE_URL"]
    profile = normalize_profile(travel_mode)

    url = f"{base_url}/{profile}/{start_lng},{start_lat};{end_lng},{end_lat}"
    params = {
        "overview": "full",
        "geometries": "polyline",
    }
    logger.debug("Calling OSRM API with URL: %s", url)
    response = requests.get(url, params=params, timeout=config["OSRM_TIMEOUT"])
    response.raise_for_status()
    data = response.json()

    if data.get("code") != "Ok" or not data.get("routes"):
        raise ValueError(
            f"OSRM routing failed with code: {data.get('code', 'unknown')}"
        )
    route = data["routes"][0]
    encoded_polyline = route["geometry"]
    points = polyline_codec.decode(encoded_polyline)

    logger.info(
        "OSRM route (%s): %.0f m, %.0f s, %d points",
        profile, route["distance"], route["duration"], len(points),
    )
    return {
        "encoded_polyline": encoded_polyline,
        "points": points,
        "cumulative_distances": compute_cumulative_distances(points),
        "distance_m": route["distance"],
        "distance_km": converter.meters_to_km(route["distance"]),
        "duration_s": route["duration"],
    }
