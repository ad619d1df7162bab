"""Map renderer: draw the route polyline and its weather waypoints on an
OpenStreetMap static image, save it to Django media storage, and return
the relative path.

Uses the ``staticmap`` library which fetches OSM tiles and composites
them locally.  No API key required.
"""

import io
import logging
import uuid

import polyline as polyline_codec
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage
from staticmap import StaticMap, Line, CircleMarker

logger = logging.getLogger(__name__)

# Map dimensions (pixels)
MAP_WIDTH = 800
MAP_HEIGHT = 500

# Sub-directory inside MEDIA_ROOT
MAP_UPLOAD_DIR = "route_maps"


def build_route_map(
    encoded_polyline: str,
    waypoints: list[dict] | None = None,
) -> StaticMap:
    points = polyline_codec.decode(encoded_polyline)

    m = StaticMap(
        MAP_WIDTH, MAP_HEIGHT,
        url_template="https://tile.openstreetmap.org/{z}/{x}/{y}.png",
    )

    # staticmap wants (lng, lat)
    route_coords = [(lng, lat) for lat, lng in points]
    if route_coords:
        m.add_line(Line(route_coords, color="blue", width=3))

    if waypoints:
        for wp in waypoints[1:-1]:
            m.add_marker(CircleMarker((wp["lng"], wp["lat"]), color="orange", width=8))

    if route_coords:
        m.add_marker(CircleMarker(route_coords[0], color="green", width=12))
        m.add_marker(CircleMarker(route_coords[-1], color="red", width=12))
    return m


def render_route_map(
    encoded_polyline: str,
    waypoints: list[dict] | None = None,
) -> str:
    """
    Render the route polyline (and optional waypoint markers) onto a
    static OSM map, save it to media storage, and return the relative
    file path (e.g. ``route_maps/abc123.png``).

    Parameters
    ----------
    encoded_polyline :
        Google-encoded polyline string.
    waypoints :
        Optional list of waypoint dicts, each with ``lat`` and ``lng`` keys.
        The first and last are drawn as start / end markers.

    Returns
    -------
    str
        Relative path inside MEDIA_ROOT.
    """
    image = build_route_map(encoded_polyline, waypoints).render()

    buf = io.BytesIO()
    image.save(buf, format="PNG")
    buf.seek(0)

    filename = f"{MAP_UPLOAD_DIR}/{uuid.uuid4().hex}.png"
    saved_path = default_storage.save(filename, ContentFile(buf.read()))

    logger.debug("Saved route map: %s", saved_path)
    return saved_path
