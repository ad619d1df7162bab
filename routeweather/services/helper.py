import math
from bisect import bisect_right

EARTH_RADIUS_KM = 6371.0

GeoPoint = tuple[float, float]


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Return the great-circle distance **in kilometers** between two points."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = (
        math.sin(dphi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def compute_cumulative_distances(points: list[GeoPoint]) -> list[float]:
    """
    Given decoded polyline points [(lat, lng), …], return a list of
    cumulative distances **in kilometers** from the first point.
    """
    distances = [0.0]
    for i in range(1, len(points)):
        d = haversine(
            points[i - 1][0], points[i - 1][1],
            points[i][0], points[i][1],
        )
        distances.append(distances[-1] + d)
    return distances


def total_length(points: list[GeoPoint]) -> float:
    """Length of the polyline in km; 0 for fewer than two points."""
    if len(points) < 2:
        return 0.0
    return compute_cumulative_distances(points)[-1]


def point_at_distance(
    points: list[GeoPoint],
    distance_km: float,
    cumulative_distances: list[float] | None = None,
) -> GeoPoint:
    """
    Return the point lying ``distance_km`` along the polyline.

    The segment holding the requested distance is found by binary search
    over the cumulative distances, then latitude and longitude are
    interpolated linearly by the fraction of that segment.  This is a
    flat approximation inside each segment, fine at road-trip scale.

    Parameters
    ----------
    points :
        Polyline as [(lat, lng), …], at least one point.
    distance_km :
        Distance from the first point.  Values outside
        ``[0, total_length]`` are clamped to the nearest endpoint.
    cumulative_distances :
        Optional output of :func:`compute_cumulative_distances` for
        ``points``; pass it when querying the same polyline repeatedly.

    Returns
    -------
    (lat, lng)
    """
    if not points:
        raise ValueError("Cannot locate a point on an empty polyline")
    if cumulative_distances is None:
        cumulative_distances = compute_cumulative_distances(points)

    if distance_km <= 0.0 or len(points) == 1:
        return points[0]
    if distance_km >= cumulative_distances[-1]:
        return points[-1]

    i = bisect_right(cumulative_distances, distance_km) - 1
    seg_len = cumulative_distances[i + 1] - cumulative_distances[i]
    if seg_len <= 0.0:
        return points[i + 1]

    t = (distance_km - cumulative_distances[i]) / seg_len
    a_lat, a_lng = points[i]
    b_lat, b_lng = points[i + 1]
    return a_lat + t * (b_lat - a_lat), a_lng + t * (b_lng - a_lng)


def is_finite_point(point: GeoPoint | None) -> bool:
    """True for a (lat, lng) pair whose coordinates are both finite."""
    return point is not None and all(math.isfinite(c) for c in point)
