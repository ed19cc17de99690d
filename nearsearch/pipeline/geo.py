"""Great-circle distance and bounding-box approximation for radius search."""

import math

from nearsearch.core.schemas import BoundingBox, GeoPoint

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE_LAT = 111.32
KM_PER_MILE = 1.60934

# Floor for |cos(lat)| so the longitude delta never divides by ~0 near the poles.
MIN_COS_LAT = 1e-6
# Slack added to every box edge to absorb float error for points on the circle.
BOX_MARGIN_DEG = 1e-9


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance between two points in kilometres."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def flat_deltas(center: GeoPoint, radius_km: float) -> tuple[float, float]:
    """Quick (lat, lon) degree deltas using the 111.32 km/degree rule of thumb."""
    cos_lat = max(abs(math.cos(math.radians(center.latitude))), MIN_COS_LAT)
    return radius_km / KM_PER_DEGREE_LAT, radius_km / (KM_PER_DEGREE_LAT * cos_lat)


def bounding_box(center: GeoPoint, radius_km: float) -> BoundingBox:
    """Lat/lon window that contains every point within ``radius_km``.

    This is an over-approximation for a cheap pre-filter; callers must still
    apply ``distance_km`` to the survivors. The deltas are the exact spherical
    extents of the circle and are never narrower than ``flat_deltas``.
    """
    flat_lat, flat_lon = flat_deltas(center, radius_km)
    angular = radius_km / EARTH_RADIUS_KM
    lat_delta = max(math.degrees(angular), flat_lat) + BOX_MARGIN_DEG
    lat_min = center.latitude - lat_delta
    lat_max = center.latitude + lat_delta
    if lat_min <= -90.0 or lat_max >= 90.0:
        # A pole lies inside the circle: every longitude is reachable.
        return BoundingBox(
            lat_min=max(-90.0, lat_min), lat_max=min(90.0, lat_max), lon_min=-180.0, lon_max=180.0,
        )

    cos_lat = max(abs(math.cos(math.radians(center.latitude))), MIN_COS_LAT)
    ratio = math.sin(angular) / cos_lat
    if angular >= math.pi / 2 or ratio >= 1.0:
        return BoundingBox(lat_min=lat_min, lat_max=lat_max, lon_min=-180.0, lon_max=180.0)
    lon_delta = max(math.degrees(math.asin(ratio)), flat_lon) + BOX_MARGIN_DEG
    lon_min = center.longitude - lon_delta
    lon_max = center.longitude + lon_delta
    if lon_min < -180.0 or lon_max > 180.0:
        # Crosses the antimeridian; a single rectangle cannot express the wrap.
        return BoundingBox(lat_min=lat_min, lat_max=lat_max, lon_min=-180.0, lon_max=180.0)
    return BoundingBox(lat_min=lat_min, lat_max=lat_max, lon_min=lon_min, lon_max=lon_max)


def within_radius(center: GeoPoint, point: GeoPoint | None, radius_km: float) -> float | None:
    """Return the distance when ``point`` is inside the circle, else None.

    A missing point is never inside: it is filtered out, not treated as distance 0.
    """
    if point is None:
        return None
    d = distance_km(center, point)
    if d > radius_km:
        return None
    return d


def miles_to_km(miles: float) -> float:
    return miles * KM_PER_MILE
