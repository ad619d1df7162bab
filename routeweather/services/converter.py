METERS_PER_KM = 1000.0


def meters_to_km(meters):
    """
    Convert meters to kilometers
    """
    return meters / METERS_PER_KM


def km_to_meters(km):
    """
    Convert kilometers to meters
    """
    return km * METERS_PER_KM
