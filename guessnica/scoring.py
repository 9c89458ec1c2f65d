from math import radians, sin, cos, sqrt, atan2

# Mean Earth radius in meters
EARTH_RADIUS_METERS = 6_371_000.0

# Points awarded per difficulty level for a perfect, instant answer
POINTS_PER_DIFFICULTY = 1000

# Elapsed time at which the time factor has halved
TIME_SCALE_SECONDS = 300.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two points given in decimal degrees.
    Returns the distance in meters.
    """
    phi1 = radians(lat1)
    phi2 = radians(lat2)
    dphi = radians(lat2 - lat1)
    dlambda = radians(lon2 - lon1)

    a = sin(dphi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(dlambda / 2) ** 2
    # Rounding can push a marginally above 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * atan2(sqrt(a), sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


def is_answer_correct(
    distance_meters: float,
    time_seconds: int,
    max_distance_meters: float,
    time_limit_seconds: int,
) -> bool:
    """Close enough AND strictly within the time limit."""
    return distance_meters <= max_distance_meters and time_seconds < time_limit_seconds


def calculate_score(
    base_points: int, distance_meters: float, time_seconds: float, max_distance: float
) -> int:
    """
    Score a guess.

    Starts from base_points * POINTS_PER_DIFFICULTY for an exact, instant
    answer and falls off hyperbolically: divided by (1 + distance / max_distance)
    and by (1 + time / TIME_SCALE_SECONDS). The slow tail keeps guesses
    kilometres away distinguishable from each other.
    """
    distance_meters = max(0.0, distance_meters)
    time_seconds = max(0.0, time_seconds)

    if max_distance <= 0:
        if distance_meters > 0:
            return 0
        distance_ratio = 0.0
    else:
        distance_ratio = distance_meters / max_distance

    distance_factor = 1 / (1 + distance_ratio)
    time_factor = 1 / (1 + time_seconds / TIME_SCALE_SECONDS)

    return max(0, round(base_points * POINTS_PER_DIFFICULTY * distance_factor * time_factor))
