"""Approximate geocoding of free-text locations against a fixed city table.

There is no external geocoding service: an address or a city preference is
matched by substring against ``CITY_COORDINATES``. Anything unrecognised
falls back to the configured default city so matching never aborts on a
location it cannot place.
"""

from __future__ import annotations

from roomfinder.config import config
from roomfinder.utils.geo import Coordinate
from roomfinder.utils.logging_config import logger

# Scanned in order and the first contained name wins, so names that contain
# another entry ("greater noida" > "noida") must come first.
CITY_COORDINATES: dict[str, Coordinate] = {
    "greater noida": Coordinate(28.4744, 77.5040),
    "noida": Coordinate(28.5355, 77.3910),
    "new delhi": Coordinate(28.6139, 77.2090),
    "delhi": Coordinate(28.7041, 77.1025),
    "gurugram": Coordinate(28.4595, 77.0266),
    "gurgaon": Coordinate(28.4595, 77.0266),
    "ghaziabad": Coordinate(28.6692, 77.4538),
    "faridabad": Coordinate(28.4089, 77.3178),
    "navi mumbai": Coordinate(19.0330, 73.0297),
    "mumbai": Coordinate(19.0760, 72.8777),
    "pune": Coordinate(18.5204, 73.8567),
    "bangalore": Coordinate(12.9716, 77.5946),
    "bengaluru": Coordinate(12.9716, 77.5946),
    "hyderabad": Coordinate(17.3850, 78.4867),
    "chennai": Coordinate(13.0827, 80.2707),
    "kolkata": Coordinate(22.5726, 88.3639),
    "ahmedabad": Coordinate(23.0225, 72.5714),
    "jaipur": Coordinate(26.9124, 75.7873),
    "lucknow": Coordinate(26.8467, 80.9462),
    "chandigarh": Coordinate(30.7333, 76.7794),
    "indore": Coordinate(22.7196, 75.8577),
    "bhopal": Coordinate(23.2599, 77.4126),
    "kochi": Coordinate(9.9312, 76.2673),
}


def default_coordinates() -> Coordinate:
    """Coordinate of the configured default city."""

    return CITY_COORDINATES[config.DEFAULT_CITY.lower()]


def find_city(location: str) -> str | None:
    """Return the first known city name contained in ``location``."""

    needle = location.lower()
    for city in CITY_COORDINATES:
        if city in needle:
            return city
    return None


def resolve_coordinates(location: str | None) -> Coordinate | None:
    """Resolve a free-text location to approximate coordinates.

    Returns None for empty input (no location known). Input that names no
    known city resolves to the default city instead of failing.
    """

    if not location or not location.strip():
        return None

    city = find_city(location)
    if city is None:
        logger.debug("No known city in location; using default %s", config.DEFAULT_CITY)
        return default_coordinates()

    return CITY_COORDINATES[city]
