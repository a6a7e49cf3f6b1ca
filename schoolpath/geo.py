"""Geographic utility functions.

Distances treat the city as a flat plane: one degree of latitude is a fixed
number of miles, and one degree of longitude shrinks with the cosine of the
latitude. That is accurate enough at city scale (a 0.2% difference between the
northern and southern edges of San Francisco).
"""

import math
from typing import Optional, Sequence, Union

from .config import CONFIG
from .models import Coord

Packed = Sequence[Union[int, str]]


def expand_coords(packed: Optional[Packed]) -> Optional[Coord]:
    """Expand the fractional digits of a packed coordinate to full degrees.

    (7783, 5142) -> (37.7783, -122.5142)
    """
    if packed is None:
        return None
    if isinstance(packed, str) or len(packed) < 2:
        return None
    lat, lon = packed[0], packed[1]
    return (
        float(f"{CONFIG['city_lat_degrees']}.{lat}"),
        -float(f"{CONFIG['city_lon_degrees']}.{lon}"),
    )


def lat_to_miles(lat_diff: float) -> float:
    """Convert degrees of latitude to miles (roughly constant everywhere)"""
    return CONFIG["miles_per_degree_lat"] * lat_diff


def lon_to_miles_factor(lat: float) -> float:
    """Miles per degree of longitude at the given latitude"""
    return CONFIG["miles_per_degree_lat"] * math.cos(math.radians(lat))


def lon_to_miles(lon_diff: float, lat: float) -> float:
    """Convert degrees of longitude to miles at the given latitude"""
    return lon_to_miles_factor(lat) * lon_diff


def how_far_components(a: Optional[Coord], b: Optional[Coord]) -> Optional[tuple[float, float]]:
    """Distance from a to b as (east, north) components in miles"""
    if a is None or b is None:
        return None
    lat_mean = (a[0] + b[0]) / 2
    y = lat_to_miles(b[0] - a[0])
    x = lon_to_miles(b[1] - a[1], lat_mean)
    return (x, y)


def how_far(a: Optional[Coord], b: Optional[Coord]) -> float:
    """Distance in miles between two coordinates, as the crow flies.

    Returns infinity when either coordinate is unknown, so that a missing
    location can never be mistaken for a distance of zero.
    """
    components = how_far_components(a, b)
    if components is None:
        return math.inf
    return math.hypot(components[0], components[1])


def find_azimuth(a: Optional[Coord], b: Optional[Coord]) -> Optional[float]:
    """Calculate bearing from a to b in degrees (0-360, 0=North, 90=East)"""
    components = how_far_components(a, b)
    if components is None:
        return None
    x, y = components
    # Relative to north, so the arguments are swapped
    degrees = math.degrees(math.atan2(x, y))
    while degrees < 0:
        degrees += 360
    return degrees


def azimuth_to_direction(azimuth: Optional[float]) -> Optional[str]:
    """Convert an azimuth to one of eight compass directions"""
    if azimuth is None or math.isnan(azimuth):
        return None
    directions = ["N", "NE", "E", "SE", "S", "SW", "W", "NW"]
    index = int(((azimuth % 360) + 22.5) // 45) % 8
    return directions[index]


def find_direction(a: Optional[Coord], b: Optional[Coord]) -> Optional[str]:
    return azimuth_to_direction(find_azimuth(a, b))


def is_walkable(miles: float) -> bool:
    """Most people walk 2-4 MPH: a mile takes about 20 minutes at 3 MPH"""
    return miles <= CONFIG["walkable_miles"]


def is_bikeable(miles: float) -> bool:
    """Most people bike 5-10 MPH: 2.25 miles takes 15 minutes at 9 MPH"""
    return miles <= CONFIG["bikeable_miles"]


def format_distance(miles: Optional[float], show_label: bool = False) -> str:
    """Show a distance in feet if it's short, or miles otherwise"""
    if miles is None or math.isnan(miles):
        return ""
    label = ""
    if show_label and is_walkable(miles):
        label = " Walkable"
    elif show_label and is_bikeable(miles):
        label = " Bikeable"
    feet = miles * CONFIG["feet_per_mile"]
    if feet <= CONFIG["short_distance_feet"]:
        return f"{feet:.0f} ft.{label}"
    return f"{miles:.1f} mi.{label}"
