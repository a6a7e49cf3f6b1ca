"""schoolpath - Walking routes and turn-by-turn directions to San Francisco schools."""

from .config import CONFIG
from .models import Junction, School, Turn, SearchTrace, RouteDescription
from .logger import Logger
from .geo import (
    expand_coords,
    how_far,
    find_azimuth,
    azimuth_to_direction,
    find_direction,
    format_distance,
    is_walkable,
    is_bikeable,
)
from .address import AddressBook, normalize_address, prettify_address
from .graph import JunctionGraph, build_street_index, address_coords
from .search import (
    PriorityQueue,
    BacktrackingSearch,
    a_star_search,
    backtracking_search,
    breadth_first_search,
    reconstruct_path,
)
from .planner import RoutePlanner, find_path, route_distance, street_index
from .directions import describe_route
from .route_log import SearchLog, evaluate_route
from .data import DatasetError, DatasetFetcher, load_addresses, load_graph, load_schools
from .export import route_kml, save_route_kml
from .route_viewer import create_route_map, save_route_map
from .__main__ import main

__all__ = [
    "CONFIG",
    "Junction",
    "School",
    "Turn",
    "SearchTrace",
    "RouteDescription",
    "Logger",
    "expand_coords",
    "how_far",
    "find_azimuth",
    "azimuth_to_direction",
    "find_direction",
    "format_distance",
    "is_walkable",
    "is_bikeable",
    "AddressBook",
    "normalize_address",
    "prettify_address",
    "JunctionGraph",
    "build_street_index",
    "address_coords",
    "PriorityQueue",
    "BacktrackingSearch",
    "a_star_search",
    "backtracking_search",
    "breadth_first_search",
    "reconstruct_path",
    "RoutePlanner",
    "find_path",
    "route_distance",
    "street_index",
    "describe_route",
    "SearchLog",
    "evaluate_route",
    "DatasetError",
    "DatasetFetcher",
    "load_addresses",
    "load_graph",
    "load_schools",
    "route_kml",
    "save_route_kml",
    "create_route_map",
    "save_route_map",
    "main",
]
